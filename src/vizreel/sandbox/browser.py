"""Headless Chromium sandbox driven through Playwright."""

import asyncio
import logging

from playwright.async_api import Browser, Page, Playwright, Route, async_playwright
from playwright.async_api import Error as PlaywrightError

from vizreel.config import Settings, get_settings
from vizreel.models.errors import SandboxError
from vizreel.models.request import RenderMode, RenderRequest, Script
from vizreel.sandbox.base import FrameResult, Sandbox
from vizreel.sandbox.page import ADVANCE_SCRIPT, INIT_SCRIPT, build_page_html

logger = logging.getLogger(__name__)

_INLINE_SCHEMES = ("data:", "blob:", "about:")


class BrowserSandbox(Sandbox):
    """Runs a script in its own headless Chromium process.

    Each operation is bounded by a wall-clock timeout; a timeout is recorded
    as the sandbox error just like an exception thrown by the script.
    """

    def __init__(
        self,
        width: int,
        height: int,
        mode: RenderMode = RenderMode.BASIC,
        settings: Settings | None = None,
    ):
        super().__init__()
        self.settings = settings or get_settings()
        self.width = width
        self.height = height
        self.mode = RenderMode(mode)
        self.library_urls = list(self.settings.library_urls.get(self.mode.value, []))
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._page: Page | None = None

    @classmethod
    def for_request(
        cls, request: RenderRequest, settings: Settings | None = None
    ) -> "BrowserSandbox":
        return cls(request.width, request.height, request.mode, settings)

    async def start(self, script: Script) -> FrameResult:
        if not script.validated:
            raise SandboxError("Refusing to execute a script that has not been validated")
        timeout = self.settings.sandbox_init_timeout_seconds
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=True, args=self.settings.sandbox_browser_args
            )
            context = await self._browser.new_context(
                viewport={"width": self.width, "height": self.height},
                device_scale_factor=1,
            )
            self._page = await context.new_page()
            self._page.on("pageerror", self._on_page_error)
            if not self.settings.sandbox_allow_network:
                await self._page.route("**/*", self._filter_request)

            await asyncio.wait_for(
                self._page.set_content(build_page_html(self.library_urls), wait_until="load"),
                timeout,
            )
            result = await asyncio.wait_for(self._page.evaluate(INIT_SCRIPT, script.code), timeout)
        except TimeoutError:
            return self._record_error(f"Sandbox setup timed out after {timeout:g}s")
        except PlaywrightError as e:
            return self._record_error(f"Sandbox setup failed: {e}")

        if not result.get("ok"):
            return self._record_error(result.get("error") or "Script setup failed")
        if self._error is not None:
            return FrameResult.failure(self._error)
        logger.debug("Sandbox ready (%s, %dx%d)", self.mode.value, self.width, self.height)
        return FrameResult.success()

    async def advance_frame(self, index: int) -> FrameResult:
        if self._error is not None:
            return FrameResult.failure(self._error)
        if self._page is None or self._closed:
            return self._record_error("Sandbox is not running")

        timeout = self.settings.sandbox_frame_timeout_seconds
        try:
            result = await asyncio.wait_for(self._page.evaluate(ADVANCE_SCRIPT, index), timeout)
        except TimeoutError:
            return self._record_error(f"Frame {index} timed out after {timeout:g}s")
        except PlaywrightError as e:
            return self._record_error(f"Frame {index} failed: {e}")

        if not result.get("ok"):
            return self._record_error(result.get("error") or f"Frame {index} failed")
        # An uncaught error from a callback the hook scheduled
        if self._error is not None:
            return FrameResult.failure(self._error)
        return FrameResult.success()

    async def snapshot(self) -> bytes:
        if self._page is None or self._closed:
            raise SandboxError("Sandbox is not running")
        timeout = self.settings.sandbox_snapshot_timeout_seconds
        try:
            return await asyncio.wait_for(
                self._page.screenshot(type="png", timeout=timeout * 1000), timeout
            )
        except TimeoutError:
            self._record_error(f"Snapshot timed out after {timeout:g}s")
            raise SandboxError(self._error)
        except PlaywrightError as e:
            self._record_error(f"Snapshot failed: {e}")
            raise SandboxError(self._error)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        timeout = self.settings.sandbox_init_timeout_seconds
        if self._browser is not None:
            try:
                await asyncio.wait_for(self._browser.close(), timeout)
            except (TimeoutError, PlaywrightError) as e:
                logger.warning("Browser did not close cleanly: %s", e)
        if self._playwright is not None:
            try:
                await asyncio.wait_for(self._playwright.stop(), timeout)
            except (TimeoutError, PlaywrightError) as e:
                logger.warning("Playwright did not stop cleanly: %s", e)
        self._page = None
        self._browser = None
        self._playwright = None

    def _on_page_error(self, error) -> None:
        logger.warning("Uncaught error in sandbox page: %s", error)
        self._record_error(f"Uncaught page error: {error}")

    async def _filter_request(self, route: Route) -> None:
        url = route.request.url
        if url in self.library_urls or url.startswith(_INLINE_SCHEMES):
            await route.continue_()
        else:
            logger.info("Blocked sandbox request to %s", url)
            await route.abort()
