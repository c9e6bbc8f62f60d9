"""Sandbox handle contract shared by the capturer and the pipeline."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from vizreel.models.request import Script


@dataclass(frozen=True)
class FrameResult:
    """Outcome of one sandbox operation: success, or the script's error."""

    ok: bool
    error: str | None = None

    @classmethod
    def success(cls) -> "FrameResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: str) -> "FrameResult":
        return cls(ok=False, error=error)


class Sandbox(ABC):
    """Isolated runtime that executes one validated script for one job.

    The first error (from setup, a frame advance, or an uncaught page error)
    is sticky: once ``error_state`` is set it stays set, and later advances
    report it without touching the script again.
    """

    def __init__(self):
        self._error: str | None = None
        self._closed = False

    @property
    def error_state(self) -> str | None:
        return self._error

    @property
    def closed(self) -> bool:
        return self._closed

    def _record_error(self, message: str) -> FrameResult:
        if self._error is None:
            self._error = message
        return FrameResult.failure(self._error)

    @abstractmethod
    async def start(self, script: Script) -> FrameResult:
        """Load libraries and run the script once to build the scene."""
        ...

    @abstractmethod
    async def advance_frame(self, index: int) -> FrameResult:
        """Invoke the script's per-frame hook for ``index``."""
        ...

    @abstractmethod
    async def snapshot(self) -> bytes:
        """Return the current visual output as PNG bytes at the job resolution."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release every resource. Safe to call repeatedly and after failures."""
        ...

    async def __aenter__(self) -> "Sandbox":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
