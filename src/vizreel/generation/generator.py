"""Code generator — LLM-backed visualization script author."""

import logging
import re

from openai import OpenAI

from vizreel.config import get_settings
from vizreel.generation.parser import extract_code
from vizreel.generation.prompts import SYSTEM_PROMPTS, build_generation_prompt
from vizreel.generation.templates import template_for
from vizreel.models.errors import GenerationError
from vizreel.models.request import RenderMode, Script

logger = logging.getLogger(__name__)

_PROMPT_LINE = re.compile(r"^Prompt:\s*(.*)$", re.MULTILINE)


class CodeGenerator:
    """Turns a prompt context into a script using an LLM or built-in templates.

    The pipeline does not trust anything produced here; every script still
    goes through the scene validator before it is executed.
    """

    def __init__(
        self,
        client: OpenAI | None = None,
        model: str | None = None,
        template_fallback: bool | None = None,
    ):
        settings = get_settings()
        self.model = model or settings.openai_model
        self.temperature = settings.openai_temperature
        self.template_fallback = (
            settings.generator_template_fallback if template_fallback is None else template_fallback
        )
        self.client = client
        if self.client is None and settings.openai_api_key:
            self.client = OpenAI(api_key=settings.openai_api_key)

    def generate(
        self,
        prompt_context: str,
        duration_minutes: float,
        mode: RenderMode | str = RenderMode.BASIC,
        fps: int = 30,
    ) -> Script:
        """Return a script for the context; falls back to a template if allowed."""
        mode = RenderMode(mode)

        if self.client:
            try:
                code = self._call_llm(prompt_context, duration_minutes, mode, fps)
                return Script(code=code, mode=mode, source="llm")
            except Exception as e:
                if not self.template_fallback:
                    raise GenerationError(
                        f"Code generation failed: {e}", details={"model": self.model}
                    )
                logger.warning(f"LLM code generation failed, using template: {e}")
        elif not self.template_fallback:
            raise GenerationError("No LLM client configured and template fallback is disabled")

        match = _PROMPT_LINE.search(prompt_context)
        keywords = match.group(1) if match else prompt_context
        return Script(code=template_for(keywords, mode), mode=mode, source="template")

    def _call_llm(
        self,
        prompt_context: str,
        duration_minutes: float,
        mode: RenderMode,
        fps: int,
    ) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPTS[mode]},
                {
                    "role": "user",
                    "content": build_generation_prompt(prompt_context, duration_minutes, fps),
                },
            ],
            temperature=self.temperature,
        )
        return extract_code(response.choices[0].message.content)
