"""LLM response parser for generated scripts."""

import re

from vizreel.models.errors import GenerationError

_FENCE_RE = re.compile(r"```(?:javascript|js|typescript|ts)?[ \t]*\n(.*?)```", re.DOTALL)


def extract_code(response_text: str | None) -> str:
    """Pull script text out of an LLM response, handling markdown fences."""
    text = (response_text or "").strip()
    if not text:
        raise GenerationError("LLM returned an empty response")

    blocks = _FENCE_RE.findall(text)
    if blocks:
        # The longest block is the program; shorter ones are usually usage notes
        text = max(blocks, key=len).strip()
    elif text.startswith("```"):
        text = text.strip("`").strip()

    if not text:
        raise GenerationError(
            "LLM response contained no code",
            details={"response_preview": (response_text or "")[:200]},
        )
    return text
