"""Structural checks a script must pass before it is executed.

The checks are textual. They prove the script has the shape the pipeline
needs (a scene, a camera, a renderer, something added to the scene, a render
call and a per-frame hook) but say nothing about whether it runs.
"""

import logging
import re

from vizreel.models.errors import ValidationError
from vizreel.models.request import Script
from vizreel.models.validation import ValidationResult

logger = logging.getLogger(__name__)

FRAME_HOOK_NAME = "renderFrame"

_ASSIGN = r"(?:(?:const|let|var)\s+)?([A-Za-z_$][\w$.]*)\s*=\s*"

# three.js
_THREE_SCENE = re.compile(_ASSIGN + r"new\s+THREE\.Scene\s*\(")
_THREE_CAMERA = re.compile(r"new\s+THREE\.\w*Camera\s*\(")
_THREE_RENDERER = re.compile(_ASSIGN + r"new\s+THREE\.WebGLRenderer\s*\(")

# babylon.js
_BABYLON_ENGINE = re.compile(_ASSIGN + r"new\s+BABYLON\.Engine\s*\(")
_BABYLON_SCENE = re.compile(_ASSIGN + r"new\s+BABYLON\.Scene\s*\(")
_BABYLON_CAMERA = re.compile(r"new\s+BABYLON\.\w*Camera\s*\(")
_BABYLON_MESH = re.compile(
    r"(?:BABYLON\.MeshBuilder\.Create\w+|BABYLON\.Mesh\.Create\w+|new\s+BABYLON\.Mesh)\s*\("
)

_FRAME_HOOK = re.compile(
    r"(?:window|globalThis|self)\." + FRAME_HOOK_NAME + r"\s*=\s*"
    r"(?:"
    r"(?:async\s+)?function\s*\w*\s*\(\s*[A-Za-z_$][\w$]*\s*(?:=[^,)]*)?\)"
    r"|\(\s*[A-Za-z_$][\w$]*\s*(?:=[^,)]*)?\)\s*=>"
    r"|[A-Za-z_$][\w$]*\s*=>"
    r")"
)

# One left-to-right scan: a string literal (group 1) is kept whole, so comment
# markers inside it are ignored, and whichever comment opens first wins.
_STRING_OR_COMMENT = re.compile(
    r"""('(?:\\.|[^'\\\n])*'|"(?:\\.|[^"\\\n])*"|`(?:\\.|[^`\\])*`)"""
    r"|//[^\n]*"
    r"|/\*.*?(?:\*/|\Z)",
    re.DOTALL,
)


def _strip_comments(code: str) -> str:
    """Remove comments so commented-out code cannot satisfy a check."""
    return _STRING_OR_COMMENT.sub(lambda m: m.group(1) or " ", code)


def _method_called(code: str, names: list[str], method: str) -> bool:
    for name in names:
        if re.search(re.escape(name) + r"\s*\.\s*" + method + r"\s*\(", code):
            return True
    return False


def _check_three(code: str) -> list[str]:
    missing = []
    scenes = _THREE_SCENE.findall(code)
    renderers = _THREE_RENDERER.findall(code)
    if not scenes:
        missing.append("scene")
    if not _THREE_CAMERA.search(code):
        missing.append("camera")
    if not renderers:
        missing.append("renderer")
    if not _method_called(code, scenes, "add"):
        missing.append("scene_add")
    if not _method_called(code, renderers, "render"):
        missing.append("render_call")
    return missing


def _check_babylon(code: str) -> list[str]:
    missing = []
    engines = _BABYLON_ENGINE.findall(code)
    scenes = _BABYLON_SCENE.findall(code)
    if not scenes:
        missing.append("scene")
    if not _BABYLON_CAMERA.search(code):
        missing.append("camera")
    if not engines:
        missing.append("renderer")
    # Babylon meshes attach to the active scene on construction
    if not _BABYLON_MESH.search(code) and not _method_called(code, scenes, "addMesh"):
        missing.append("scene_add")
    if not (
        _method_called(code, scenes, "render") or _method_called(code, engines, "runRenderLoop")
    ):
        missing.append("render_call")
    return missing


_DESCRIPTIONS = {
    "scene": "create a scene",
    "camera": "create a camera",
    "renderer": "create a renderer or engine",
    "scene_add": "add at least one visual object to the scene",
    "render_call": "issue a render call",
    "frame_hook": f"assign window.{FRAME_HOOK_NAME} a function taking the frame index",
}


class SceneValidator:
    """Checks generated scripts for the structure the pipeline relies on."""

    def validate(self, script: Script | None) -> ValidationResult:
        """Return ``ok=True`` only if every structural element is present."""
        if script is None or not script.code.strip():
            return ValidationResult(ok=False, reason="No script available", missing=["script"])

        code = _strip_comments(script.code)
        if "BABYLON." in code and "THREE." not in code:
            backend = "babylon"
            missing = _check_babylon(code)
        else:
            backend = "three"
            missing = _check_three(code)

        if not _FRAME_HOOK.search(code):
            missing.append("frame_hook")

        if missing:
            reason = "Script must " + "; ".join(_DESCRIPTIONS[m] for m in missing)
            logger.info("Script rejected (%s): missing %s", backend, ", ".join(missing))
            return ValidationResult(ok=False, reason=reason, missing=missing, backend=backend)
        return ValidationResult(ok=True, backend=backend)

    def require_valid(self, script: Script | None) -> Script:
        """Validate and return a ``validated`` copy, or raise ValidationError."""
        result = self.validate(script)
        if not result.ok:
            raise ValidationError(
                result.reason or "Script failed validation",
                details={"missing": result.missing, "backend": result.backend},
            )
        return script.model_copy(update={"validated": True})
