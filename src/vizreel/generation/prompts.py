"""Prompt templates for visualization code generation."""

from vizreel.models.request import RenderMode, compute_frame_count

_HOOK_RULES = (
    "Rules:\n"
    "1. Output a single self-contained JavaScript program, no HTML and no imports\n"
    "2. The libraries are already loaded as globals; do not load scripts\n"
    "3. Size the canvas with window.innerWidth and window.innerHeight\n"
    "4. Define window.renderFrame = function (frame) { ... } which updates the "
    "scene for the integer frame index and renders it once\n"
    "5. Do not use requestAnimationFrame, timers, or Date.now(); all motion must "
    "be a pure function of the frame index\n"
    "6. Do not touch the network, storage, or the DOM outside the canvas\n"
)

SYSTEM_PROMPTS = {
    RenderMode.BASIC: (
        "You are an expert three.js developer. You write scripts that build a "
        "3D scene with THREE.Scene, a camera, a THREE.WebGLRenderer created "
        "with preserveDrawingBuffer: true, add meshes and lights with "
        "scene.add(), and draw with renderer.render(scene, camera).\n\n" + _HOOK_RULES
    ),
    RenderMode.ADVANCED: (
        "You are an expert babylon.js developer. You write scripts that create "
        "a canvas, a BABYLON.Engine with preserveDrawingBuffer: true, a "
        "BABYLON.Scene, a camera and lights, build meshes with "
        "BABYLON.MeshBuilder, and draw with scene.render().\n\n" + _HOOK_RULES
    ),
    RenderMode.PRO: (
        "You are an expert creative coder using three.js, gsap and "
        "troika-three-text. Build the scene with THREE.Scene, a camera and a "
        "THREE.WebGLRenderer created with preserveDrawingBuffer: true; use "
        "paused gsap timelines seeked by frame time and troika Text meshes "
        "for labels; draw with renderer.render(scene, camera).\n\n" + _HOOK_RULES
    ),
}

GUIDELINES = [
    "Follow principles of good design (composition, color, balance, contrast, clarity)",
    "Obey physics (gravity, inertia, collisions, realistic motion)",
    "Promote realism and avoid abstract visuals unless explicitly requested",
    "Animate at least one property across the whole duration",
    "The animation must stay meaningful for the full requested duration",
]

SCENE_PLAN = (
    "Scene plan:\n"
    "- Main object: use a relevant shape for the concept.\n"
    "- Add a ground plane if appropriate.\n"
    "- Add lighting for realism.\n"
    "- Animate at least one property (rotation, position, scale, color, etc.)."
)


def build_prompt_context(
    prompt: str,
    duration_minutes: float,
    mode: RenderMode,
    knowledge_summary: str,
) -> str:
    """Combine the user prompt with domain context and a scene plan."""
    return (
        f"Prompt: {prompt}\n"
        f"Duration: {duration_minutes:g} minute(s)\n"
        f"Mode: {RenderMode(mode).value}\n\n"
        f"{knowledge_summary}\n\n"
        f"{SCENE_PLAN}\n"
    )


def build_generation_prompt(prompt_context: str, duration_minutes: float, fps: int = 30) -> str:
    """Build the user message sent to the LLM."""
    total_frames = compute_frame_count(duration_minutes, fps)
    guidelines = "\n".join(f"- {g}" for g in GUIDELINES)
    return f"""Write a visualization script for the following request.

{prompt_context}
## Timing
renderFrame will be called with frame = 0 .. {total_frames - 1} at {fps} fps
({duration_minutes:g} minute(s) of video).

## Guidelines
{guidelines}

Respond with ONLY the JavaScript code in a single ```javascript block."""
