"""Domain reference text appended to code-generation prompts."""

import math

SUPPORTED_SHAPES = [
    "sphere",
    "box",
    "cylinder",
    "cone",
    "torus",
    "capsule",
    "plane",
    "particle",
    "compound",
    "softbody",
    "cloth",
    "rope",
]

CREATION_SNIPPETS = {
    "sphere": "new THREE.Mesh(new THREE.SphereGeometry(radius, 32, 32), material)",
    "box": "new THREE.Mesh(new THREE.BoxGeometry(width, height, depth), material)",
    "plane": "new THREE.Mesh(new THREE.PlaneGeometry(width, height), material)",
    "cylinder": (
        "new THREE.Mesh(new THREE.CylinderGeometry(radiusTop, radiusBottom, height, 32), material)"
    ),
    "cone": "new THREE.Mesh(new THREE.ConeGeometry(radius, height, 32), material)",
    "torus": "new THREE.Mesh(new THREE.TorusGeometry(radius, tube, 16, 100), material)",
    "capsule": "new THREE.Mesh(new THREE.CapsuleGeometry(radius, length, 8, 16), material)",
    "compound": "a THREE.Group() holding several meshes",
    "softbody": "per-frame vertex displacement on a subdivided geometry",
    "cloth": "a subdivided PlaneGeometry animated per vertex",
    "rope": "THREE.Line through points updated with distance constraints",
    "particle": "new THREE.Points(geometry, new THREE.PointsMaterial({ size }))",
}

USAGE_SCENARIOS = {
    "sphere": "balls, planets, bubbles, or any round object",
    "box": "crates, buildings, dice, or any rectangular object",
    "plane": "ground, walls, water surfaces, or backgrounds",
    "cylinder": "pillars, cans, tubes, or wheels",
    "cone": "trees, spikes, or cones",
    "torus": "rings, donuts, or loops",
    "capsule": "characters, pills, or rounded bars",
    "compound": "complex objects made from multiple shapes",
    "softbody": "jelly or other deformable objects",
    "cloth": "flags, curtains, or clothing",
    "rope": "ropes, cables, or chains",
    "particle": "smoke, fire, rain, or other effects",
}

RECOMMENDED_PHYSICS = {
    "sphere": "rolling, bouncing, and collision",
    "box": "stacking, sliding, and collision",
    "cylinder": "rolling, stacking, and collision",
    "cone": "stacking, collision, and projectiles",
    "torus": "rolling and spinning",
    "capsule": "character controllers, collision, and rolling",
    "plane": "ground, walls, or boundaries",
    "particle": "particle systems and point masses",
    "compound": "vehicles and articulated bodies",
    "softbody": "jelly and deformable simulations",
    "cloth": "flag, curtain, or clothing simulation",
    "rope": "ropes, cables, or chains with constraints",
}

PHYSICS_SCENARIOS = [
    "gravity",
    "collision",
    "friction",
    "bouncing",
    "rolling",
    "sliding",
    "stacking",
    "breaking",
    "softbody deformation",
    "fluid simulation",
    "wind",
    "constraints (hinge, spring, etc.)",
]

MATH_HELPERS = [
    "vector math",
    "geometry",
    "calculus",
    "statistics",
    "trigonometry",
    "randomization",
    "physics helpers (drag, buoyancy, Reynolds number)",
]


class KnowledgeBase:
    """Static reference for supported shapes, physics and maths."""

    def supported_shapes(self) -> list[str]:
        return list(SUPPORTED_SHAPES)

    def physics_scenarios(self) -> list[str]:
        return list(PHYSICS_SCENARIOS)

    def recommended_physics(self, shape: str) -> str:
        return RECOMMENDED_PHYSICS.get(shape, "general 3D object")

    def shape_properties(self, shape: str, **params: float) -> dict:
        """Geometric properties of a shape from its dimensions."""
        if shape == "sphere":
            r = params["radius"]
            return {"volume": 4 / 3 * math.pi * r**3, "surface_area": 4 * math.pi * r**2}
        if shape == "box":
            w, h, d = params["width"], params["height"], params["depth"]
            return {"volume": w * h * d, "surface_area": 2 * (w * h + w * d + h * d)}
        if shape == "cylinder":
            r, h = params["radius"], params["height"]
            return {"volume": math.pi * r**2 * h, "surface_area": 2 * math.pi * r * (r + h)}
        if shape == "cone":
            r, h = params["radius"], params["height"]
            slant = math.sqrt(h**2 + r**2)
            return {"volume": math.pi * r**2 * h / 3, "surface_area": math.pi * r * (r + slant)}
        if shape == "torus":
            r, tube = params["radius"], params["tube"]
            return {
                "volume": 2 * math.pi**2 * r * tube**2,
                "surface_area": 4 * math.pi**2 * r * tube,
            }
        if shape == "capsule":
            r, h = params["radius"], params["height"]
            return {
                "volume": math.pi * r**2 * h + 4 / 3 * math.pi * r**3,
                "surface_area": 2 * math.pi * r * h + 4 * math.pi * r**2,
            }
        if shape in ("plane", "cloth"):
            return {"area": params["width"] * params["height"]}
        if shape == "rope":
            return {"length": params["length"]}
        return {}

    def summary(self) -> str:
        """Plain-text context block for the code generator prompt."""
        lines = [
            f"Supported physics objects: {', '.join(SUPPORTED_SHAPES)}.",
            "",
            "Creation snippets:",
        ]
        lines += [f"- {shape}: {CREATION_SNIPPETS[shape]}" for shape in SUPPORTED_SHAPES]
        lines += ["", "Usage scenarios:"]
        lines += [f"- {shape}: use for {USAGE_SCENARIOS[shape]}." for shape in SUPPORTED_SHAPES]
        lines += [
            "",
            f"Common physics scenarios: {', '.join(PHYSICS_SCENARIOS)}.",
            f"Mathematics available: {', '.join(MATH_HELPERS)}.",
        ]
        return "\n".join(lines)
