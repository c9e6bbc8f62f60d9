"""Built-in scripts used when no LLM is available."""

import re

from vizreel.models.request import RenderMode

_THREE_SETUP = """
const scene = new THREE.Scene();
const camera = new THREE.PerspectiveCamera(75, window.innerWidth / window.innerHeight, 0.1, 1000);
const renderer = new THREE.WebGLRenderer({ preserveDrawingBuffer: true, antialias: true });
renderer.setClearColor(%(clear)s);
renderer.setSize(window.innerWidth, window.innerHeight);
document.body.appendChild(renderer.domElement);
"""

SOLAR_SYSTEM = (
    _THREE_SETUP % {"clear": "0x000000"}
    + """
const sun = new THREE.Mesh(
  new THREE.SphereGeometry(0.7, 32, 32),
  new THREE.MeshBasicMaterial({ color: 0xffff00 })
);
scene.add(sun);

const earth = new THREE.Mesh(
  new THREE.SphereGeometry(0.2, 32, 32),
  new THREE.MeshPhongMaterial({ color: 0x2266ff })
);
scene.add(earth);

const light = new THREE.PointLight(0xffffff, 1, 100);
light.position.set(5, 5, 5);
scene.add(light);

camera.position.z = 3;

window.renderFrame = function (frame) {
  const t = frame * 0.01;
  earth.position.x = Math.cos(t) * 1.5;
  earth.position.z = Math.sin(t) * 1.5;
  renderer.render(scene, camera);
};
"""
)

BOUNCING_BALL = (
    _THREE_SETUP % {"clear": "0x222233"}
    + """
const ball = new THREE.Mesh(
  new THREE.SphereGeometry(0.3, 32, 32),
  new THREE.MeshPhongMaterial({ color: 0xff3333, shininess: 100 })
);
scene.add(ball);

const floor = new THREE.Mesh(
  new THREE.BoxGeometry(2, 0.1, 2),
  new THREE.MeshPhongMaterial({ color: 0x888888 })
);
floor.position.y = -0.5;
scene.add(floor);

const light = new THREE.PointLight(0xffffff, 1, 100);
light.position.set(5, 5, 5);
scene.add(light);

camera.position.z = 3;

window.renderFrame = function (frame) {
  const t = frame * 0.05;
  ball.position.y = Math.abs(Math.sin(t)) - 0.2;
  renderer.render(scene, camera);
};
"""
)

SPINNING_CUBE = (
    _THREE_SETUP % {"clear": "0x222233"}
    + """
const light = new THREE.PointLight(0xffffff, 1, 100);
light.position.set(10, 10, 10);
scene.add(light);

const cube = new THREE.Mesh(
  new THREE.BoxGeometry(),
  new THREE.MeshPhongMaterial({ color: 0x00ffcc, shininess: 100 })
);
scene.add(cube);

camera.position.z = 5;

window.renderFrame = function (frame) {
  cube.rotation.x = frame * 0.01;
  cube.rotation.y = frame * 0.01;
  renderer.render(scene, camera);
};
"""
)

BABYLON_SPINNING_BOX = """
const canvas = document.createElement('canvas');
canvas.width = window.innerWidth;
canvas.height = window.innerHeight;
document.body.appendChild(canvas);

const engine = new BABYLON.Engine(canvas, true, { preserveDrawingBuffer: true });
const scene = new BABYLON.Scene(engine);
scene.clearColor = new BABYLON.Color4(0.13, 0.13, 0.2, 1);

const camera = new BABYLON.ArcRotateCamera(
  'camera', Math.PI / 4, Math.PI / 3, 5, BABYLON.Vector3.Zero(), scene
);
const light = new BABYLON.HemisphericLight('light', new BABYLON.Vector3(1, 1, 0), scene);

const box = BABYLON.MeshBuilder.CreateBox('box', { size: 1.5 }, scene);
const material = new BABYLON.StandardMaterial('material', scene);
material.diffuseColor = new BABYLON.Color3(0, 1, 0.8);
box.material = material;

window.renderFrame = function (frame) {
  box.rotation.x = frame * 0.01;
  box.rotation.y = frame * 0.01;
  scene.render();
};
"""

_THREE_TEMPLATES = [
    (re.compile(r"solar\s+system|planet|orbit", re.IGNORECASE), SOLAR_SYSTEM),
    (re.compile(r"bounc\w*\s+ball|ball", re.IGNORECASE), BOUNCING_BALL),
]


def template_for(prompt: str, mode: RenderMode) -> str:
    """Pick a built-in script by prompt keywords."""
    if RenderMode(mode) == RenderMode.ADVANCED:
        return BABYLON_SPINNING_BOX
    for pattern, code in _THREE_TEMPLATES:
        if pattern.search(prompt):
            return code
    return SPINNING_CUBE
