"""Ready-made scenes.

Each factory clears the current scene, builds its spheres and materials
through a SceneManager and returns it together with a matching camera.

Presets:
- spheres: a diffuse sphere resting on a large ground sphere
- materials: ground, diffuse centre, glass left and fuzzy metal right
- gradient: an empty scene that shows only the sky

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from zharko.scene.presets import create_spheres_scene
    >>> from zharko.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_spheres_scene()
    >>> setup_camera(camera)
"""

from collections.abc import Callable

from zharko.camera.pinhole import PinholeCamera
from zharko.errors import ConfigurationError
from zharko.scene.manager import SceneManager

# Large sphere standing in for a ground plane
GROUND_CENTER = (0.0, -101.0, -1.0)
GROUND_RADIUS = 100.0


def _default_camera(aspect_ratio: float) -> PinholeCamera:
    """Camera at the origin looking down -z with a 90 degree field of view."""
    return PinholeCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
    )


def create_spheres_scene(
    aspect_ratio: float = 16.0 / 9.0,
) -> tuple[SceneManager, PinholeCamera]:
    """A grey diffuse sphere of radius 0.5 at (0, 0, -1) on a ground sphere."""
    scene = SceneManager()
    diffuse = scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
    scene.add_sphere((0.0, 0.0, -1.0), 0.5, diffuse)
    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, diffuse)
    return scene, _default_camera(aspect_ratio)


def create_materials_scene(
    aspect_ratio: float = 16.0 / 9.0,
) -> tuple[SceneManager, PinholeCamera]:
    """One sphere of each material in a row on a yellowish ground."""
    scene = SceneManager()
    ground = scene.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
    center = scene.add_lambertian_material(albedo=(0.1, 0.2, 0.5))
    glass = scene.add_dielectric_material(refractive_index=1.5)
    metal = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)

    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, ground)
    scene.add_sphere((0.0, 0.0, -1.2), 0.5, center)
    scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
    scene.add_sphere((1.0, 0.0, -1.0), 0.5, metal)
    return scene, _default_camera(aspect_ratio)


def create_gradient_scene(
    aspect_ratio: float = 16.0 / 9.0,
) -> tuple[SceneManager, PinholeCamera]:
    """No geometry: every ray sees the sky gradient."""
    return SceneManager(), _default_camera(aspect_ratio)


PRESETS: dict[str, Callable[[float], tuple[SceneManager, PinholeCamera]]] = {
    "spheres": create_spheres_scene,
    "materials": create_materials_scene,
    "gradient": create_gradient_scene,
}


def create_preset_scene(
    name: str, aspect_ratio: float = 16.0 / 9.0
) -> tuple[SceneManager, PinholeCamera]:
    """Build a preset by name.

    Raises:
        ConfigurationError: If no preset has that name.
    """
    try:
        factory = PRESETS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown preset {name!r}; choose from {', '.join(sorted(PRESETS))}"
        ) from None
    return factory(aspect_ratio)
