"""Ready-made scenes for previews, examples and tests.

Two presets are provided:

- The default scene: a magenta sphere resting on a very large blue "ground"
  sphere, lit by a single white point light. It is the scene the example
  driver opens with.
- The showcase scene: several spheres on an infinite floor plane, lit by three
  colored point lights, plus one emissive sphere that glows without being a
  light source.

Every factory returns a (Scene, Camera) pair; the camera still has to be
resized to the output resolution before rendering.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.presets import create_default_scene
    >>> scene, camera = create_default_scene()
    >>> camera.on_resize(320, 240)
"""

from dataclasses import dataclass

from src.pathtracer.camera.camera import Camera
from src.pathtracer.materials import Material
from src.pathtracer.scene.scene import Scene

# =============================================================================
# Default Scene Parameters
# =============================================================================


@dataclass
class DefaultSceneParams:
    """Parameters for configuring the default scene.

    Attributes:
        sphere_albedo: RGB albedo of the small sphere. Default is magenta.
        ground_albedo: RGB albedo of the ground sphere.
        light_position: World-space position of the point light.
        light_strength: Strength of the point light.
    """

    sphere_albedo: tuple[float, float, float] = (1.0, 0.0, 1.0)
    ground_albedo: tuple[float, float, float] = (0.2, 0.3, 1.0)
    light_position: tuple[float, float, float] = (-2.0, 3.0, 2.0)
    light_strength: float = 1.0


# =============================================================================
# Preset Constants
# =============================================================================

# The ground is a huge sphere whose top touches y = -1
GROUND_RADIUS = 100.0
GROUND_CENTER = (0.0, -101.0, 0.0)

# Camera defaults shared by the presets
DEFAULT_CAMERA_POSITION = (0.0, 0.0, 6.0)
DEFAULT_VERTICAL_FOV = 45.0

# Showcase materials
FLOOR_ALBEDO = (0.73, 0.73, 0.73)
CENTER_SPHERE_ALBEDO = (0.9, 0.9, 0.9)
RED_SPHERE_ALBEDO = (0.8, 0.1, 0.1)
GREEN_SPHERE_ALBEDO = (0.1, 0.7, 0.2)
EMISSIVE_COLOR = (1.0, 0.6, 0.2)
EMISSIVE_STRENGTH = 0.8


# =============================================================================
# Preset Factories
# =============================================================================


def create_default_scene(
    params: DefaultSceneParams | None = None,
) -> tuple[Scene, Camera]:
    """Create the default scene: a magenta sphere on a ground sphere.

    Args:
        params: Optional DefaultSceneParams. If None, uses the defaults.

    Returns:
        A tuple of (Scene, Camera) with the camera at (0, 0, 6) looking
        down -Z at the unit sphere at the origin.

    Example:
        >>> scene, camera = create_default_scene()
        >>> scene.shape_count, scene.light_count
        (2, 1)
    """
    if params is None:
        params = DefaultSceneParams()

    scene = Scene()
    scene.add_sphere((0.0, 0.0, 0.0), 1.0, Material(albedo=params.sphere_albedo))
    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, Material(albedo=params.ground_albedo))
    scene.add_point_light(params.light_position, strength=params.light_strength)

    camera = Camera(
        vertical_fov=DEFAULT_VERTICAL_FOV,
        position=DEFAULT_CAMERA_POSITION,
        forward=(0.0, 0.0, -1.0),
    )
    return scene, camera


def create_showcase_scene() -> tuple[Scene, Camera]:
    """Create a scene exercising every primitive and material feature.

    Contains a floor plane at y = -1, three diffuse spheres resting on it, a
    small emissive sphere, and a red, a blue and a white point light. The
    camera sits slightly above the spheres looking down at them.

    Returns:
        A tuple of (Scene, Camera).
    """
    scene = Scene()

    # =========================================================================
    # Geometry
    # =========================================================================

    scene.add_plane((0.0, -1.0, 0.0), (0.0, 1.0, 0.0), Material(albedo=FLOOR_ALBEDO))

    scene.add_sphere((0.0, 0.0, 0.0), 1.0, Material(albedo=CENTER_SPHERE_ALBEDO, roughness=0.5))
    scene.add_sphere((-2.2, -0.4, -0.5), 0.6, Material(albedo=RED_SPHERE_ALBEDO))
    scene.add_sphere((2.2, -0.3, -0.8), 0.7, Material(albedo=GREEN_SPHERE_ALBEDO))

    # Glows on its own; it does not light the rest of the scene
    scene.add_sphere(
        (0.9, -0.7, 1.4),
        0.3,
        Material(
            albedo=(0.0, 0.0, 0.0),
            emission=EMISSIVE_STRENGTH,
            emission_color=EMISSIVE_COLOR,
        ),
    )

    # =========================================================================
    # Lights
    # =========================================================================

    scene.add_point_light((-4.0, 4.0, 3.0), color=(1.0, 0.3, 0.3), strength=1.2)
    scene.add_point_light((4.0, 4.0, 3.0), color=(0.3, 0.4, 1.0), strength=1.2)
    scene.add_point_light((0.0, 6.0, -3.0), color=(1.0, 1.0, 1.0), strength=0.8)

    camera = Camera(
        vertical_fov=DEFAULT_VERTICAL_FOV,
        position=(0.0, 1.5, 7.0),
        forward=(0.0, -0.25, -1.0),
    )
    return scene, camera
