"""Cornell box scene configuration.

This module builds the classic Cornell box test scene: an open 555-unit box
with one red and one green wall, white floor, ceiling and back wall, a
rectangular area light just below the ceiling, a white diffuse sphere and a
tall white box.

All walls and the light are axis-aligned rectangles:
- Green wall: YZ plane at x = 555 (appears on the left from the camera)
- Red wall: YZ plane at x = 0 (appears on the right)
- Ceiling and floor: XZ planes at y = 555 and y = 0
- Back wall: XY plane at z = 555
- Light: XZ plane at y = 554, x in [213, 343], z in [227, 332]

The camera sits outside the open front at z = -800, looking toward +Z.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.cornell_box import create_cornell_box_scene
    >>> from src.pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> world, camera, light = create_cornell_box_scene()
    >>> setup_camera(camera)
    >>> len(world)
    8
"""

from dataclasses import dataclass

from src.pathtracer.camera.thin_lens import Camera
from src.pathtracer.core.config import LightRect
from src.pathtracer.geometry.rect import RectAxis
from src.pathtracer.scene.world import HittableList

# =============================================================================
# Cornell Box Parameters
# =============================================================================


@dataclass
class CornellBoxParams:
    """Parameters for configuring a Cornell box scene.

    All defaults match the classic configuration.

    Attributes:
        light_intensity: Scale applied to light_color. Default 15.0.
        light_color: RGB colour of the light. Default white.
        left_wall_color: Albedo of the wall at x = 555. Default green.
        right_wall_color: Albedo of the wall at x = 0. Default red.
        white_color: Albedo of floor, ceiling, back wall, sphere and box.
        aspect_ratio: Camera aspect ratio. Default 1.0 (square image).

    Example:
        >>> params = CornellBoxParams(light_intensity=20.0)
        >>> params.left_wall_color
        (0.12, 0.45, 0.15)
    """

    light_intensity: float = 15.0
    light_color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    left_wall_color: tuple[float, float, float] = (0.12, 0.45, 0.15)
    right_wall_color: tuple[float, float, float] = (0.65, 0.05, 0.05)
    white_color: tuple[float, float, float] = (0.73, 0.73, 0.73)
    aspect_ratio: float = 1.0


# =============================================================================
# Cornell Box Constants
# =============================================================================

BOX_SIZE = 555.0

# Ceiling light, sitting one unit below the ceiling
LIGHT_X_RANGE = (213.0, 343.0)
LIGHT_Z_RANGE = (227.0, 332.0)
LIGHT_Y = 554.0

SPHERE_CENTER = (212.5, 82.5, 147.5)
SPHERE_RADIUS = 82.5

TALL_BOX_MIN = (265.0, 0.0, 295.0)
TALL_BOX_MAX = (430.0, 330.0, 460.0)


# =============================================================================
# Cornell Box Factory
# =============================================================================


def get_light_rect() -> LightRect:
    """Get the ceiling light as the rectangle the integrator samples."""
    return LightRect(
        axis=RectAxis.XZ,
        k=LIGHT_Y,
        lo=(LIGHT_X_RANGE[0], LIGHT_Z_RANGE[0]),
        hi=(LIGHT_X_RANGE[1], LIGHT_Z_RANGE[1]),
    )


def create_cornell_box_scene(
    params: CornellBoxParams | None = None,
) -> tuple[HittableList, Camera, LightRect]:
    """Create the Cornell box world, its camera and its light rectangle.

    Replaces whatever the active world held before.

    Args:
        params: Optional colours, light intensity and aspect ratio. If None,
            uses CornellBoxParams().

    Returns:
        A tuple of (HittableList, Camera, LightRect) where:
        - HittableList holds the eight shapes and their materials
        - Camera is configured for the standard view (call setup_camera())
        - LightRect matches the emissive rectangle in the world

    Example:
        >>> world, camera, light = create_cornell_box_scene()
        >>> light.area
        13650.0
    """
    if params is None:
        params = CornellBoxParams()

    world = HittableList()

    # =========================================================================
    # Materials
    # =========================================================================

    red = world.add_lambertian_material(params.right_wall_color)
    white = world.add_lambertian_material(params.white_color)
    green = world.add_lambertian_material(params.left_wall_color)
    light = world.add_diffuse_light_material(
        tuple(params.light_intensity * c for c in params.light_color)
    )

    # =========================================================================
    # Walls and Light
    # =========================================================================

    world.add_yz_rect(0.0, BOX_SIZE, 0.0, BOX_SIZE, BOX_SIZE, green)
    world.add_yz_rect(0.0, BOX_SIZE, 0.0, BOX_SIZE, 0.0, red)
    world.add_xz_rect(0.0, BOX_SIZE, 0.0, BOX_SIZE, BOX_SIZE, white)
    world.add_xz_rect(0.0, BOX_SIZE, 0.0, BOX_SIZE, 0.0, white)
    world.add_xy_rect(0.0, BOX_SIZE, 0.0, BOX_SIZE, BOX_SIZE, white)
    world.add_xz_rect(*LIGHT_X_RANGE, *LIGHT_Z_RANGE, LIGHT_Y, light)

    # =========================================================================
    # Contents
    # =========================================================================

    world.add_sphere(SPHERE_CENTER, SPHERE_RADIUS, white)
    world.add_box(TALL_BOX_MIN, TALL_BOX_MAX, white)

    # =========================================================================
    # Camera Setup
    # =========================================================================

    camera = Camera(
        lookfrom=(278.0, 278.0, -800.0),
        lookat=(278.0, 278.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=40.0,
        aspect_ratio=params.aspect_ratio,
        aperture=0.0,
        focus_dist=10.0,
        time0=0.0,
        time1=1.0,
    )

    return world, camera, get_light_rect()


def get_cornell_box_bounds(box_size: float = BOX_SIZE) -> dict[str, tuple[float, float, float]]:
    """Get the bounding box of the Cornell box scene.

    Returns:
        A dictionary with 'min', 'max', 'center' and 'size' entries.
    """
    return {
        "min": (0.0, 0.0, 0.0),
        "max": (box_size, box_size, box_size),
        "center": (box_size / 2.0, box_size / 2.0, box_size / 2.0),
        "size": (box_size, box_size, box_size),
    }
