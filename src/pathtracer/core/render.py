"""Parallel render loop producing an 8-bit pixel buffer.

Every pixel is independent: the kernel's outer loop runs over
``ti.ndrange(height, width)`` and Taichi spreads it across threads, each with
its own random state. Row 0 of the buffer is the top of the image, so the
vertical image coordinate of a row is ``j = height - 1 - row``. Per sample:

    u = (col + random) / (width - 1)
    v = (j + random) / (height - 1)
    color += ray_color(get_ray(u, v), background, max_depth)

The average is gamma-corrected with a square root (gamma 2), clamped to
[0, 1] and quantized as ``int(255.999 * x)``. Channels are stored R, G, B;
use ``preview.export.to_channel_order`` for other layouts.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.camera.thin_lens import setup_camera
    >>> from src.pathtracer.core.config import RenderConfig
    >>> from src.pathtracer.core.render import render_image
    >>> from src.pathtracer.scene.cornell_box import create_cornell_box_scene
    >>>
    >>> world, camera, light = create_cornell_box_scene()
    >>> setup_camera(camera)
    >>> pixels = render_image(RenderConfig(light=light), world)
    >>> pixels.shape
    (384, 384, 3)
"""

import logging
import time

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtracer.camera.thin_lens import get_ray, is_camera_ready
from src.pathtracer.core.config import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH, RenderConfig
from src.pathtracer.core.integrator import configure_light, ray_color
from src.pathtracer.scene.world import HittableList

logger = logging.getLogger(__name__)

vec3 = tm.vec3

# =============================================================================
# Pixel Buffer
# =============================================================================

# Preallocated to the maximum size, indexed [row, col]
_pixels = ti.Vector.field(3, dtype=ti.u8, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

_buffer_ready = ti.field(dtype=ti.i32, shape=())


def clear_pixel_buffer() -> None:
    """Zero the pixel buffer and forget the last image size."""
    _pixels.fill(0)
    _image_width[None] = 0
    _image_height[None] = 0
    _buffer_ready[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the dimensions of the last rendered image.

    Returns:
        Tuple of (width, height); (0, 0) before the first render.
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_buffer_ready() -> None:
    if _buffer_ready[None] == 0:
        raise RuntimeError("No image rendered yet. Call render_image() first.")


def get_pixel_buffer() -> npt.NDArray[np.uint8]:
    """Get the last rendered image.

    Returns:
        Array of shape (height, width, 3), dtype uint8, RGB, top row first.

    Raises:
        RuntimeError: If nothing has been rendered.
    """
    _check_buffer_ready()
    width, height = get_image_dimensions()
    return np.ascontiguousarray(_pixels.to_numpy()[:height, :width, :])


def get_pixel_bytes() -> bytes:
    """Get the last rendered image as ``width * height * 3`` row-major bytes."""
    return get_pixel_buffer().tobytes()


# =============================================================================
# Rendering Kernel
# =============================================================================


@ti.kernel
def _render_kernel(
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    background: vec3,
):
    for row, col in ti.ndrange(height, width):
        j = height - 1 - row
        color = vec3(0.0, 0.0, 0.0)

        for _sample in range(samples_per_pixel):
            u = (ti.cast(col, ti.f32) + ti.random(ti.f32)) / ti.cast(width - 1, ti.f32)
            v = (ti.cast(j, ti.f32) + ti.random(ti.f32)) / ti.cast(height - 1, ti.f32)
            color += ray_color(get_ray(u, v), background, max_depth)

        color = color / ti.cast(samples_per_pixel, ti.f32)

        color = tm.clamp(tm.sqrt(color), 0.0, 1.0)
        _pixels[row, col] = ti.cast(255.999 * color, ti.u8)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_image(config: RenderConfig, world: HittableList | None = None) -> npt.NDArray[np.uint8]:
    """Render the active world through the configured camera.

    Args:
        config: Image size, sampling budget, background and light.
        world: The world being rendered. When given it is frozen first so it
            cannot change while the kernel reads it.

    Returns:
        Array of shape (height, width, 3), dtype uint8, RGB, top row first.

    Raises:
        ValueError: If the configuration is invalid.
        RuntimeError: If no camera has been set up.
    """
    config.validate()
    if not is_camera_ready():
        raise RuntimeError("Camera not set up. Call setup_camera() first.")

    if world is not None:
        world.freeze()

    configure_light(config.light, config.t_min, config.light_cosine_epsilon)

    _image_width[None] = config.width
    _image_height[None] = config.height

    logger.info(
        "Rendering %dx%d at %d spp, max depth %d",
        config.width,
        config.height,
        config.samples_per_pixel,
        config.max_depth,
    )

    start = time.perf_counter()
    _render_kernel(
        config.width,
        config.height,
        config.samples_per_pixel,
        config.max_depth,
        vec3(*config.background),
    )
    ti.sync()
    elapsed = time.perf_counter() - start
    _buffer_ready[None] = 1

    logger.info("Render finished in %.2fs", elapsed)
    return get_pixel_buffer()
