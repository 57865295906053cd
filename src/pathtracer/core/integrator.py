"""Monte Carlo radiance estimator with explicit light sampling.

This module implements ``ray_color``, the per-path estimator used by the
render loop. At every surface hit it adds the surface's emission and then
continues the path toward a point sampled uniformly on a known rectangular
light (next-event estimation), replacing the direction the material would
have chosen. The continuation is weighted by the material's own density for
that direction divided by the light sample's solid-angle density:

    L(ray, depth) = E + albedo * scatter_pdf * L(toward_light, depth - 1) / light_pdf
    light_pdf     = distance^2 / (light_cosine * light_area)

Termination rules, all returning exactly what has been accumulated so far:
    - depth exhausted: nothing more is added
    - ray escapes: background
    - material does not scatter: emission only
    - light behind the surface, seen edge-on, coincident with the
      hit point or at a vanishing density: emission only

Taichi functions cannot recurse, so the recursion above is evaluated as a
loop of at most ``depth`` steps that carries the running product of the
weights (the throughput). The two forms are algebraically identical, and
``depth`` remains a hard bound on the work per path.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.config import LightRect
    >>> from src.pathtracer.core.integrator import configure_light, trace_ray
    >>> configure_light(LightRect())
    >>> color = trace_ray((278, 278, -800), (0, 0, 1), depth=50)
"""

import logging

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.config import (
    DEFAULT_LIGHT_COSINE_EPSILON,
    DEFAULT_T_MIN,
    LightRect,
)
from src.pathtracer.core.ray import Ray, component, make_ray, random_range
from src.pathtracer.materials.material import (
    emit_material,
    scatter_material,
    scatter_pdf_material,
)
from src.pathtracer.scene.world import intersect_world

logger = logging.getLogger(__name__)

vec3 = tm.vec3

# Upper bound of the intersection interval
T_MAX = 1e30

# Light samples closer than this to the hit point are skipped
MIN_LIGHT_DISTANCE_SQUARED = 1e-12

# Solid-angle densities at or below this are treated as no contribution
MIN_LIGHT_PDF = 1e-8

# =============================================================================
# Integrator State
# =============================================================================

_light_axis = ti.field(dtype=ti.i32, shape=())
_light_k = ti.field(dtype=ti.f32, shape=())
_light_lo = ti.Vector.field(2, dtype=ti.f32, shape=())
_light_hi = ti.Vector.field(2, dtype=ti.f32, shape=())
_light_area = ti.field(dtype=ti.f32, shape=())
_t_min = ti.field(dtype=ti.f32, shape=())
_light_cosine_epsilon = ti.field(dtype=ti.f32, shape=())
_light_ready = ti.field(dtype=ti.i32, shape=())


def configure_light(
    light: LightRect,
    t_min: float = DEFAULT_T_MIN,
    light_cosine_epsilon: float = DEFAULT_LIGHT_COSINE_EPSILON,
) -> None:
    """Set the light rectangle and numeric thresholds used by ray_color.

    Args:
        light: Rectangle sampled for direct lighting.
        t_min: Lower bound of the intersection interval.
        light_cosine_epsilon: Minimum cosine at the light for a contribution.

    Raises:
        ValueError: If the light rectangle is degenerate or a threshold is
            not positive.
    """
    light.validate()
    if t_min <= 0.0:
        raise ValueError(f"t_min must be positive, got {t_min}")
    if light_cosine_epsilon <= 0.0:
        raise ValueError(f"light_cosine_epsilon must be positive, got {light_cosine_epsilon}")

    _light_axis[None] = int(light.axis)
    _light_k[None] = light.k
    _light_lo[None] = [light.lo[0], light.lo[1]]
    _light_hi[None] = [light.hi[0], light.hi[1]]
    _light_area[None] = light.area
    _t_min[None] = t_min
    _light_cosine_epsilon[None] = light_cosine_epsilon
    _light_ready[None] = 1

    logger.debug(
        "Light %s at k=%.3f spanning %s-%s (area %.3f)",
        light.axis.name,
        light.k,
        light.lo,
        light.hi,
        light.area,
    )


def clear_light() -> None:
    """Forget the configured light."""
    _light_ready[None] = 0


def is_light_configured() -> bool:
    """Check whether configure_light() has been called."""
    return bool(_light_ready[None])


def get_light_info() -> dict[str, object]:
    """Return the configured light geometry as plain Python values."""
    lo = _light_lo[None]
    hi = _light_hi[None]
    return {
        "axis": int(_light_axis[None]),
        "k": float(_light_k[None]),
        "lo": (float(lo[0]), float(lo[1])),
        "hi": (float(hi[0]), float(hi[1])),
        "area": float(_light_area[None]),
    }


def _check_light_configured() -> None:
    if _light_ready[None] == 0:
        raise RuntimeError("Light not configured. Call configure_light() first.")


# =============================================================================
# Light Sampling
# =============================================================================


@ti.func
def sample_light_point() -> vec3:
    """Pick a point uniformly on the configured light rectangle."""
    lo = _light_lo[None]
    hi = _light_hi[None]
    a = random_range(lo.x, hi.x)
    b = random_range(lo.y, hi.y)
    k = _light_k[None]
    axis = _light_axis[None]

    p = vec3(k, a, b)
    if axis == 1:
        p = vec3(a, k, b)
    elif axis == 2:
        p = vec3(a, b, k)
    return p


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def ray_color(ray: Ray, background: vec3, depth: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        ray: The ray to trace.
        background: Radiance of rays that escape the scene.
        depth: Maximum number of surface interactions; 0 returns zero.

    Returns:
        Linear, unclamped RGB radiance.
    """
    t_min = _t_min[None]
    cosine_epsilon = _light_cosine_epsilon[None]

    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    origin = ray.origin
    direction = ray.direction
    time = ray.time

    # Active flag for path continuation
    active = 1

    for _bounce in range(depth):
        if active == 1:
            current = make_ray(origin, direction, time)
            rec = intersect_world(current, t_min, T_MAX)

            if rec.hit == 0:
                radiance += throughput * background
                active = 0
            else:
                radiance += throughput * emit_material(rec.material_id, rec.uv, rec.point)

                # Stays 0 unless every light-sampling check passes
                active = 0
                accepted, albedo, _scattered, _material_pdf = scatter_material(current, rec)

                if accepted == 1:
                    to_light = sample_light_point() - rec.point
                    distance_squared = tm.dot(to_light, to_light)

                    if distance_squared > MIN_LIGHT_DISTANCE_SQUARED:
                        to_light = to_light / ti.sqrt(distance_squared)

                        if tm.dot(to_light, rec.normal) >= 0.0:
                            light_cosine = ti.abs(component(to_light, _light_axis[None]))

                            if light_cosine >= cosine_epsilon:
                                light_pdf = distance_squared / (light_cosine * _light_area[None])

                                if light_pdf > MIN_LIGHT_PDF:
                                    toward_light = make_ray(rec.point, to_light, time)
                                    scattering_pdf = scatter_pdf_material(current, rec, toward_light)

                                    throughput *= albedo * scattering_pdf / light_pdf
                                    origin = rec.point
                                    direction = to_light
                                    active = 1

    return radiance


# =============================================================================
# Python-callable Tracing
# =============================================================================


_trace_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_ray_kernel(origin: vec3, direction: vec3, time: ti.f32, depth: ti.i32, background: vec3):
    # Single-iteration outer loop keeps the bounce loop serial
    ti.loop_config(serialize=True)
    for _ in range(1):
        _trace_result[None] = ray_color(make_ray(origin, direction, time), background, depth)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int,
    background: tuple[float, float, float] = (0.0, 0.0, 0.0),
    time: float = 0.0,
) -> tuple[float, float, float]:
    """Trace one path from Python.

    Useful for tests and debugging; rendering goes through render_image().

    Args:
        origin: Ray origin.
        direction: Ray direction (any non-zero length).
        depth: Maximum path length.
        background: Radiance of escaping rays.
        time: Ray time.

    Returns:
        Tuple of (R, G, B) radiance.

    Raises:
        RuntimeError: If the integrator has not been configured.
    """
    _check_light_configured()
    _trace_ray_kernel(vec3(*origin), vec3(*direction), time, depth, vec3(*background))
    color = _trace_result.to_numpy()
    return (float(color[0]), float(color[1]), float(color[2]))
