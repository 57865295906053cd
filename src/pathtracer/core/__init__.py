"""Core rendering module.

Components:
    ray: Ray data structure and sampling utilities
    config: RenderConfig and LightRect dataclasses
    integrator: ray_color, the next-event-estimation radiance estimator
    render: Parallel render loop writing the 8-bit pixel buffer

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    component,
    make_ray,
    near_zero,
    onb_from_normal,
    random_in_unit_disk,
    random_range,
    ray_at,
    sample_cosine_hemisphere,
    vec2,
    vec3,
)

# Note: config, integrator and render are NOT imported here to avoid circular imports.
# Import directly from src.pathtracer.core.<module> when needed.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec2",
    "vec3",
    "component",
    "near_zero",
    "random_range",
    "random_in_unit_disk",
    "onb_from_normal",
    "sample_cosine_hemisphere",
]
