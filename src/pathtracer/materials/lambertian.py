"""Lambertian (ideal diffuse) surfaces.

A Lambertian surface reflects albedo / pi in every direction of the
hemisphere above it. Its sampling density is cosine-weighted,
pdf(w) = max(0, cos(theta)) / pi, and ``scatter_pdf_lambertian`` evaluates
that same density for an arbitrary direction so a path continued toward a
light can be weighted by it.
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import near_zero, sample_cosine_hemisphere

vec3 = tm.vec3


@ti.func
def scatter_pdf_lambertian(normal: vec3, direction: vec3) -> ti.f32:
    """cos(theta) / pi for a unit direction above the surface, 0 below it."""
    return ti.max(tm.dot(normal, direction), 0.0) / tm.pi


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3):
    """Draw a cosine-weighted direction about the normal.

    Returns:
        A tuple (direction, attenuation, pdf); attenuation is the albedo.
    """
    direction, pdf = sample_cosine_hemisphere(normal)
    if near_zero(direction):
        direction = normal
        pdf = 1.0 / tm.pi
    return direction, albedo, pdf


def validate_albedo(albedo: tuple[float, float, float]) -> None:
    """Reject albedos that are not RGB triples in [0, 1].

    Raises:
        ValueError: On a wrong component count or an out-of-range value.
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")
    for channel, value in zip("RGB", albedo):
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Albedo {channel} = {value} must lie in [0, 1]")
