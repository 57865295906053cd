"""Material registry and dispatch.

Primitives refer to materials by integer id. The registry stores, for each
id, the material type and its colour (albedo for Lambertian surfaces,
emitted radiance for lights) in Taichi fields, so any number of primitives
can share one material without copying it.

The three dispatch functions are the whole interface the integrator needs:

    emit_material(material_id, uv, point) -> radiance
    scatter_material(ray, rec) -> (accepted, albedo, scattered, pdf)
    scatter_pdf_material(ray, rec, scattered) -> density

They read only immutable registry data and the per-thread random generator,
so they are safe to call from every render thread at once.
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray, make_ray
from src.pathtracer.materials.diffuse_light import emit_diffuse_light, validate_emission
from src.pathtracer.materials.lambertian import (
    scatter_lambertian,
    scatter_pdf_lambertian,
    validate_albedo,
)

vec3 = tm.vec3
vec2 = tm.vec2


class MaterialType(IntEnum):
    """Enumeration of supported material types."""

    LAMBERTIAN = 0
    DIFFUSE_LIGHT = 1


MAX_MATERIALS = 256

material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# Albedo for Lambertian, emitted radiance for diffuse lights
material_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Remove all registered materials."""
    num_materials[None] = 0


def get_material_count() -> int:
    """Get the number of registered materials."""
    return int(num_materials[None])


def _register(material_type: MaterialType, color: tuple[float, float, float]) -> int:
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")
    material_types[idx] = int(material_type)
    material_colors[idx] = vec3(color[0], color[1], color[2])
    num_materials[None] = idx + 1
    return idx


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Register a Lambertian material.

    Args:
        albedo: Diffuse reflectance as (R, G, B), each in [0, 1].

    Returns:
        The material id.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    validate_albedo(albedo)
    return _register(MaterialType.LAMBERTIAN, albedo)


def add_diffuse_light_material(emit: tuple[float, float, float]) -> int:
    """Register a diffuse light material.

    Args:
        emit: Emitted radiance as (R, G, B); may exceed 1.

    Returns:
        The material id.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any emission component is negative.
    """
    validate_emission(emit)
    return _register(MaterialType.DIFFUSE_LIGHT, emit)


def get_material_type_python(material_id: int) -> MaterialType | None:
    """Look up a material type from Python, or None for unknown ids."""
    if 0 <= material_id < get_material_count():
        return MaterialType(int(material_types[material_id]))
    return None


def get_material_color_python(material_id: int) -> tuple[float, float, float] | None:
    """Look up a material colour from Python, or None for unknown ids."""
    if 0 <= material_id < get_material_count():
        c = material_colors[material_id]
        return (float(c[0]), float(c[1]), float(c[2]))
    return None


# =============================================================================
# Device-side dispatch
# =============================================================================


@ti.func
def emit_material(material_id: ti.i32, uv: vec2, point: vec3) -> vec3:
    """Radiance emitted by a surface at a hit point."""
    emitted = vec3(0.0, 0.0, 0.0)
    if material_types[material_id] == int(MaterialType.DIFFUSE_LIGHT):
        emitted = emit_diffuse_light(material_colors[material_id])
    return emitted


@ti.func
def scatter_material(ray: Ray, rec):
    """Sample the material's own scattered ray at a hit.

    Args:
        ray: The incident ray.
        rec: Scene hit record (point, normal facing the ray, material_id).

    Returns:
        A tuple of (accepted, albedo, scattered, pdf). accepted is 0 for
        materials that absorb the ray; the other values are then unused.
    """
    material_id = rec.material_id
    accepted = 0
    albedo = vec3(0.0, 0.0, 0.0)
    direction = rec.normal
    pdf = 0.0

    if material_types[material_id] == int(MaterialType.LAMBERTIAN):
        direction, albedo, pdf = scatter_lambertian(material_colors[material_id], rec.normal)
        accepted = 1

    return accepted, albedo, make_ray(rec.point, direction, ray.time), pdf


@ti.func
def scatter_pdf_material(ray: Ray, rec, scattered: Ray) -> ti.f32:
    """Density the hit material assigns to a scattered direction (>= 0)."""
    pdf = 0.0
    if material_types[rec.material_id] == int(MaterialType.LAMBERTIAN):
        pdf = scatter_pdf_lambertian(rec.normal, tm.normalize(scattered.direction))
    return pdf
