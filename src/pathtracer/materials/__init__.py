"""Materials module.

Components:
    lambertian: Ideal diffuse reflection and its cosine density
    diffuse_light: Constant emission, no scattering
    material: Registry of materials by id and device-side dispatch
"""

from .diffuse_light import emit_diffuse_light
from .lambertian import scatter_lambertian, scatter_pdf_lambertian
from .material import (
    MAX_MATERIALS,
    MaterialType,
    add_diffuse_light_material,
    add_lambertian_material,
    clear_materials,
    emit_material,
    get_material_color_python,
    get_material_count,
    get_material_type_python,
    scatter_material,
    scatter_pdf_material,
)

__all__ = [
    "MaterialType",
    "MAX_MATERIALS",
    "add_lambertian_material",
    "add_diffuse_light_material",
    "clear_materials",
    "get_material_count",
    "get_material_type_python",
    "get_material_color_python",
    "emit_material",
    "scatter_material",
    "scatter_pdf_material",
    "emit_diffuse_light",
    "scatter_lambertian",
    "scatter_pdf_lambertian",
]
