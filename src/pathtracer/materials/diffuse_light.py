"""Diffuse area light material.

A diffuse light emits a constant radiance from both faces and absorbs every
incoming ray: it never scatters, so paths end on it.
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@ti.func
def emit_diffuse_light(emit: vec3) -> vec3:
    """Emitted radiance of a diffuse light (independent of position)."""
    return emit


def validate_emission(emit: tuple[float, float, float]) -> None:
    """Check an emission colour.

    Values above 1 are allowed (lights are HDR).

    Raises:
        ValueError: If any component is negative.
    """
    if len(emit) != 3:
        raise ValueError(f"Emission must have 3 components, got {len(emit)}")
    for i, value in enumerate(emit):
        if value < 0.0:
            raise ValueError(f"Emission component {i} = {value} must be non-negative")
