"""Axis-aligned box built from six rectangles.

A box is described by two opposite corners. Its surface is the six
axis-aligned rectangles that bound it, all sharing the box's material:

    XY faces at z = p0.z and z = p1.z
    XZ faces at y = p0.y and y = p1.y
    YZ faces at x = p0.x and x = p1.x

``hit_box`` scans the faces with the same nearest-hit rule as the scene-level
list: each face hit tightens the upper bound for the faces that follow.
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray
from src.pathtracer.geometry.hittable import HitRecord, miss_record
from src.pathtracer.geometry.rect import AxisAlignedRect, RectAxis, hit_rect

vec3 = tm.vec3
vec2 = tm.vec2

NUM_BOX_FACES = 6


@ti.dataclass
class Box:
    """An axis-aligned box.

    Attributes:
        p0: Minimum corner.
        p1: Maximum corner.
    """

    p0: vec3
    p1: vec3


@ti.func
def box_face(box: Box, face: ti.template()) -> AxisAlignedRect:
    """Return one of the six faces of a box.

    Args:
        box: The box.
        face: Compile-time face index in [0, 6).

    Returns:
        The face rectangle.
    """
    p0 = box.p0
    p1 = box.p1
    rect = AxisAlignedRect(axis=0, k=0.0, lo=vec2(0.0, 0.0), hi=vec2(0.0, 0.0))
    if ti.static(face == 0):
        rect = AxisAlignedRect(axis=int(RectAxis.XY), k=p1.z, lo=vec2(p0.x, p0.y), hi=vec2(p1.x, p1.y))
    elif ti.static(face == 1):
        rect = AxisAlignedRect(axis=int(RectAxis.XY), k=p0.z, lo=vec2(p0.x, p0.y), hi=vec2(p1.x, p1.y))
    elif ti.static(face == 2):
        rect = AxisAlignedRect(axis=int(RectAxis.XZ), k=p1.y, lo=vec2(p0.x, p0.z), hi=vec2(p1.x, p1.z))
    elif ti.static(face == 3):
        rect = AxisAlignedRect(axis=int(RectAxis.XZ), k=p0.y, lo=vec2(p0.x, p0.z), hi=vec2(p1.x, p1.z))
    elif ti.static(face == 4):
        rect = AxisAlignedRect(axis=int(RectAxis.YZ), k=p1.x, lo=vec2(p0.y, p0.z), hi=vec2(p1.y, p1.z))
    else:
        rect = AxisAlignedRect(axis=int(RectAxis.YZ), k=p0.x, lo=vec2(p0.y, p0.z), hi=vec2(p1.y, p1.z))
    return rect


@ti.func
def hit_box(ray: Ray, box: Box, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Test for ray-box intersection via the box's six faces.

    Args:
        ray: The ray to test.
        box: The box to test against.
        t_min: Exclusive lower bound on the hit parameter.
        t_max: Exclusive upper bound on the hit parameter.

    Returns:
        The nearest face hit, or a miss record.
    """
    closest_t = t_max
    result = miss_record()
    for face in ti.static(range(NUM_BOX_FACES)):
        rec = hit_rect(ray, box_face(box, face), t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = rec
    return result


def box_faces(
    p0: tuple[float, float, float],
    p1: tuple[float, float, float],
) -> list[tuple[RectAxis, float, float, float, float, float]]:
    """Describe the faces of a box as plain tuples.

    The order matches ``box_face``. Each entry is
    ``(axis, a0, a1, b0, b1, k)`` with the in-plane bounds in ascending axis
    order.

    Args:
        p0: One corner of the box.
        p1: The opposite corner.

    Returns:
        Six face descriptions.
    """
    lo, hi = sorted_corners(p0, p1)
    x0, y0, z0 = lo
    x1, y1, z1 = hi
    return [
        (RectAxis.XY, x0, x1, y0, y1, z1),
        (RectAxis.XY, x0, x1, y0, y1, z0),
        (RectAxis.XZ, x0, x1, z0, z1, y1),
        (RectAxis.XZ, x0, x1, z0, z1, y0),
        (RectAxis.YZ, y0, y1, z0, z1, x1),
        (RectAxis.YZ, y0, y1, z0, z1, x0),
    ]


def sorted_corners(
    p0: tuple[float, float, float],
    p1: tuple[float, float, float],
) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
    """Return (min_corner, max_corner) for two opposite corners.

    Raises:
        ValueError: If the box is flat along any axis.
    """
    lo = tuple(float(min(a, b)) for a, b in zip(p0, p1))
    hi = tuple(float(max(a, b)) for a, b in zip(p0, p1))
    if any(b <= a for a, b in zip(lo, hi)):
        raise ValueError(f"Box corners {p0} and {p1} do not enclose a volume")
    return lo, hi  # type: ignore[return-value]
