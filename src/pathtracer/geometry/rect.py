"""Axis-aligned rectangle primitive with ray-rectangle intersection.

An axis-aligned rectangle lies in a plane perpendicular to one coordinate
axis (the "dropped" axis) at the fixed coordinate ``k``. Its extent is a 2D
box ``[lo, hi]`` in the two remaining axes, taken in ascending axis order:

==========  ============  ====================
orientation dropped axis  (lo, hi) components
==========  ============  ====================
YZ          x (0)         (y, z)
XZ          y (1)         (x, z)
XY          z (2)         (x, y)
==========  ============  ====================

Intersection solves a single division along the dropped axis:

    t = (k - origin[axis]) / direction[axis]

then checks that the hit point lies inside the rectangle bounds.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.geometry.rect import RectAxis, hit_rect, make_rect
    >>> # Inside a kernel, the floor of a 555 unit box:
    >>> # floor = make_rect(RectAxis.XZ, vec2(0, 0), vec2(555, 555), 0.0)
    >>> # record = hit_rect(ray, floor, 0.001, 1e10)
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray, component, ray_at
from src.pathtracer.geometry.hittable import HitRecord, make_hit_record, miss_record

vec3 = tm.vec3
vec2 = tm.vec2


class RectAxis(IntEnum):
    """Orientation of an axis-aligned rectangle, named by its spanning plane.

    The value is the index of the dropped (perpendicular) axis.
    """

    YZ = 0
    XZ = 1
    XY = 2


@ti.dataclass
class AxisAlignedRect:
    """A rectangle perpendicular to one coordinate axis.

    Attributes:
        axis: Index of the dropped axis (see RectAxis).
        k: Coordinate of the plane along the dropped axis.
        lo: Lower bounds in the two remaining axes.
        hi: Upper bounds in the two remaining axes.
    """

    axis: ti.i32
    k: ti.f32
    lo: vec2
    hi: vec2


@ti.func
def _in_plane_axes(axis: ti.i32):
    """Return the indices of the two axes spanned by the rectangle."""
    a = 1
    b = 2
    if axis == 1:
        a = 0
        b = 2
    elif axis == 2:
        a = 0
        b = 1
    return a, b


@ti.func
def _axis_unit(axis: ti.i32) -> vec3:
    """Unit vector along the given axis."""
    n = vec3(1.0, 0.0, 0.0)
    if axis == 1:
        n = vec3(0.0, 1.0, 0.0)
    elif axis == 2:
        n = vec3(0.0, 0.0, 1.0)
    return n


@ti.func
def hit_rect(ray: Ray, rect: AxisAlignedRect, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Test for ray-rectangle intersection.

    A ray parallel to the rectangle's plane never hits it, even when it lies
    inside the plane. The interval test is strict on both ends while the
    bounds test is inclusive, so edges shared by neighbouring rectangles are
    covered.

    Args:
        ray: The ray to test.
        rect: The rectangle to test against.
        t_min: Exclusive lower bound on the hit parameter.
        t_max: Exclusive upper bound on the hit parameter.

    Returns:
        A HitRecord; check its hit field.
    """
    result = miss_record()

    denom = component(ray.direction, rect.axis)
    # Parallel rays never hit
    if denom != 0.0:
        t = (rect.k - component(ray.origin, rect.axis)) / denom
        if t > t_min and t < t_max:
            p = ray_at(ray, t)
            a, b = _in_plane_axes(rect.axis)
            pa = component(p, a)
            pb = component(p, b)
            if pa >= rect.lo.x and pa <= rect.hi.x and pb >= rect.lo.y and pb <= rect.hi.y:
                result = make_hit_record(t, p, ray.direction, _axis_unit(rect.axis))

    return result


@ti.func
def rect_area(rect: AxisAlignedRect) -> ti.f32:
    """Compute the area of a rectangle."""
    extent = rect.hi - rect.lo
    return extent.x * extent.y


@ti.func
def make_rect(axis: ti.i32, lo: vec2, hi: vec2, k: ti.f32) -> AxisAlignedRect:
    """Create a rectangle within Taichi kernels."""
    return AxisAlignedRect(axis=axis, k=k, lo=lo, hi=hi)


def validate_rect_bounds(a0: float, a1: float, b0: float, b1: float) -> None:
    """Check that rectangle bounds describe a non-empty area.

    Raises:
        ValueError: If either extent is empty or inverted.
    """
    if not (a1 > a0 and b1 > b0):
        raise ValueError(
            f"Rectangle bounds must satisfy min < max, got [{a0}, {a1}] x [{b0}, {b1}]"
        )
