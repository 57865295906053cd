"""Rays and the sampling helpers shared by the camera, materials and integrator.

Everything callable from a kernel is a ``@ti.func``. Random numbers come from
``ti.random``, which keeps independent generator state per worker thread and
is seeded once through ``ti.init(random_seed=...)``; no helper here owns any
state of its own.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.ray import make_ray, ray_at, vec3
    >>>
    >>> @ti.kernel
    ... def probe() -> ti.f32:
    ...     ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, 2.0), 0.0)
    ...     return ray_at(ray, 1.5).z
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3
vec2 = tm.vec2


@ti.dataclass
class Ray:
    """A half-line origin + t * direction, stamped with an emission time.

    Attributes:
        origin: Start point.
        direction: Travel direction. Any non-zero length; hit distances are
            measured in multiples of it.
        time: Shutter time the ray was emitted at. Scattered rays inherit it.
    """

    origin: vec3
    direction: vec3
    time: ti.f32


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Point at parameter t along the ray."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3, time: ti.f32) -> Ray:
    return Ray(origin=origin, direction=direction, time=time)


@ti.func
def component(v: vec3, axis: ti.i32) -> ti.f32:
    """Pick v.x, v.y or v.z for axis 0, 1 or 2.

    Runtime axis values select through branches; vectors held in registers
    cannot be indexed by a non-constant on every backend.
    """
    value = v.x
    if axis == 1:
        value = v.y
    elif axis == 2:
        value = v.z
    return value


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """1 if every component of v is below 1e-8 in magnitude, else 0."""
    return ti.cast(ti.max(ti.abs(v.x), ti.abs(v.y), ti.abs(v.z)) < 1e-8, ti.i32)


# =============================================================================
# Sampling
# =============================================================================


@ti.func
def random_range(lo: ti.f32, hi: ti.f32) -> ti.f32:
    """Uniform sample in [lo, hi)."""
    return lo + (hi - lo) * ti.random(ti.f32)


@ti.func
def random_in_unit_disk() -> vec3:
    """Uniform point (x, y, 0) in the unit disk.

    Polar mapping: a radius of sqrt(u) makes the density uniform in area.
    """
    r = ti.sqrt(ti.random(ti.f32))
    phi = 2.0 * tm.pi * ti.random(ti.f32)
    return vec3(r * ti.cos(phi), r * ti.sin(phi), 0.0)


@ti.func
def onb_from_normal(n: vec3):
    """Two unit tangents completing n to an orthonormal basis.

    Branch-free construction of Duff et al. (2017), valid for any unit n.

    Returns:
        A tuple (tangent, bitangent), both perpendicular to n and each other.
    """
    sign = ti.select(n.z >= 0.0, 1.0, -1.0)
    a = -1.0 / (sign + n.z)
    b = n.x * n.y * a
    tangent = vec3(1.0 + sign * n.x * n.x * a, sign * b, -sign * n.x)
    bitangent = vec3(b, sign + n.y * n.y * a, -n.y)
    return tangent, bitangent


@ti.func
def sample_cosine_hemisphere(normal: vec3):
    """Cosine-weighted direction about a unit normal.

    Returns:
        A tuple (direction, pdf) where direction is unit length and
        pdf = dot(direction, normal) / pi.
    """
    r2 = ti.random(ti.f32)
    phi = 2.0 * tm.pi * ti.random(ti.f32)
    r = ti.sqrt(r2)
    # z = cos(theta) = sqrt(1 - r^2)
    z = ti.sqrt(ti.max(0.0, 1.0 - r2))

    tangent, bitangent = onb_from_normal(normal)
    direction = r * ti.cos(phi) * tangent + r * ti.sin(phi) * bitangent + z * normal
    return direction, z / tm.pi
