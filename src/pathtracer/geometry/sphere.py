"""Sphere primitive.

Roots of the ray-sphere quadratic are taken in the cancellation-free form
q = -(h + sign(h) * sqrt(h^2 - a*c)), t = {q / a, c / q}. Scattered rays
leave from points on or near a surface, where the textbook formula loses the
small root to round-off in 32-bit floats.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(212.5, 82.5, 147.5), radius=82.5)
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray
from src.pathtracer.geometry.hittable import HitRecord, make_hit_record, miss_record

vec3 = tm.vec3


@ti.dataclass
class Sphere:
    center: vec3
    radius: ti.f32


@ti.func
def sphere_roots(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Both roots of a*t^2 + 2*h*t + c = 0, smallest first."""
    q = -(h + ti.select(h < 0.0, -sqrt_d, sqrt_d))
    near = (-h - sqrt_d) / a
    far = (-h + sqrt_d) / a
    # q vanishes only when h and the discriminant both do
    if ti.abs(q) > 1e-10:
        near = ti.min(q / a, c / q)
        far = ti.max(q / a, c / q)
    return near, far


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Intersect a ray with a sphere.

    With oc = origin - center the hit parameters solve

        dot(d, d) t^2 + 2 dot(d, oc) t + dot(oc, oc) - r^2 = 0

    The nearer root inside (t_min, t_max) is reported, falling back to the
    farther one, so rays starting inside the sphere hit its far side. A ray
    touching the sphere at a single point is a miss.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    h = tm.dot(ray.direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    record = miss_record()
    if discriminant > 0.0:
        near, far = sphere_roots(h, a, c, ti.sqrt(discriminant))
        t = near
        if not (t_min < t < t_max):
            t = far
        if t_min < t < t_max:
            point = ray.origin + t * ray.direction
            record = make_hit_record(t, point, ray.direction, (point - sphere.center) / sphere.radius)
    return record


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    return Sphere(center=center, radius=radius)
