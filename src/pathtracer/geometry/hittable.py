"""Hit record shared by every intersectable shape.

Each primitive exposes a Taichi function with the same contract::

    hit_<shape>(ray, shape, t_min, t_max) -> HitRecord

A hit is reported only for ``t_min < t < t_max``. Records are returned by
value; callers check ``record.hit`` instead of receiving an out-parameter.

The stored normal always faces the incoming ray (front-face convention), and
``front_face`` remembers whether the ray arrived on the side the outward
normal points to.
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3
vec2 = tm.vec2


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 on a miss. The other
            fields are only meaningful when hit == 1.
        t: The ray parameter of the intersection.
        point: The intersection point.
        normal: Unit surface normal, oriented against the ray direction.
        uv: Surface coordinates. Primitives do not parameterize their
            surfaces, so this is always (0, 0).
        front_face: 1 if the ray hit the side the outward normal points to.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    uv: vec2
    front_face: ti.i32


@ti.func
def face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient an outward normal against the incoming ray.

    Args:
        ray_direction: Direction of the incoming ray.
        outward_normal: Unit normal pointing out of the surface.

    Returns:
        Tuple of (normal, front_face).
    """
    front_face = 1
    normal = outward_normal
    if tm.dot(ray_direction, outward_normal) > 0.0:
        front_face = 0
        normal = -outward_normal
    return normal, front_face


@ti.func
def miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        uv=vec2(0.0, 0.0),
        front_face=0,
    )


@ti.func
def make_hit_record(t: ti.f32, point: vec3, ray_direction: vec3, outward_normal: vec3) -> HitRecord:
    """Build a successful HitRecord, applying the front-face convention."""
    normal, front_face = face_normal(ray_direction, outward_normal)
    return HitRecord(
        hit=1,
        t=t,
        point=point,
        normal=normal,
        uv=vec2(0.0, 0.0),
        front_face=front_face,
    )
