"""Geometry module for shape primitives.

Components:
    hittable: HitRecord and face-orientation helpers shared by all shapes
    rect: Axis-aligned rectangles in the XY, XZ and YZ planes
    sphere: Sphere primitive with ray-sphere intersection
    box: Axis-aligned box built from six rectangles

Every intersection routine has the same shape:
    rec = hit_<shape>(ray, shape, t_min, t_max)
and reports only hits with t strictly inside (t_min, t_max), with the
normal facing against the ray.
"""

from .box import Box, box_faces, hit_box, sorted_corners
from .hittable import HitRecord, face_normal, make_hit_record, miss_record
from .rect import AxisAlignedRect, RectAxis, hit_rect, make_rect, rect_area, validate_rect_bounds
from .sphere import Sphere, hit_sphere, make_sphere

__all__ = [
    "HitRecord",
    "face_normal",
    "make_hit_record",
    "miss_record",
    "RectAxis",
    "AxisAlignedRect",
    "hit_rect",
    "make_rect",
    "rect_area",
    "validate_rect_bounds",
    "Sphere",
    "hit_sphere",
    "make_sphere",
    "Box",
    "hit_box",
    "box_faces",
    "sorted_corners",
]
