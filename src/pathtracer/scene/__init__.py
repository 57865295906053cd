"""Scene module.

Components:
    world: HittableList, the active world, and intersect_world
    cornell_box: Factory for the classic Cornell box
"""

from .cornell_box import CornellBoxParams, create_cornell_box_scene, get_light_rect
from .world import HittableList, SceneHitRecord, ShapeKind, clear_world, intersect_world

__all__ = [
    "HittableList",
    "SceneHitRecord",
    "ShapeKind",
    "clear_world",
    "intersect_world",
    "CornellBoxParams",
    "create_cornell_box_scene",
    "get_light_rect",
]
