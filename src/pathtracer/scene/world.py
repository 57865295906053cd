"""Hittable list: the flat collection of shapes rendered as one world.

The world is a tagged union over shape kinds stored in an arena of Taichi
fields. Each shape kind keeps its parameters in its own structure-of-arrays
storage, and a member table records ``(kind, index)`` pairs in insertion
order. ``intersect_world`` walks the member table, dispatches on the kind and
keeps the nearest hit:

    closest_t = t_max
    for each member:
        rec = hit_<kind>(ray, shape, t_min, closest_t)
        if rec.hit: closest_t = rec.t; result = rec

Because the running ``closest_t`` becomes the upper bound for the next
member, a member farther than an earlier hit can never replace it.

The world is append-only while it is built and read-only while it is
rendered; ``HittableList.freeze()`` enforces the latter. The arena lives in
module-level fields, so there is one active world per process.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.world import HittableList
    >>> world = HittableList()
    >>> white = world.add_lambertian_material((0.73, 0.73, 0.73))
    >>> world.add_xz_rect(0, 555, 0, 555, k=0, material_id=white)
    0
    >>> world.add_sphere((212.5, 82.5, 147.5), 82.5, white)
    1
    >>> # Use intersect_world within a Taichi kernel
"""

import logging
from dataclasses import asdict, dataclass
from enum import IntEnum
from typing import Any

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray
from src.pathtracer.geometry.box import Box, box_faces, hit_box, sorted_corners
from src.pathtracer.geometry.hittable import HitRecord
from src.pathtracer.geometry.rect import AxisAlignedRect, RectAxis, hit_rect, validate_rect_bounds
from src.pathtracer.geometry.sphere import Sphere, hit_sphere
from src.pathtracer.materials.material import (
    MaterialType,
    add_diffuse_light_material,
    add_lambertian_material,
    clear_materials,
    get_material_color_python,
    get_material_count,
    get_material_type_python,
)

logger = logging.getLogger(__name__)

vec3 = tm.vec3
vec2 = tm.vec2


class ShapeKind(IntEnum):
    """Tag of a world member."""

    RECT = 0
    SPHERE = 1
    BOX = 2


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-world intersection with material information.

    Attributes:
        hit: 1 if any member was hit, 0 on a miss.
        t: Ray parameter of the nearest hit.
        point: Nearest hit point.
        normal: Unit normal oriented against the ray.
        uv: Surface coordinates, always (0, 0).
        front_face: 1 if the ray hit the outward-facing side.
        material_id: Material of the hit shape; -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    uv: vec2
    front_face: ti.i32
    material_id: ti.i32


# Capacity of each arena
MAX_RECTS = 1024
MAX_SPHERES = 1024
MAX_BOXES = 256
MAX_MEMBERS = MAX_RECTS + MAX_SPHERES + MAX_BOXES

rect_axes = ti.field(dtype=ti.i32, shape=MAX_RECTS)
rect_ks = ti.field(dtype=ti.f32, shape=MAX_RECTS)
rect_los = ti.Vector.field(2, dtype=ti.f32, shape=MAX_RECTS)
rect_his = ti.Vector.field(2, dtype=ti.f32, shape=MAX_RECTS)
rect_material_ids = ti.field(dtype=ti.i32, shape=MAX_RECTS)
num_rects = ti.field(dtype=ti.i32, shape=())

sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

box_mins = ti.Vector.field(3, dtype=ti.f32, shape=MAX_BOXES)
box_maxs = ti.Vector.field(3, dtype=ti.f32, shape=MAX_BOXES)
box_material_ids = ti.field(dtype=ti.i32, shape=MAX_BOXES)
num_boxes = ti.field(dtype=ti.i32, shape=())

member_kinds = ti.field(dtype=ti.i32, shape=MAX_MEMBERS)
member_indices = ti.field(dtype=ti.i32, shape=MAX_MEMBERS)
num_members = ti.field(dtype=ti.i32, shape=())


def clear_world() -> None:
    """Remove every shape from the arena."""
    num_rects[None] = 0
    num_spheres[None] = 0
    num_boxes[None] = 0
    num_members[None] = 0


def get_member_count() -> int:
    """Number of shapes in the world."""
    return int(num_members[None])


def _append_member(kind: ShapeKind, index: int) -> int:
    member = num_members[None]
    member_kinds[member] = int(kind)
    member_indices[member] = index
    num_members[None] = member + 1
    return member


# =============================================================================
# Device-side queries
# =============================================================================


@ti.func
def _to_scene_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        uv=rec.uv,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        uv=vec2(0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def _hit_member(ray: Ray, member: ti.i32, t_min: ti.f32, t_max: ti.f32) -> SceneHitRecord:
    """Dispatch one member's intersection test on its shape kind."""
    kind = member_kinds[member]
    i = member_indices[member]
    result = _make_miss_record()

    if kind == int(ShapeKind.RECT):
        rect = AxisAlignedRect(axis=rect_axes[i], k=rect_ks[i], lo=rect_los[i], hi=rect_his[i])
        result = _to_scene_record(hit_rect(ray, rect, t_min, t_max), rect_material_ids[i])
    elif kind == int(ShapeKind.SPHERE):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        result = _to_scene_record(hit_sphere(ray, sphere, t_min, t_max), sphere_material_ids[i])
    elif kind == int(ShapeKind.BOX):
        box = Box(p0=box_mins[i], p1=box_maxs[i])
        result = _to_scene_record(hit_box(ray, box, t_min, t_max), box_material_ids[i])

    return result


@ti.func
def intersect_world(ray: Ray, t_min: ti.f32, t_max: ti.f32) -> SceneHitRecord:
    """Find the nearest intersection of a ray with the world.

    Args:
        ray: The ray to trace.
        t_min: Exclusive lower bound on the hit parameter.
        t_max: Exclusive upper bound on the hit parameter.

    Returns:
        The hit with the smallest t in (t_min, t_max), or a miss record.
    """
    closest_t = t_max
    result = _make_miss_record()

    for member in range(num_members[None]):
        rec = _hit_member(ray, member, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = rec

    return result


# =============================================================================
# Python-side world builder
# =============================================================================


@dataclass
class RectInfo:
    """A rectangle in the world (bounds in ascending in-plane axis order)."""

    axis: RectAxis
    a0: float
    a1: float
    b0: float
    b1: float
    k: float
    material_id: int


@dataclass
class SphereInfo:
    """A sphere in the world."""

    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class BoxInfo:
    """A box in the world, stored by its sorted corners."""

    p0: tuple[float, float, float]
    p1: tuple[float, float, float]
    material_id: int


ShapeInfo = RectInfo | SphereInfo | BoxInfo


class HittableList:
    """Builder for the active world and its materials.

    Shapes reference materials by id and never own them; one material can
    be shared by any number of shapes. Member order only affects scan cost,
    never which hit is reported.

    Attributes:
        members: Python-side description of every shape, in insertion order.
    """

    def __init__(self) -> None:
        """Initialize an empty world (clears shapes and materials)."""
        self.members: list[ShapeInfo] = []
        self._frozen = False
        self.clear()

    def clear(self) -> None:
        """Remove all shapes and materials and unfreeze the world."""
        clear_world()
        clear_materials()
        self.members.clear()
        self._frozen = False

    def freeze(self) -> None:
        """Mark the world read-only; later additions raise RuntimeError."""
        if not self._frozen:
            logger.debug("Freezing world with %d members", len(self.members))
        self._frozen = True

    @property
    def is_frozen(self) -> bool:
        """Whether the world has been frozen for rendering."""
        return self._frozen

    def __len__(self) -> int:
        return len(self.members)

    # =========================================================================
    # Materials
    # =========================================================================

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Register a Lambertian material and return its id."""
        self._check_mutable()
        return add_lambertian_material(albedo)

    def add_diffuse_light_material(self, emit: tuple[float, float, float]) -> int:
        """Register a diffuse light material and return its id."""
        self._check_mutable()
        return add_diffuse_light_material(emit)

    # =========================================================================
    # Shapes
    # =========================================================================

    def add_rect(
        self,
        axis: RectAxis,
        a0: float,
        a1: float,
        b0: float,
        b1: float,
        k: float,
        material_id: int,
    ) -> int:
        """Add an axis-aligned rectangle.

        Args:
            axis: Orientation (dropped axis).
            a0, a1: Bounds along the first in-plane axis.
            b0, b1: Bounds along the second in-plane axis.
            k: Plane coordinate along the dropped axis.
            material_id: Material of the rectangle.

        Returns:
            The member index of the rectangle.

        Raises:
            RuntimeError: If the world is frozen or the arena is full.
            ValueError: If the axis is unknown, the bounds are empty or the
                material is unknown.
        """
        self._check_mutable()
        axis = RectAxis(axis)
        validate_rect_bounds(a0, a1, b0, b1)
        self._check_material(material_id)
        idx = num_rects[None]
        if idx >= MAX_RECTS:
            raise RuntimeError(f"Maximum number of rectangles ({MAX_RECTS}) exceeded")

        rect_axes[idx] = int(axis)
        rect_ks[idx] = k
        rect_los[idx] = vec2(a0, b0)
        rect_his[idx] = vec2(a1, b1)
        rect_material_ids[idx] = material_id
        num_rects[None] = idx + 1

        self.members.append(
            RectInfo(axis, float(a0), float(a1), float(b0), float(b1), float(k), material_id)
        )
        return _append_member(ShapeKind.RECT, idx)

    def add_xy_rect(self, x0: float, x1: float, y0: float, y1: float, k: float, material_id: int) -> int:
        """Add a rectangle in the plane z = k."""
        return self.add_rect(RectAxis.XY, x0, x1, y0, y1, k, material_id)

    def add_xz_rect(self, x0: float, x1: float, z0: float, z1: float, k: float, material_id: int) -> int:
        """Add a rectangle in the plane y = k."""
        return self.add_rect(RectAxis.XZ, x0, x1, z0, z1, k, material_id)

    def add_yz_rect(self, y0: float, y1: float, z0: float, z1: float, k: float, material_id: int) -> int:
        """Add a rectangle in the plane x = k."""
        return self.add_rect(RectAxis.YZ, y0, y1, z0, z1, k, material_id)

    def add_sphere(self, center: tuple[float, float, float], radius: float, material_id: int) -> int:
        """Add a sphere.

        Returns:
            The member index of the sphere.

        Raises:
            RuntimeError: If the world is frozen or the arena is full.
            ValueError: If the radius is not positive or the material is unknown.
        """
        self._check_mutable()
        if radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        self._check_material(material_id)
        idx = num_spheres[None]
        if idx >= MAX_SPHERES:
            raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

        sphere_centers[idx] = vec3(center[0], center[1], center[2])
        sphere_radii[idx] = radius
        sphere_material_ids[idx] = material_id
        num_spheres[None] = idx + 1

        self.members.append(SphereInfo(tuple(float(c) for c in center), float(radius), material_id))
        return _append_member(ShapeKind.SPHERE, idx)

    def add_box(
        self,
        p0: tuple[float, float, float],
        p1: tuple[float, float, float],
        material_id: int,
    ) -> int:
        """Add a box given two opposite corners.

        Returns:
            The member index of the box.

        Raises:
            RuntimeError: If the world is frozen or the arena is full.
            ValueError: If the corners do not enclose a volume or the
                material is unknown.
        """
        self._check_mutable()
        lo, hi = sorted_corners(p0, p1)
        self._check_material(material_id)
        idx = num_boxes[None]
        if idx >= MAX_BOXES:
            raise RuntimeError(f"Maximum number of boxes ({MAX_BOXES}) exceeded")

        box_mins[idx] = vec3(lo[0], lo[1], lo[2])
        box_maxs[idx] = vec3(hi[0], hi[1], hi[2])
        box_material_ids[idx] = material_id
        num_boxes[None] = idx + 1

        self.members.append(BoxInfo(lo, hi, material_id))
        return _append_member(ShapeKind.BOX, idx)

    def add_box_as_rects(
        self,
        p0: tuple[float, float, float],
        p1: tuple[float, float, float],
        material_id: int,
    ) -> list[int]:
        """Add the six faces of a box as independent rectangles."""
        return [
            self.add_rect(axis, a0, a1, b0, b1, k, material_id)
            for axis, a0, a1, b0, b1, k in box_faces(p0, p1)
        ]

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Describe the world and its materials as plain Python data."""
        materials = []
        for material_id in range(get_material_count()):
            material_type = get_material_type_python(material_id)
            materials.append(
                {
                    "type": material_type.name.lower(),
                    "color": list(get_material_color_python(material_id)),
                }
            )

        shapes = []
        for info in self.members:
            entry = asdict(info)
            if isinstance(info, RectInfo):
                entry["kind"] = "rect"
                entry["axis"] = info.axis.name
            elif isinstance(info, SphereInfo):
                entry["kind"] = "sphere"
                entry["center"] = list(info.center)
            else:
                entry["kind"] = "box"
                entry["p0"] = list(info.p0)
                entry["p1"] = list(info.p1)
            shapes.append(entry)

        return {"materials": materials, "shapes": shapes}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Rebuild the world from ``to_dict`` output.

        Replaces everything currently in the world.

        Raises:
            ValueError: If an entry has an unknown type or kind.
        """
        self.clear()
        for material in data.get("materials", []):
            color = tuple(material["color"])
            if material["type"] == MaterialType.LAMBERTIAN.name.lower():
                self.add_lambertian_material(color)
            elif material["type"] == MaterialType.DIFFUSE_LIGHT.name.lower():
                self.add_diffuse_light_material(color)
            else:
                raise ValueError(f"Unknown material type: {material['type']!r}")

        for shape in data.get("shapes", []):
            kind = shape.get("kind")
            if kind == "rect":
                self.add_rect(
                    RectAxis[shape["axis"]],
                    shape["a0"],
                    shape["a1"],
                    shape["b0"],
                    shape["b1"],
                    shape["k"],
                    shape["material_id"],
                )
            elif kind == "sphere":
                self.add_sphere(tuple(shape["center"]), shape["radius"], shape["material_id"])
            elif kind == "box":
                self.add_box(tuple(shape["p0"]), tuple(shape["p1"]), shape["material_id"])
            else:
                raise ValueError(f"Unknown shape kind: {kind!r}")

    # =========================================================================
    # Validation
    # =========================================================================

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError("World is frozen; clear() it before adding shapes")

    @staticmethod
    def _check_material(material_id: int) -> None:
        if not 0 <= material_id < get_material_count():
            raise ValueError(f"Unknown material id {material_id}")

    def __repr__(self) -> str:
        return f"HittableList(members={len(self.members)}, frozen={self._frozen})"
