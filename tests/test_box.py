"""Unit tests for the axis-aligned box primitive.

The key property: a box must report exactly the same nearest hit as its six
face rectangles added individually to the world.
"""

import itertools

import numpy as np
import pytest
import taichi as ti

BOX_MIN = (265.0, 0.0, 295.0)
BOX_MAX = (430.0, 330.0, 460.0)


def _probe_rays():
    """Rays from 26 directions around the box aimed at a grid of targets."""
    lo = np.array(BOX_MIN)
    hi = np.array(BOX_MAX)
    center = (lo + hi) / 2.0

    targets = np.stack(
        np.meshgrid(*[np.linspace(lo[i] - 20.0, hi[i] + 20.0, 5) for i in range(3)], indexing="ij"),
        axis=-1,
    ).reshape(-1, 3)

    origins = []
    directions = []
    for offset in itertools.product((-1.0, 0.0, 1.0), repeat=3):
        if offset == (0.0, 0.0, 0.0):
            continue
        origin = center + 500.0 * np.array(offset)
        for target in targets:
            origins.append(origin)
            directions.append(target - origin)
    return np.array(origins, dtype=np.float32), np.array(directions, dtype=np.float32)


def _trace_world(origins, directions):
    """Intersect every probe ray with the active world."""
    from src.pathtracer.core.ray import make_ray
    from src.pathtracer.scene.world import intersect_world

    n = origins.shape[0]
    origin_field = ti.Vector.field(3, dtype=ti.f32, shape=n)
    direction_field = ti.Vector.field(3, dtype=ti.f32, shape=n)
    hits = ti.field(dtype=ti.i32, shape=n)
    ts = ti.field(dtype=ti.f32, shape=n)
    normals = ti.Vector.field(3, dtype=ti.f32, shape=n)

    origin_field.from_numpy(origins)
    direction_field.from_numpy(directions)

    @ti.kernel
    def trace():
        for i in range(n):
            rec = intersect_world(make_ray(origin_field[i], direction_field[i], 0.0), 0.001, 1e10)
            hits[i] = rec.hit
            ts[i] = rec.t
            normals[i] = rec.normal

    trace()
    return hits.to_numpy(), ts.to_numpy(), normals.to_numpy()


class TestBoxMatchesFaces:
    """Box vs. six independent rectangles."""

    def test_box_equals_six_rects_for_probe_grid(self):
        """Test hit flag, t and normal agree for every probe ray."""
        from src.pathtracer.scene.world import HittableList

        origins, directions = _probe_rays()

        world = HittableList()
        white = world.add_lambertian_material((0.73, 0.73, 0.73))
        world.add_box(BOX_MIN, BOX_MAX, white)
        box_hits, box_ts, box_normals = _trace_world(origins, directions)

        world.clear()
        white = world.add_lambertian_material((0.73, 0.73, 0.73))
        world.add_box_as_rects(BOX_MIN, BOX_MAX, white)
        assert len(world) == 6
        rect_hits, rect_ts, rect_normals = _trace_world(origins, directions)

        # The grid includes both hits and misses
        assert box_hits.sum() > 0
        assert (box_hits == 0).sum() > 0

        np.testing.assert_array_equal(box_hits, rect_hits)
        mask = box_hits == 1
        np.testing.assert_allclose(box_ts[mask], rect_ts[mask], rtol=1e-6)
        np.testing.assert_allclose(box_normals[mask], rect_normals[mask], atol=1e-6)

    def test_hit_from_inside_reports_far_face(self):
        """Test a ray starting inside the box hits the face it exits through."""
        from src.pathtracer.core.ray import make_ray
        from src.pathtracer.geometry.box import Box, hit_box

        hit = ti.field(dtype=ti.i32, shape=())
        t_val = ti.field(dtype=ti.f32, shape=())
        normal = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            box = Box(p0=ti.math.vec3(0.0, 0.0, 0.0), p1=ti.math.vec3(10.0, 10.0, 10.0))
            rec = hit_box(make_ray(ti.math.vec3(5.0, 5.0, 5.0), ti.math.vec3(0.0, 1.0, 0.0), 0.0), box, 0.001, 1e10)
            hit[None] = rec.hit
            t_val[None] = rec.t
            normal[None] = rec.normal

        test_kernel()
        assert hit[None] == 1
        assert t_val[None] == pytest.approx(5.0)
        n = normal[None]
        assert (n[0], n[1], n[2]) == pytest.approx((0.0, -1.0, 0.0))

    def test_nearest_face_wins(self):
        """Test a ray through the box reports the entry face."""
        from src.pathtracer.core.ray import make_ray
        from src.pathtracer.geometry.box import Box, hit_box

        t_val = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            box = Box(p0=ti.math.vec3(0.0, 0.0, 0.0), p1=ti.math.vec3(10.0, 10.0, 10.0))
            ray = make_ray(ti.math.vec3(5.0, 5.0, -10.0), ti.math.vec3(0.0, 0.0, 1.0), 0.0)
            t_val[None] = hit_box(ray, box, 0.001, 1e10).t

        test_kernel()
        assert t_val[None] == pytest.approx(10.0)

    @pytest.mark.parametrize(
        "t_min,t_max,expected_hit,expected_t",
        [
            (0.001, 10.0, 0, None),
            (10.0, 1e10, 1, 20.0),
            (0.001, 10.5, 1, 10.0),
        ],
    )
    def test_interval_is_open(self, t_min, t_max, expected_hit, expected_t):
        """Test faces exactly at t_min or t_max are excluded from the hit."""
        from src.pathtracer.core.ray import make_ray
        from src.pathtracer.geometry.box import Box, hit_box

        hit = ti.field(dtype=ti.i32, shape=())
        t_val = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(t_min: ti.f32, t_max: ti.f32):
            box = Box(p0=ti.math.vec3(0.0, 0.0, 0.0), p1=ti.math.vec3(10.0, 10.0, 10.0))
            ray = make_ray(ti.math.vec3(5.0, 5.0, -10.0), ti.math.vec3(0.0, 0.0, 1.0), 0.0)
            rec = hit_box(ray, box, t_min, t_max)
            hit[None] = rec.hit
            t_val[None] = rec.t

        test_kernel(t_min, t_max)
        assert hit[None] == expected_hit
        if expected_t is not None:
            assert t_val[None] == pytest.approx(expected_t)


class TestBoxHelpers:
    """Tests for Python-side box helpers."""

    def test_box_faces_order_and_planes(self):
        """Test the six faces in order XY, XY, XZ, XZ, YZ, YZ."""
        from src.pathtracer.geometry.box import box_faces
        from src.pathtracer.geometry.rect import RectAxis

        faces = box_faces(BOX_MIN, BOX_MAX)
        assert [f[0] for f in faces] == [
            RectAxis.XY,
            RectAxis.XY,
            RectAxis.XZ,
            RectAxis.XZ,
            RectAxis.YZ,
            RectAxis.YZ,
        ]
        assert [f[5] for f in faces] == [460.0, 295.0, 330.0, 0.0, 430.0, 265.0]
        assert faces[0][1:5] == (265.0, 430.0, 0.0, 330.0)
        assert faces[2][1:5] == (265.0, 430.0, 295.0, 460.0)
        assert faces[4][1:5] == (0.0, 330.0, 295.0, 460.0)

    def test_sorted_corners(self):
        """Test corners given in any order are sorted per axis."""
        from src.pathtracer.geometry.box import sorted_corners

        lo, hi = sorted_corners((430, 0, 460), (265, 330, 295))
        assert lo == BOX_MIN
        assert hi == BOX_MAX

    def test_flat_box_rejected(self):
        """Test a box with zero extent raises ValueError."""
        from src.pathtracer.geometry.box import sorted_corners

        with pytest.raises(ValueError, match="do not enclose a volume"):
            sorted_corners((0, 0, 0), (1, 0, 1))
