"""Tests for the thin-lens camera."""

import math

import numpy as np
import pytest
import taichi as ti


def _cornell_camera(**overrides):
    from src.pathtracer.camera.thin_lens import Camera

    params = dict(
        lookfrom=(278.0, 278.0, -800.0),
        lookat=(278.0, 278.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=40.0,
        aspect_ratio=1.0,
        aperture=0.0,
        focus_dist=10.0,
        time0=0.0,
        time1=1.0,
    )
    params.update(overrides)
    return Camera(**params)


def _sample_rays(s, t, n=256):
    """Generate n rays through (s, t) and return origins, directions, times."""
    from src.pathtracer.camera.thin_lens import get_ray

    origins = ti.Vector.field(3, dtype=ti.f32, shape=n)
    directions = ti.Vector.field(3, dtype=ti.f32, shape=n)
    times = ti.field(dtype=ti.f32, shape=n)

    @ti.kernel
    def test_kernel(s: ti.f32, t: ti.f32):
        for i in range(n):
            ray = get_ray(s, t)
            origins[i] = ray.origin
            directions[i] = ray.direction
            times[i] = ray.time

    test_kernel(s, t)
    return origins.to_numpy(), directions.to_numpy(), times.to_numpy()


class TestCameraSetup:
    """Tests for setup_camera basis and viewport."""

    def test_basis(self):
        """Test the orthonormal basis for a camera looking down +z."""
        from src.pathtracer.camera.thin_lens import get_camera_info, is_camera_ready, setup_camera

        assert not is_camera_ready()
        setup_camera(_cornell_camera())
        assert is_camera_ready()

        info = get_camera_info()
        assert info["origin"] == pytest.approx((278.0, 278.0, -800.0))
        assert info["w"] == pytest.approx((0.0, 0.0, -1.0))
        assert info["u"] == pytest.approx((-1.0, 0.0, 0.0))
        assert info["v"] == pytest.approx((0.0, 1.0, 0.0))

    def test_viewport_scaled_to_focus_distance(self):
        """Test the viewport spans focus_dist * 2 * tan(vfov / 2)."""
        from src.pathtracer.camera.thin_lens import get_camera_info, setup_camera

        setup_camera(_cornell_camera())
        info = get_camera_info()

        height = 10.0 * 2.0 * math.tan(math.radians(20.0))
        assert info["vertical"] == pytest.approx((0.0, height, 0.0), abs=1e-4)
        assert info["horizontal"] == pytest.approx((-height, 0.0, 0.0), abs=1e-4)
        assert info["lower_left"] == pytest.approx(
            (278.0 + height / 2.0, 278.0 - height / 2.0, -790.0), abs=1e-3
        )

    @pytest.mark.parametrize(
        "overrides,message",
        [
            ({"vfov": 0.0}, "vfov"),
            ({"vfov": 180.0}, "vfov"),
            ({"aspect_ratio": 0.0}, "aspect_ratio"),
            ({"aperture": -1.0}, "aperture"),
            ({"focus_dist": 0.0}, "focus_dist"),
            ({"time0": 1.0, "time1": 0.0}, "Shutter"),
            ({"lookat": (278.0, 278.0, -800.0)}, "must differ"),
            ({"vup": (0.0, 0.0, 1.0)}, "parallel"),
        ],
    )
    def test_invalid_parameters(self, overrides, message):
        """Test invalid camera parameters raise ValueError."""
        from src.pathtracer.camera.thin_lens import is_camera_ready, setup_camera

        with pytest.raises(ValueError, match=message):
            setup_camera(_cornell_camera(**overrides))
        assert not is_camera_ready()

    def test_clear_camera(self):
        """Test clear_camera marks the camera as not ready."""
        from src.pathtracer.camera.thin_lens import clear_camera, is_camera_ready, setup_camera

        setup_camera(_cornell_camera())
        clear_camera()
        assert not is_camera_ready()


class TestRayGeneration:
    """Tests for get_ray."""

    def test_center_ray(self):
        """Test the centre ray starts at lookfrom and points at lookat."""
        from src.pathtracer.camera.thin_lens import setup_camera

        setup_camera(_cornell_camera())
        origins, directions, _ = _sample_rays(0.5, 0.5)

        np.testing.assert_allclose(origins, np.tile([278.0, 278.0, -800.0], (len(origins), 1)), atol=1e-3)
        np.testing.assert_allclose(directions, np.tile([0.0, 0.0, 1.0], (len(directions), 1)), atol=1e-5)

    def test_directions_normalized(self):
        """Test corner rays are unit length and point toward the image corner."""
        from src.pathtracer.camera.thin_lens import setup_camera

        setup_camera(_cornell_camera())
        _, directions, _ = _sample_rays(0.0, 1.0)

        np.testing.assert_allclose(np.linalg.norm(directions, axis=1), 1.0, atol=1e-5)
        # Left edge of the image is +x, top edge is +y
        assert (directions[:, 0] > 0.0).all()
        assert (directions[:, 1] > 0.0).all()

    def test_times_within_shutter(self):
        """Test ray times are drawn from [time0, time1]."""
        from src.pathtracer.camera.thin_lens import setup_camera

        setup_camera(_cornell_camera(time0=0.25, time1=0.75))
        _, _, times = _sample_rays(0.5, 0.5)

        assert times.min() >= 0.25
        assert times.max() <= 0.75
        assert times.max() > times.min()

    def test_aperture_jitters_origin(self):
        """Test a non-zero aperture spreads origins over the lens disk."""
        from src.pathtracer.camera.thin_lens import setup_camera

        setup_camera(_cornell_camera(aperture=2.0, focus_dist=800.0))
        origins, _, _ = _sample_rays(0.5, 0.5)

        offsets = origins - np.array([278.0, 278.0, -800.0])
        radii = np.linalg.norm(offsets, axis=1)
        assert radii.max() <= 1.0 + 1e-3
        assert radii.max() > 0.1
        # Lens lies in the image plane
        np.testing.assert_allclose(offsets[:, 2], 0.0, atol=1e-3)
