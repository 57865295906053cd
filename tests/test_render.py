"""Tests for the parallel render loop and the pixel buffer.

Tests cover:
- Preconditions (camera, configuration)
- Buffer shape, dtype, byte layout and dimensions
- Gamma correction and quantization of a constant background
- Row order (row 0 is the top of the image)
"""

import numpy as np
import pytest


def _forward_camera(aspect_ratio=1.0):
    """Pinhole camera at the origin looking down +z."""
    from src.pathtracer.camera.thin_lens import Camera, setup_camera

    setup_camera(
        Camera(
            lookfrom=(0.0, 0.0, 0.0),
            lookat=(0.0, 0.0, 1.0),
            vup=(0.0, 1.0, 0.0),
            vfov=90.0,
            aspect_ratio=aspect_ratio,
        )
    )


class TestRenderPreconditions:
    """Tests for errors raised before rendering."""

    def test_requires_camera(self):
        """Test render_image raises when no camera is set up."""
        from src.pathtracer.core.config import RenderConfig
        from src.pathtracer.core.render import render_image
        from src.pathtracer.scene.world import HittableList

        with pytest.raises(RuntimeError, match="Camera not set up"):
            render_image(RenderConfig(width=4, height=4), HittableList())

    def test_invalid_config(self):
        """Test an invalid configuration raises ValueError."""
        from src.pathtracer.core.config import RenderConfig
        from src.pathtracer.core.render import render_image

        _forward_camera()
        with pytest.raises(ValueError, match="at least 2x2"):
            render_image(RenderConfig(width=1, height=4))

    def test_buffer_before_render(self):
        """Test the buffer cannot be read before the first render."""
        from src.pathtracer.core.render import get_image_dimensions, get_pixel_buffer

        assert get_image_dimensions() == (0, 0)
        with pytest.raises(RuntimeError, match="No image rendered yet"):
            get_pixel_buffer()


class TestPixelBuffer:
    """Tests for the buffer produced by render_image."""

    def test_shape_and_layout(self):
        """Test a non-square image has shape (height, width, 3) and matching bytes."""
        from src.pathtracer.core.config import RenderConfig
        from src.pathtracer.core.render import get_image_dimensions, get_pixel_bytes, render_image
        from src.pathtracer.scene.world import HittableList

        _forward_camera(aspect_ratio=2.0)
        world = HittableList()
        pixels = render_image(RenderConfig(width=8, height=4, samples_per_pixel=1), world)

        assert pixels.shape == (4, 8, 3)
        assert pixels.dtype == np.uint8
        assert get_image_dimensions() == (8, 4)
        assert get_pixel_bytes() == pixels.tobytes()
        assert len(get_pixel_bytes()) == 8 * 4 * 3

    def test_world_frozen_by_render(self):
        """Test the rendered world cannot be modified afterwards."""
        from src.pathtracer.core.config import RenderConfig
        from src.pathtracer.core.render import render_image
        from src.pathtracer.scene.world import HittableList

        _forward_camera()
        world = HittableList()
        white = world.add_lambertian_material((0.73, 0.73, 0.73))
        render_image(RenderConfig(width=4, height=4, samples_per_pixel=1), world)

        assert world.is_frozen
        with pytest.raises(RuntimeError, match="frozen"):
            world.add_sphere((0, 0, 5), 1.0, white)

    def test_background_gamma_and_quantization(self):
        """Test a constant background of 0.25 becomes 127 after sqrt and scaling."""
        from src.pathtracer.core.config import RenderConfig
        from src.pathtracer.core.render import render_image
        from src.pathtracer.scene.world import HittableList

        _forward_camera()
        config = RenderConfig(width=6, height=6, samples_per_pixel=4, background=(0.25, 0.25, 0.25))
        pixels = render_image(config, HittableList())

        assert (pixels == 127).all()

    def test_bright_background_clamped(self):
        """Test radiance above 1 saturates at 255."""
        from src.pathtracer.core.config import RenderConfig
        from src.pathtracer.core.render import render_image
        from src.pathtracer.scene.world import HittableList

        _forward_camera()
        config = RenderConfig(width=4, height=4, samples_per_pixel=2, background=(4.0, 1.0, 0.0))
        pixels = render_image(config, HittableList())

        assert (pixels[..., 0] == 255).all()
        assert (pixels[..., 1] == 255).all()
        assert (pixels[..., 2] == 0).all()

    def test_overflowing_estimate_saturates(self):
        """Test a sum that overflows to infinity still renders white, not black."""
        from src.pathtracer.core.config import RenderConfig
        from src.pathtracer.core.render import render_image
        from src.pathtracer.scene.world import HittableList

        _forward_camera()
        config = RenderConfig(width=4, height=4, samples_per_pixel=4, background=(1e38, 1e38, 1e38))
        pixels = render_image(config, HittableList())

        assert (pixels == 255).all()

    def test_top_row_first(self):
        """Test an emitter above the horizon lights row 0 and not the last row."""
        from src.pathtracer.core.config import RenderConfig
        from src.pathtracer.core.render import render_image
        from src.pathtracer.scene.world import HittableList

        _forward_camera()
        world = HittableList()
        light = world.add_diffuse_light_material((15.0, 15.0, 15.0))
        world.add_xy_rect(-100, 100, 0, 100, 10.0, light)

        pixels = render_image(RenderConfig(width=8, height=8, samples_per_pixel=2), world)

        assert (pixels[0] == 255).all()
        assert (pixels[-1] == 0).all()

    def test_rerender_replaces_image(self):
        """Test a second render at another size replaces the first."""
        from src.pathtracer.core.config import RenderConfig
        from src.pathtracer.core.render import get_image_dimensions, get_pixel_buffer, render_image
        from src.pathtracer.scene.world import HittableList

        _forward_camera()
        render_image(RenderConfig(width=8, height=8, samples_per_pixel=1, background=(1, 1, 1)), HittableList())
        render_image(RenderConfig(width=4, height=4, samples_per_pixel=1), HittableList())

        assert get_image_dimensions() == (4, 4)
        assert (get_pixel_buffer() == 0).all()


class TestCornellRender:
    """Smoke test for the full Cornell box scene."""

    def test_small_cornell_render(self):
        """Test a tiny Cornell render sees the light and the lit walls."""
        from src.pathtracer.camera.thin_lens import setup_camera
        from src.pathtracer.core.config import RenderConfig
        from src.pathtracer.core.render import render_image
        from src.pathtracer.scene.cornell_box import create_cornell_box_scene

        world, camera, light = create_cornell_box_scene()
        setup_camera(camera)
        pixels = render_image(RenderConfig(width=32, height=32, samples_per_pixel=4, light=light), world)

        assert pixels.shape == (32, 32, 3)
        # The ceiling light saturates some pixels in the upper half
        assert (pixels[:16] == 255).all(axis=-1).any()
        # Most of the frame receives some light
        assert (pixels.sum(axis=-1) > 0).mean() > 0.5
