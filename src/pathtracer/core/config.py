"""Render configuration.

Two dataclasses carry every run parameter the render loop and the integrator
need: the image size and sampling budget (``RenderConfig``) and the
rectangle sampled for direct lighting (``LightRect``). The integrator reads
the light geometry from here instead of module constants, so tests can point
it at any rectangle.

The defaults reproduce the classic 555-unit Cornell box run: a 384x384 image,
10 samples per pixel, at most 50 bounces, a black background and the ceiling
light spanning x in [213, 343], z in [227, 332] at y = 554.

Example:
    >>> from src.pathtracer.core.config import LightRect, RenderConfig
    >>> config = RenderConfig(width=128, height=128, samples_per_pixel=16)
    >>> config.validate()
    >>> config.light.area
    13650.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from src.pathtracer.geometry.rect import RectAxis

# Preallocated pixel buffer size (avoids kernel recompilation on resize)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Lower bound of the intersection interval for every traced ray
DEFAULT_T_MIN = 0.001

# Lights seen at a smaller cosine contribute nothing
DEFAULT_LIGHT_COSINE_EPSILON = 1e-5


@dataclass
class LightRect:
    """An axis-aligned rectangle sampled for next-event estimation.

    Attributes:
        axis: Orientation of the rectangle (dropped axis).
        k: Plane coordinate along the dropped axis.
        lo: Lower bounds in the two in-plane axes (ascending axis order).
        hi: Upper bounds in the two in-plane axes.
    """

    axis: RectAxis = RectAxis.XZ
    k: float = 554.0
    lo: tuple[float, float] = (213.0, 227.0)
    hi: tuple[float, float] = (343.0, 332.0)

    @property
    def area(self) -> float:
        """Area of the rectangle."""
        return (self.hi[0] - self.lo[0]) * (self.hi[1] - self.lo[1])

    def validate(self) -> None:
        """Check the rectangle geometry.

        Raises:
            ValueError: If the rectangle has zero or negative extent.
        """
        if not (self.hi[0] > self.lo[0] and self.hi[1] > self.lo[1]):
            raise ValueError(
                f"Light rectangle must satisfy lo < hi, got lo={self.lo}, hi={self.hi}"
            )


@dataclass
class RenderConfig:
    """Parameters of one render.

    Attributes:
        width: Image width in pixels (at least 2).
        height: Image height in pixels (at least 2).
        samples_per_pixel: Independent camera samples per pixel.
        max_depth: Maximum path length; also bounds per-path work.
        background: Radiance returned by rays that escape the scene.
        light: Rectangle sampled for direct lighting.
        t_min: Lower bound of the intersection interval (self-hit guard).
        light_cosine_epsilon: Lights seen edge-on below this cosine are skipped.
    """

    width: int = 384
    height: int = 384
    samples_per_pixel: int = 10
    max_depth: int = 50
    background: tuple[float, float, float] = (0.0, 0.0, 0.0)
    light: LightRect = field(default_factory=LightRect)
    t_min: float = DEFAULT_T_MIN
    light_cosine_epsilon: float = DEFAULT_LIGHT_COSINE_EPSILON

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    def validate(self) -> None:
        """Check that the configuration can be rendered.

        Raises:
            ValueError: If any parameter is out of range.
        """
        # Pixel coordinates are normalized by (size - 1)
        if self.width < 2 or self.height < 2:
            raise ValueError(f"Image must be at least 2x2 pixels, got {self.width}x{self.height}")
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if len(self.background) != 3:
            raise ValueError(f"background must have 3 components, got {len(self.background)}")
        if not all(math.isfinite(v) for v in self.background):
            raise ValueError(f"background must be finite, got {self.background}")
        if self.t_min <= 0.0:
            raise ValueError(f"t_min must be positive, got {self.t_min}")
        if self.light_cosine_epsilon <= 0.0:
            raise ValueError(
                f"light_cosine_epsilon must be positive, got {self.light_cosine_epsilon}"
            )
        self.light.validate()
