"""Image export utilities for rendered pixel buffers.

The render loop produces 8-bit RGB buffers of shape (height, width, 3) with
the top row first. This module converts them to other channel orders,
rebuilds them from raw bytes and writes them to disk.

Supported formats:
    - PNG (8-bit via Pillow)

Example:
    >>> from src.pathtracer.core.render import render_image
    >>> from src.pathtracer.preview.export import save_png, to_channel_order
    >>>
    >>> pixels = render_image(config, world)
    >>> save_png(pixels, "cornell_box.png")
    >>> bgr = to_channel_order(pixels, "bgr")
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

ChannelOrder = Literal["rgb", "bgr"]


def _check_pixel_buffer(buffer: npt.NDArray[np.uint8]) -> None:
    if buffer.ndim != 3 or buffer.shape[2] != 3:
        raise ValueError(f"Pixel buffer must have shape (H, W, 3), got {buffer.shape}")
    if buffer.dtype != np.uint8:
        raise ValueError(f"Pixel buffer must be uint8, got {buffer.dtype}")


def to_channel_order(buffer: npt.NDArray[np.uint8], order: ChannelOrder = "rgb") -> npt.NDArray[np.uint8]:
    """Reorder the channels of an RGB pixel buffer.

    Args:
        buffer: RGB buffer of shape (H, W, 3), dtype uint8.
        order: "rgb" (copy) or "bgr" (blue first, as Windows DIBs expect).

    Returns:
        A new contiguous buffer in the requested order.

    Raises:
        ValueError: If the buffer shape/dtype or the order is invalid.
    """
    _check_pixel_buffer(buffer)
    if order == "rgb":
        return buffer.copy()
    if order == "bgr":
        return np.ascontiguousarray(buffer[:, :, ::-1])
    raise ValueError(f"Unknown channel order: {order!r} (expected 'rgb' or 'bgr')")


def pixel_buffer_from_bytes(data: bytes, width: int, height: int) -> npt.NDArray[np.uint8]:
    """Rebuild a pixel buffer from ``width * height * 3`` row-major bytes.

    Raises:
        ValueError: If the dimensions are not positive or the byte count
            does not match them.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Dimensions must be positive, got {width}x{height}")
    expected = width * height * 3
    if len(data) != expected:
        raise ValueError(f"Expected {expected} bytes for {width}x{height}, got {len(data)}")
    return np.frombuffer(data, dtype=np.uint8).reshape(height, width, 3).copy()


def save_png(buffer: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an RGB pixel buffer as a PNG file.

    Args:
        buffer: RGB buffer of shape (H, W, 3), dtype uint8, top row first.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the buffer shape or dtype is invalid.
    """
    _check_pixel_buffer(buffer)
    pil_image = PILImage.fromarray(np.ascontiguousarray(buffer))
    pil_image.save(filepath)
