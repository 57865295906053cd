"""Preview module for output of rendered pixel buffers.

Example:
    >>> from src.pathtracer.preview import save_png
    >>> save_png(pixels, "output.png")
"""

from src.pathtracer.preview.export import (
    ChannelOrder,
    pixel_buffer_from_bytes,
    save_png,
    to_channel_order,
)

__all__ = [
    "ChannelOrder",
    "save_png",
    "to_channel_order",
    "pixel_buffer_from_bytes",
]
