#!/usr/bin/env python3
"""Render the Cornell box scene.

This script renders the classic Cornell box end to end: it builds the world,
sets up the camera, renders the 8-bit image and writes it to disk.

Usage:
    python -m examples.render_cornell_box [options]

Options:
    --width WIDTH           Image width in pixels (default: 384)
    --height HEIGHT         Image height in pixels (default: 384)
    --samples SAMPLES       Samples per pixel (default: 10)
    --max-depth DEPTH       Maximum path length (default: 50)
    --output OUTPUT         Output file path (default: cornell_box.png)
    --channel-order ORDER   Channel order for raw output, rgb or bgr (default: rgb)
    --seed SEED             Random seed (default: 0)
    --cpu                   Force the CPU backend
    --quiet                 Suppress progress output
    --verbose               Enable debug logging

Outputs ending in .png are written with Pillow; any other extension receives
the raw pixel bytes, row-major, top row first, in the chosen channel order.

Example:
    python -m examples.render_cornell_box --width 256 --height 256 --samples 50
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from datetime import datetime
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the Cornell box scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=384,
        help="Image width in pixels (default: 384)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=384,
        help="Image height in pixels (default: 384)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=10,
        help="Number of samples per pixel (default: 10)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum path length (default: 50)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="cornell_box.png",
        help="Output file path (default: cornell_box.png)",
    )
    parser.add_argument(
        "--channel-order",
        choices=["rgb", "bgr"],
        default="rgb",
        help="Channel order for raw (non-PNG) output (default: rgb)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed (default: 0)",
    )
    parser.add_argument(
        "--cpu",
        action="store_true",
        help="Force the CPU backend",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def render_cornell_box(
    width: int = 384,
    height: int = 384,
    num_samples: int = 10,
    max_depth: int = 50,
    output_path: str = "cornell_box.png",
    channel_order: str = "rgb",
    quiet: bool = False,
) -> Path:
    """Render the Cornell box scene and save to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        num_samples: Number of samples per pixel.
        max_depth: Maximum path length.
        output_path: Output file path (PNG, or raw bytes for other extensions).
        channel_order: Channel order for raw output.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.pathtracer.camera.thin_lens import setup_camera
    from src.pathtracer.core.config import RenderConfig
    from src.pathtracer.core.render import render_image
    from src.pathtracer.preview.export import save_png, to_channel_order
    from src.pathtracer.scene.cornell_box import CornellBoxParams, create_cornell_box_scene

    if not quiet:
        print(f"Creating Cornell box scene ({width}x{height})...")

    world, camera, light = create_cornell_box_scene(CornellBoxParams(aspect_ratio=width / height))
    setup_camera(camera)

    config = RenderConfig(
        width=width,
        height=height,
        samples_per_pixel=num_samples,
        max_depth=max_depth,
        light=light,
    )

    start_time = time.time()
    if not quiet:
        print(f"Start: {datetime.now():%H:%M:%S}")
        print(f"Rendering {num_samples} samples per pixel...")

    pixels = render_image(config, world)

    output_file = Path(output_path)
    if output_file.suffix.lower() == ".png":
        save_png(pixels, output_file)
    else:
        output_file.write_bytes(to_channel_order(pixels, channel_order).tobytes())

    total_time = time.time() - start_time
    if not quiet:
        print(f"End: {datetime.now():%H:%M:%S}")
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Use GPU if available, fall back to CPU
    backend = "CPU"
    if args.cpu:
        ti.init(arch=ti.cpu, random_seed=args.seed)
    else:
        try:
            ti.init(arch=ti.gpu, random_seed=args.seed)
            backend = "GPU"
        except Exception:
            ti.init(arch=ti.cpu, random_seed=args.seed)
    if not args.quiet:
        print(f"Using {backend} backend")

    try:
        render_cornell_box(
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            max_depth=args.max_depth,
            output_path=args.output,
            channel_order=args.channel_order,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
