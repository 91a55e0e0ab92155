#!/usr/bin/env python3
"""Render the default four-sphere scene.

This script demonstrates end-to-end rendering with tinytracer. It builds the
default scene (or loads one from a JSON file), sets up the camera, renders
the image band by band and writes it as a binary PPM or PNG.

Usage:
    python examples/render_default_scene.py [options]

Options:
    --width WIDTH             Image width in pixels (default: 1024)
    --height HEIGHT           Image height in pixels (default: 768)
    --fov DEGREES             Vertical field of view in degrees (default: 90)
    --output OUTPUT           Output file, .ppm or .png (default: out.ppm)
    --scene FILE              JSON scene file instead of the default scene
    --checker-parity MODE     Checkerboard parity rule: legacy or floor
    --serial                  Render pixels on a single thread
    --rows-per-batch ROWS     Rows per progress update (default: 64)
    --arch {cpu,gpu}          Taichi backend (default: cpu)
    --show                    Show the image in a Matplotlib window
    --quiet                   Suppress progress output

Example:
    python examples/render_default_scene.py --width 640 --height 480 --output out.png
"""

from __future__ import annotations

import argparse
import math
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the default tinytracer scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1024,
        help="Image width in pixels (default: 1024)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=768,
        help="Image height in pixels (default: 768)",
    )
    parser.add_argument(
        "--fov",
        type=float,
        default=90.0,
        help="Vertical field of view in degrees (default: 90)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="out.ppm",
        help="Output file path, .ppm or .png (default: out.ppm)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file to render instead of the default scene",
    )
    parser.add_argument(
        "--checker-parity",
        choices=["legacy", "floor"],
        default=None,
        help="Checkerboard tile parity rule (default: legacy, or the scene file's)",
    )
    parser.add_argument(
        "--serial",
        action="store_true",
        help="Render pixels on a single thread",
    )
    parser.add_argument(
        "--rows-per-batch",
        type=int,
        default=64,
        help="Rows rendered per progress update (default: 64)",
    )
    parser.add_argument(
        "--arch",
        choices=["cpu", "gpu"],
        default="cpu",
        help="Taichi backend; gpu falls back to cpu if unavailable (default: cpu)",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Show the rendered image in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_default_scene(
    width: int = 1024,
    height: int = 768,
    fov_degrees: float = 90.0,
    output_path: str = "out.ppm",
    scene_path: str | None = None,
    checker_parity: str | None = None,
    parallel: bool = True,
    rows_per_batch: int = 64,
    show: bool = False,
    quiet: bool = False,
) -> Path:
    """Render a scene and save it to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        fov_degrees: Vertical field of view in degrees.
        output_path: Output file path (.ppm or .png).
        scene_path: Optional JSON scene file; the default scene if None.
        checker_parity: Optional checkerboard parity override.
        parallel: Render pixels in parallel.
        rows_per_batch: Number of rows rendered between progress updates.
        show: Show the image after saving.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from tinytracer.camera.pinhole import PinholeCamera
    from tinytracer.core.renderer import render_scene
    from tinytracer.preview.export import save_image
    from tinytracer.scene.default_scene import default_scene_config
    from tinytracer.scene.manager import load_scene_config

    if scene_path is not None:
        if not quiet:
            print(f"Loading scene from {scene_path}...")
        config = load_scene_config(scene_path)
        if checker_parity is not None and config.checkerboard is not None:
            config.checkerboard["parity"] = checker_parity
    else:
        if not quiet:
            print(f"Creating default scene ({width}x{height})...")
        config = default_scene_config(parity=checker_parity or "legacy")

    camera = PinholeCamera(width=width, height=height, fov=math.radians(fov_degrees))

    if not quiet:
        mode = "parallel" if parallel else "serial"
        print(f"Rendering {width}x{height} ({mode})...")

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            print(
                f"\r  Progress: {current}/{target} rows "
                f"({progress_pct:.1f}%) - {elapsed:.1f}s",
                end="",
                flush=True,
            )

    framebuffer = render_scene(
        config,
        camera,
        parallel=parallel,
        rows_per_batch=rows_per_batch,
        callback=progress_callback,
    )

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    save_image(framebuffer, str(output_file))

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if show:
        from tinytracer.preview.display import show_preview

        show_preview(framebuffer)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # Initialize Taichi, falling back to CPU if the GPU backend is unavailable
    if args.arch == "gpu":
        try:
            ti.init(arch=ti.gpu)
            if not args.quiet:
                print("Using GPU backend")
        except Exception:
            ti.init(arch=ti.cpu)
            if not args.quiet:
                print("GPU unavailable, using CPU backend")
    else:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_default_scene(
            width=args.width,
            height=args.height,
            fov_degrees=args.fov,
            output_path=args.output,
            scene_path=args.scene,
            checker_parity=args.checker_parity,
            parallel=not args.serial,
            rows_per_batch=args.rows_per_batch,
            show=args.show,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
