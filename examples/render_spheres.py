#!/usr/bin/env python3
"""Render the material showcase scene and save it as a PNG.

This script shows the library API end to end: it builds a preset scene,
sets up the camera, renders row by row with a progress callback, and
saves the result.

Usage:
    python examples/render_spheres.py [options]

Options:
    --width WIDTH       Image width in pixels (default: 400)
    --samples SAMPLES   Number of samples per pixel (default: 50)
    --max-depth DEPTH   Maximum bounces per path (default: 10)
    --output OUTPUT     Output file path (default: spheres.png)
    --quiet             Suppress progress output

Example:
    python examples/render_spheres.py --width 200 --samples 20
"""

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the material showcase scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=400, help="Image width in pixels (default: 400)")
    parser.add_argument("--samples", type=int, default=50, help="Samples per pixel (default: 50)")
    parser.add_argument("--max-depth", type=int, default=10, help="Maximum bounces (default: 10)")
    parser.add_argument("--output", type=str, default="spheres.png", help="Output file path")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_spheres(
    width: int = 400,
    num_samples: int = 50,
    max_depth: int = 10,
    output_path: str = "spheres.png",
    quiet: bool = False,
) -> Path:
    """Render the materials preset and save to file.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from zharko.camera.pinhole import setup_camera
    from zharko.core.renderer import Renderer, RenderSettings
    from zharko.scene.presets import create_materials_scene

    settings = RenderSettings.from_aspect_ratio(
        width, 16.0 / 9.0, samples_per_pixel=num_samples, max_depth=max_depth
    )
    _, camera = create_materials_scene(aspect_ratio=settings.aspect_ratio)
    setup_camera(camera)

    renderer = Renderer(settings)
    start_time = time.time()

    def progress_callback(done: int, total: int) -> None:
        if not quiet:
            print(f"\r  Progress: {done}/{total} rows", end="", flush=True)

    renderer.render(callback=progress_callback)
    if not quiet:
        print()

    output_file = Path(output_path)
    renderer.save(output_file)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    ti.init(arch=ti.gpu)

    try:
        render_spheres(
            width=args.width,
            num_samples=args.samples,
            max_depth=args.max_depth,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
