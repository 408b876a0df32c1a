"""Command-line entry point: render a scene to a PPM or PNG file.

Usage:
    zharko [options]

Options:
    --scene PATH          JSON scene description (default: use --preset)
    --preset NAME         Built-in scene: spheres, materials, gradient (default: spheres)
    --width WIDTH         Image width in pixels (default: 400)
    --aspect-ratio RATIO  Width / height (default: 16/9)
    --samples SAMPLES     Samples per pixel (default: 20)
    --max-depth DEPTH     Maximum bounces per path (default: 10)
    --seed SEED           Random seed (default: 0)
    --output OUTPUT       Output file, .ppm or .png (default: image.ppm)
    --arch {cpu,gpu}      Taichi backend (default: cpu)
    --quiet               Suppress progress output
    --verbose             Debug logging

Exit codes:
    0 success, 1 unexpected failure, 2 invalid configuration,
    3 the image could not be written.

Example:
    zharko --preset materials --width 320 --samples 50 --output materials.png
"""

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

from zharko.errors import ConfigurationError, ImageWriteError, RenderCancelledError
from zharko.logconfig import setup_logging, verbosity_level

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2
EXIT_WRITE_ERROR = 3

OUTPUT_FORMATS = (".ppm", ".png")


def _parse_aspect_ratio(value: str) -> float:
    """Accept either a float or a 'W/H' or 'W:H' fraction."""
    for sep in ("/", ":"):
        if sep in value:
            num, den = value.split(sep, 1)
            try:
                return float(num) / float(den)
            except (ValueError, ZeroDivisionError) as exc:
                raise argparse.ArgumentTypeError(f"invalid aspect ratio: {value!r}") from exc
    try:
        return float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid aspect ratio: {value!r}") from exc


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="zharko",
        description="Render a scene of spheres by stochastic ray tracing.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        type=Path,
        default=None,
        help="JSON scene description (default: use --preset)",
    )
    parser.add_argument(
        "--preset",
        choices=["spheres", "materials", "gradient"],
        default="spheres",
        help="Built-in scene when --scene is not given (default: spheres)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=_parse_aspect_ratio,
        default=16.0 / 9.0,
        help="Image width / height, e.g. 1.5 or 16/9 (default: 16/9)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=20,
        help="Number of samples per pixel (default: 20)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=10,
        help="Maximum number of bounces per path (default: 10)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed; equal seeds give identical images (default: 0)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("image.ppm"),
        help="Output file path, .ppm or .png (default: image.ppm)",
    )
    parser.add_argument(
        "--arch",
        choices=["cpu", "gpu"],
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    verbosity.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def render_to_file(args: argparse.Namespace) -> Path:
    """Build the scene described by args, render it and write the image.

    Taichi must already be initialized.

    Returns:
        Path to the saved image file.

    Raises:
        ConfigurationError: If the scene or settings are invalid.
        ImageWriteError: If the image cannot be written.
    """
    # Lazy imports: these modules allocate Taichi fields
    from zharko.camera.pinhole import PinholeCamera, setup_camera
    from zharko.core.renderer import Renderer, RenderSettings
    from zharko.scene.manager import SceneManager, load_scene
    from zharko.scene.presets import create_preset_scene

    settings = RenderSettings.from_aspect_ratio(
        args.width,
        args.aspect_ratio,
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
        seed=args.seed,
    )

    if args.scene is not None:
        data = load_scene(args.scene)
        scene = SceneManager()
        scene.from_dict(data)
        camera = PinholeCamera.from_dict(
            data.get("camera", {}), aspect_ratio=settings.aspect_ratio
        )
        logger.info("Loaded scene from %s", args.scene)
    else:
        scene, camera = create_preset_scene(args.preset, settings.aspect_ratio)
        logger.info("Using preset scene %r", args.preset)

    setup_camera(camera)
    renderer = Renderer(settings)

    start_time = time.time()

    def progress_callback(done: int, total: int) -> None:
        if not args.quiet:
            elapsed = time.time() - start_time
            print(
                f"\r  Progress: {done}/{total} rows "
                f"({100.0 * done / total:.1f}%) - {elapsed:.1f}s",
                end="",
                flush=True,
            )

    if not args.quiet:
        print(
            f"Rendering {settings.width}x{settings.height} with "
            f"{scene.get_sphere_count()} spheres, {settings.samples_per_pixel} samples per pixel..."
        )

    renderer.render(callback=progress_callback)

    if not args.quiet:
        print()  # Newline after progress

    renderer.save(args.output)

    if not args.quiet:
        print(f"Saved to: {args.output.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return args.output


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    setup_logging(verbosity_level(args.verbose, args.quiet))

    if args.output.suffix.lower() not in OUTPUT_FORMATS:
        print(
            f"Configuration error: unsupported image format {args.output.suffix!r}; "
            "use .ppm or .png",
            file=sys.stderr,
        )
        return EXIT_CONFIG_ERROR

    ti.init(arch=ti.gpu if args.arch == "gpu" else ti.cpu)

    try:
        render_to_file(args)
        return EXIT_OK
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except ImageWriteError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_WRITE_ERROR
    except RenderCancelledError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except Exception as e:
        logger.exception("Render failed")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
