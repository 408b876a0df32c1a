"""Row-by-row renderer with progress reporting and cancellation.

This module wraps the core integrator in a convenient interface:
- Validated render settings (size, samples, bounce depth, seed)
- Row-by-row rendering, top of the image first
- Progress callbacks and a generator form for UI updates
- Cooperative cancellation between rows
- Finished image access and saving to PPM or PNG

The renderer delegates to the global integrator buffer (a Taichi field), so
only one frame is held at a time.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from zharko.core.renderer import Renderer, RenderSettings
    >>> from zharko.scene.presets import create_spheres_scene
    >>> from zharko.camera.pinhole import setup_camera
    >>>
    >>> settings = RenderSettings.from_aspect_ratio(400, 16 / 9)
    >>> scene, camera = create_spheres_scene(aspect_ratio=settings.aspect_ratio)
    >>> setup_camera(camera)
    >>>
    >>> renderer = Renderer(settings)
    >>> renderer.render()
    >>> renderer.save("image.ppm")
"""

import logging
import threading
import time
from collections.abc import Callable, Generator, Iterator
from dataclasses import dataclass
from os import PathLike
from pathlib import Path

import numpy as np
import numpy.typing as npt

from zharko.core.integrator import (
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    MAX_SEED,
    get_image_numpy,
    render_rows,
    setup_render_target,
)
from zharko.errors import ConfigurationError, RenderCancelledError
from zharko.output.png import save_png
from zharko.output.ppm import RGB8, image_rows, write_ppm

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]

# Largest count the i32 kernel arguments can hold
MAX_KERNEL_COUNT = 2**31 - 1


@dataclass(frozen=True)
class RenderSettings:
    """Parameters of one render.

    Attributes:
        width: Image width in pixels, in [1, 2048].
        height: Image height in pixels, in [1, 2048].
        samples_per_pixel: Jittered samples averaged per pixel (at least 1).
        max_depth: Maximum number of surface interactions per path. 0 renders
            black.
        seed: Seed of the random streams. Equal seeds give identical images.

    Raises:
        ConfigurationError: If any value is out of range.
    """

    width: int = 400
    height: int = 225
    samples_per_pixel: int = 20
    max_depth: int = 10
    seed: int = 0

    def __post_init__(self) -> None:
        if not 1 <= self.width <= MAX_IMAGE_WIDTH:
            raise ConfigurationError(f"width = {self.width} must be in [1, {MAX_IMAGE_WIDTH}]")
        if not 1 <= self.height <= MAX_IMAGE_HEIGHT:
            raise ConfigurationError(f"height = {self.height} must be in [1, {MAX_IMAGE_HEIGHT}]")
        if not 1 <= self.samples_per_pixel <= MAX_KERNEL_COUNT:
            raise ConfigurationError(
                f"samples_per_pixel = {self.samples_per_pixel} must be in [1, {MAX_KERNEL_COUNT}]"
            )
        if not 0 <= self.max_depth <= MAX_KERNEL_COUNT:
            raise ConfigurationError(
                f"max_depth = {self.max_depth} must be in [0, {MAX_KERNEL_COUNT}]"
            )
        if not 0 <= self.seed <= MAX_SEED:
            raise ConfigurationError(f"seed = {self.seed} must be in [0, {MAX_SEED}]")

    @classmethod
    def from_aspect_ratio(
        cls,
        width: int,
        aspect_ratio: float = 16.0 / 9.0,
        samples_per_pixel: int = 20,
        max_depth: int = 10,
        seed: int = 0,
    ) -> "RenderSettings":
        """Derive the height from a width and an aspect ratio.

        The height is int(width / aspect_ratio), and at least 1.

        Raises:
            ConfigurationError: If aspect_ratio is not positive, or any
                resulting value is out of range.
        """
        if not aspect_ratio > 0.0:
            raise ConfigurationError(f"aspect_ratio = {aspect_ratio} must be positive")
        height = max(1, int(width / aspect_ratio))
        return cls(
            width=width,
            height=height,
            samples_per_pixel=samples_per_pixel,
            max_depth=max_depth,
            seed=seed,
        )

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height of the output image."""
        return self.width / self.height


class Renderer:
    """Renders the current scene through the current camera.

    The scene and camera must be set up (SceneManager, setup_camera) before
    render() is called. Each render overwrites the previous image.

    Attributes:
        settings: The render settings.
    """

    def __init__(self, settings: RenderSettings) -> None:
        """Initialize the renderer and allocate its image.

        Args:
            settings: The render settings.
        """
        self.settings = settings
        self._rows_done = 0
        setup_render_target(settings.width, settings.height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.settings.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.settings.height

    @property
    def rows_done(self) -> int:
        """Number of rows finished by the current or last render."""
        return self._rows_done

    @property
    def is_complete(self) -> bool:
        """Whether every row of the image has been rendered."""
        return self._rows_done == self.height

    def reset(self) -> None:
        """Clear the image to black."""
        setup_render_target(self.width, self.height)
        self._rows_done = 0

    def _render_row(self, row: int) -> None:
        """Render image row `row`, counted from the top."""
        settings = self.settings
        buffer_row = self.height - 1 - row
        render_rows(
            buffer_row,
            buffer_row + 1,
            settings.samples_per_pixel,
            settings.max_depth,
            settings.seed,
        )

    def render_progressive(self) -> Generator[tuple[int, int], None, None]:
        """Render row by row, yielding progress after each row.

        This is a generator-based alternative to render() with callbacks.
        Stopping iteration early leaves the remaining rows black.

        Yields:
            Tuple of (rows_done, total_rows).

        Example:
            >>> for done, total in renderer.render_progressive():
            ...     print(f"Progress: {done}/{total} rows")
        """
        self.reset()
        total = self.height
        settings = self.settings

        logger.info(
            "Rendering %dx%d, %d samples per pixel, max depth %d, seed %d",
            settings.width,
            settings.height,
            settings.samples_per_pixel,
            settings.max_depth,
            settings.seed,
        )
        start = time.perf_counter()

        for row in range(total):
            self._render_row(row)
            self._rows_done = row + 1
            logger.debug("Row %d/%d done", self._rows_done, total)
            yield (self._rows_done, total)

        logger.info("Render finished in %.2fs", time.perf_counter() - start)

    def render(
        self,
        callback: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Render the full image.

        Args:
            callback: Optional callback called after each row.
                Receives (rows_done, total_rows).
            cancel_event: Optional event checked before each row. When set,
                rendering stops.

        Raises:
            RenderCancelledError: If cancel_event was set before the image
                was complete.

        Example:
            >>> def progress(done, total):
            ...     print(f"Progress: {done}/{total} rows")
            >>> renderer.render(callback=progress)
        """
        self.reset()
        progress = self.render_progressive()
        total = self.height
        try:
            while True:
                if cancel_event is not None and cancel_event.is_set():
                    logger.info("Render cancelled after %d/%d rows", self._rows_done, total)
                    raise RenderCancelledError(self._rows_done, total)
                try:
                    done, total = next(progress)
                except StopIteration:
                    break
                if callback is not None:
                    callback(done, total)
        finally:
            progress.close()

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the finished image as a NumPy array.

        Returns:
            Array of shape (height, width, 3), dtype float32, values in
            [0, 1] with gamma applied, row 0 at the top.
        """
        return get_image_numpy()

    def rows(self) -> Iterator[list[RGB8]]:
        """Iterate over the image rows top to bottom as (r, g, b) byte triples."""
        return image_rows(self.get_image_numpy())

    def save(self, path: str | PathLike[str]) -> None:
        """Save the image, choosing the format from the file extension.

        Args:
            path: Destination ending in .ppm or .png.

        Raises:
            ConfigurationError: If the extension is not supported.
            ImageWriteError: If the file cannot be written.
        """
        suffix = Path(path).suffix.lower()
        image = self.get_image_numpy()
        if suffix == ".ppm":
            write_ppm(image, path)
        elif suffix == ".png":
            save_png(image, path)
        else:
            raise ConfigurationError(
                f"Unsupported image format {suffix!r}; use .ppm or .png"
            )
        logger.info("Wrote %s", path)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        s = self.settings
        return (
            f"Renderer(width={s.width}, height={s.height}, "
            f"samples_per_pixel={s.samples_per_pixel}, max_depth={s.max_depth}, "
            f"seed={s.seed}, rows_done={self._rows_done})"
        )
