"""Plain-text PPM (P3) image output.

The format is a three-line header followed by one text line per image row:

    P3
    <width> <height>
    255
    R G B R G B ...

Components are integers in [0, 255]. Float colors map to bytes with
int(255.999 * c), which spreads [0, 1] evenly across all 256 levels.

Example:
    >>> import numpy as np
    >>> from zharko.output.ppm import write_ppm
    >>> image = np.zeros((2, 3, 3), dtype=np.float32)
    >>> write_ppm(image, "black.ppm")
"""

from collections.abc import Iterable, Iterator
from os import PathLike
from pathlib import Path

import numpy as np
import numpy.typing as npt

from zharko.errors import ImageWriteError

# Scale that maps 1.0 to 255 and keeps 255 reachable under truncation
BYTE_SCALE = 255.999

RGB8 = tuple[int, int, int]


def to_rgb8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a float image in [0, 1] to 8-bit components.

    Values are clamped to [0, 1] first; NaN maps to 0.

    Args:
        image: Float array of any shape, typically (H, W, 3).

    Returns:
        uint8 array of the same shape.
    """
    clamped = np.clip(np.nan_to_num(np.asarray(image, dtype=np.float64), nan=0.0), 0.0, 1.0)
    return (BYTE_SCALE * clamped).astype(np.uint8)


def image_rows(image: npt.NDArray[np.floating]) -> Iterator[list[RGB8]]:
    """Yield the rows of an image top to bottom as lists of (r, g, b) ints."""
    rgb8 = to_rgb8(image)
    for row in rgb8:
        yield [(int(r), int(g), int(b)) for r, g, b in row]


def format_ppm(rows: Iterable[Iterable[RGB8]], width: int, height: int) -> str:
    """Encode rows of 8-bit pixels as P3 PPM text.

    Args:
        rows: Image rows, top first, each a sequence of (r, g, b) ints.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        The complete file contents.
    """
    lines = ["P3", f"{width} {height}", "255"]
    for row in rows:
        lines.append(" ".join(f"{r} {g} {b}" for r, g, b in row))
    return "\n".join(lines) + "\n"


def write_ppm(image: npt.NDArray[np.floating], path: str | PathLike[str]) -> None:
    """Write a finished float image to a P3 PPM file.

    Args:
        image: Array of shape (H, W, 3) in [0, 1], row 0 at the top.
        path: Destination file path.

    Raises:
        ImageWriteError: If the file cannot be written.
    """
    height, width = image.shape[:2]
    text = format_ppm(image_rows(image), width, height)
    try:
        Path(path).write_text(text, encoding="ascii")
    except OSError as exc:
        raise ImageWriteError(path, str(exc)) from exc
