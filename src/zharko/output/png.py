"""PNG image output via Pillow.

Example:
    >>> from zharko.output.png import save_png
    >>> save_png(renderer.get_image_numpy(), "output.png")
"""

from os import PathLike

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from zharko.errors import ImageWriteError
from zharko.output.ppm import to_rgb8


def save_png(image: npt.NDArray[np.floating], path: str | PathLike[str]) -> None:
    """Save a finished float image as an 8-bit PNG.

    The image is expected to be gamma corrected already; no further tone
    mapping is applied.

    Args:
        image: Array of shape (H, W, 3) in [0, 1], row 0 at the top.
        path: Output file path.

    Raises:
        ImageWriteError: If the file cannot be written.
    """
    pil_image = PILImage.fromarray(to_rgb8(image))
    try:
        pil_image.save(path, format="PNG")
    except OSError as exc:
        raise ImageWriteError(path, str(exc)) from exc
