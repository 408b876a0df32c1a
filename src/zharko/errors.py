"""Exception types raised by the renderer.

Configuration problems are reported before any rendering starts, image
writing problems are kept apart from rendering problems so callers can tell
them apart.
"""

from os import PathLike


class ZharkoError(Exception):
    """Base class for all renderer errors."""


class ConfigurationError(ZharkoError, ValueError):
    """Invalid camera, render settings, material or scene description."""


class ImageWriteError(ZharkoError, OSError):
    """The finished image could not be written to its destination.

    Attributes:
        path: The destination that failed.
    """

    def __init__(self, path: str | PathLike[str], message: str) -> None:
        super().__init__(f"Cannot write image to {path}: {message}")
        self.path = path


class RenderCancelledError(ZharkoError, RuntimeError):
    """Rendering was cancelled between rows.

    Attributes:
        rows_done: Number of rows completed before cancellation.
    """

    def __init__(self, rows_done: int, total_rows: int) -> None:
        super().__init__(f"Render cancelled after {rows_done}/{total_rows} rows")
        self.rows_done = rows_done
        self.total_rows = total_rows
