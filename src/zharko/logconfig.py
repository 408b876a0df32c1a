"""Logging setup for the zharko package.

Library modules only create loggers under the "zharko" namespace and never
configure handlers themselves. Applications (the CLI, the example scripts)
call setup_logging once at start-up; the level usually comes from
verbosity_level so that --verbose and --quiet mean the same thing everywhere.
"""

import logging
from os import PathLike

PACKAGE_LOGGER = "zharko"

DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def verbosity_level(verbose: bool = False, quiet: bool = False) -> int:
    """Map the command-line verbosity flags to a logging level.

    --verbose shows per-row DEBUG progress, --quiet only warnings and
    errors, and the default shows the INFO start and finish messages.
    """
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def setup_logging(
    level: int = logging.INFO,
    log_file: str | PathLike[str] | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Send the package's log records to stderr and optionally a file.

    Calling it again replaces the handlers installed by the previous call,
    so the CLI can be invoked repeatedly in one process (as the tests do).

    Returns:
        The "zharko" package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(log_format)
    targets: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        targets.append(logging.FileHandler(log_file))
    for handler in targets:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    # Records stop here so an application's root handlers do not print them twice
    logger.propagate = False
    return logger
