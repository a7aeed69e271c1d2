"""Logging setup for the twt command line."""
import logging

from rich.console import Console
from rich.logging import RichHandler

# Loggers of the libraries we drive; their DEBUG output drowns ours
NOISY_LOGGERS = ("libtmux", "git")


def level_for(verbose: bool = False, debug: bool = False) -> int:
    """Map the CLI verbosity flags to a logging level."""
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.WARNING


def setup_logging(verbose: bool = False, debug: bool = False) -> RichHandler:
    """
    Route log records to stderr through rich.

    Command output stays on stdout, so piping ``twt repos`` or
    ``twt list --json`` is never polluted by log lines.

    Args:
        verbose: Show INFO messages.
        debug: Show DEBUG messages with timestamps, thread names and the
            emitting module, including those of libtmux and GitPython.

    Returns:
        The handler installed on the root logger.
    """
    level = level_for(verbose=verbose, debug=debug)

    handler = RichHandler(
        console=Console(stderr=True),
        level=level,
        show_time=debug,
        show_path=debug,
        markup=False,
        rich_tracebacks=debug,
    )
    fmt = "%(threadName)s %(name)s: %(message)s" if debug else "%(message)s"
    handler.setFormatter(logging.Formatter(fmt=fmt))

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET if debug else logging.WARNING)

    return handler
