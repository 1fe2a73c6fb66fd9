"""Package logging for auditstats.

Every module logs through ``get_logger(__name__)`` so records land under the
``auditstats`` logger, which owns the only handler. Per-page failures in the
pipeline and skipped reports in the CLI are reported at ERROR; group creation
and per-report progress at DEBUG.
"""

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "auditstats"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_ROOT_LOGGER_CONFIGURED = False


def setup_root_logger(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Install the single ``auditstats`` handler.

    Later calls do nothing until :func:`reset_logging`, so importing several
    modules never stacks handlers.

    Args:
        level: Initial level of the ``auditstats`` logger.
        format_string: Record format; ``DEFAULT_FORMAT`` when omitted.
        handler: Destination; a stdout StreamHandler when omitted.
    """
    global _ROOT_LOGGER_CONFIGURED

    if _ROOT_LOGGER_CONFIGURED:
        return

    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(level)
    package_logger.handlers.clear()

    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    package_logger.addHandler(handler)

    # Records still reach the root logger, where pytest's caplog listens
    package_logger.propagate = True

    _ROOT_LOGGER_CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return the logger for an auditstats module.

    The returned logger has no level of its own; it follows whatever level the
    ``auditstats`` logger currently has.
    """
    setup_root_logger()

    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: int) -> None:
    """Apply ``level`` to the ``auditstats`` logger and its handler."""
    setup_root_logger()

    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(level)
    for handler in package_logger.handlers:
        handler.setLevel(level)


def level_for_flags(verbose: bool = False, quiet: bool = False) -> int:
    """Map the CLI verbosity flags to a log level.

    ``--verbose`` wins over ``--quiet``: DEBUG, then WARNING, otherwise INFO.
    """
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def enable_debug_logging() -> None:
    set_global_log_level(logging.DEBUG)


def disable_debug_logging() -> None:
    set_global_log_level(logging.INFO)


def reset_logging() -> None:
    """Drop the handler and level so the next call reconfigures (for tests)."""
    global _ROOT_LOGGER_CONFIGURED
    _ROOT_LOGGER_CONFIGURED = False

    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)


setup_root_logger()
