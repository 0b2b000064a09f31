"""
Logging configuration for the protoc-gen-fastapi generation pipeline.

Usage in generator modules:
    from protoc_gen_fastapi.api.gen_logging import get_logger
    logger = get_logger(__name__)

The root logger name is "pgf.gen". Everything goes to stderr: stdout is the
plugin protocol channel and must only carry the serialized response.
"""

import logging
import sys

_LOGGER_NAME = "pgf.gen"


def get_logger(name: str = None) -> logging.Logger:
    """
    Return a child logger under the pgf.gen hierarchy.

    Args:
        name: Module __name__, or None for the root pgf.gen logger.

    Returns:
        logging.Logger instance
    """
    if name is None or name == _LOGGER_NAME:
        return logging.getLogger(_LOGGER_NAME)
    # "protoc_gen_fastapi.api.builders.route_builder" -> "pgf.gen.route_builder"
    short = name.rsplit(".", 1)[-1]
    return logging.getLogger(f"{_LOGGER_NAME}.{short}")


def configure_gen_logging(level: str = "WARNING", verbose: bool = False, quiet: bool = False) -> None:
    """
    Configure the pgf.gen logger hierarchy.

    Levels:
        --verbose / -v  -> DEBUG   (every route decision)
        --quiet / -q    -> ERROR
        otherwise       -> `level` (the log_level plugin option)

    Args:
        level:   Level name used when neither flag is given.
        verbose: Enable DEBUG-level output.
        quiet:   Suppress everything below ERROR.
    """
    if verbose:
        resolved = logging.DEBUG
    elif quiet:
        resolved = logging.ERROR
    else:
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            resolved = logging.WARNING

    root_logger = logging.getLogger(_LOGGER_NAME)
    root_logger.setLevel(resolved)

    # Avoid duplicate handlers when called multiple times
    if root_logger.handlers:
        for handler in root_logger.handlers:
            handler.setLevel(resolved)
            # sys.stderr may have been swapped since the handler was created
            if isinstance(handler.formatter, _GenFormatter):
                handler.setStream(sys.stderr)
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(_GenFormatter())
    root_logger.addHandler(handler)

    root_logger.propagate = False


class _GenFormatter(logging.Formatter):
    """Prefix each message with the plugin name so protoc output stays readable."""

    def format(self, record: logging.LogRecord) -> str:
        return f"protoc-gen-fastapi: {record.getMessage()}"
