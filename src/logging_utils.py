"""Shared logging setup for the API and the command-line scripts.

SafeStreamHandler tolerates a closed stdout (uvicorn reloads, detached
terminals, `| head`), so a broken pipe never takes a participation run down
with it. The API additionally logs to a rotating file.
"""
import logging
import logging.handlers
from typing import Iterable, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Libraries whose INFO output drowns the pipeline's own progress lines
NOISY_LOGGERS = ("aiohttp", "urllib3")


class SafeStreamHandler(logging.StreamHandler):
    """StreamHandler that ignores broken pipe and closed file errors."""

    def emit(self, record):
        try:
            super().emit(record)
        except BrokenPipeError:
            pass  # stdout closed
        except ValueError:
            pass  # I/O operation on closed file


def _has_handler(logger: logging.Logger, handler_type: type) -> bool:
    return any(type(h) is handler_type for h in logger.handlers)


def configure_safe_logging(
    level=logging.INFO,
    log_file: Optional[str] = None,
    quiet: Iterable[str] = NOISY_LOGGERS,
):
    """Configure the root logger with SafeStreamHandler (and optionally a file).

    Safe to call multiple times (guards against duplicate handlers).

    Args:
        level: Logging level to set (default: INFO)
        log_file: Path for a 10MB x 3 rotating log file, or None
        quiet: Logger names raised to WARNING
    """
    root = logging.getLogger()
    formatter = logging.Formatter(LOG_FORMAT)

    if not _has_handler(root, SafeStreamHandler):
        handler = SafeStreamHandler()  # Defaults to sys.stderr
        handler.setFormatter(formatter)
        handler.setLevel(level)
        root.addHandler(handler)

    if log_file and not _has_handler(root, logging.handlers.RotatingFileHandler):
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=3,
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        root.addHandler(file_handler)

    if root.level == logging.NOTSET or root.level > level:
        root.setLevel(level)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
