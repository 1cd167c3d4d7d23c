"""Logger factory.

``get_logger`` is the entry point used by every module. The first call
configures the root logger from settings; later calls just hand out
named loggers.
"""

import inspect
import logging
from threading import Lock
from typing import Optional, Union

from ..config.settings import get_settings
from .config import setup_logging_configuration

_logging_configured = False
_configuration_lock = Lock()


def get_logger(name: Optional[str] = None, **extra_context) -> Union[logging.Logger, logging.LoggerAdapter]:
    """Get a logger, configuring logging on first use.

    Args:
        name: Logger name. Defaults to the calling module's ``__name__``.
        **extra_context: Fields attached to every record the logger emits.

    Example:
        ```python
        logger = get_logger(__name__)
        logger.info("Document saved", extra={"document_id": doc.id})

        editor_logger = get_logger(component="editor")
        ```
    """
    if not _logging_configured:
        configure_logging()

    if name is None:
        name = _detect_calling_module()

    logger = logging.getLogger(name)
    if extra_context:
        return logging.LoggerAdapter(logger, extra_context)
    return logger


def configure_logging() -> None:
    """Configure logging once per process. Safe to call repeatedly."""
    global _logging_configured

    with _configuration_lock:
        if _logging_configured:
            return
        setup_logging_configuration()
        _logging_configured = True

    settings = get_settings()
    logging.getLogger(__name__).info(
        f"Logging configured for {settings.ENVIRONMENT.value} environment",
        extra={
            "log_level": settings.LOG_LEVEL,
            "console_enabled": settings.LOG_CONSOLE_ENABLED,
            "file_enabled": settings.LOG_FILE_ENABLED,
        },
    )


def _detect_calling_module() -> str:
    frame = inspect.currentframe()
    try:
        caller = frame.f_back.f_back if frame and frame.f_back else None
        if caller is None:
            return "crok"
        return str(caller.f_globals.get("__name__", "crok"))
    finally:
        del frame
