"""Environment-aware logging setup.

- Development / local: coloured detailed console, optional structured file
- Staging: structured console, optional structured file
- Production: JSON console, third-party loggers quietened
- Tests: ``configure_testing_logging`` installs a null handler
"""

import logging

from ..config.settings import EnvironmentOption, Settings, get_settings
from .handlers import create_console_handler, create_file_handler, create_null_handler

_NOISY_LOGGERS = {
    "asyncpg": logging.WARNING,
    "aiosqlite": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.dialects": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "uvicorn.access": logging.WARNING,
}


def setup_logging_configuration() -> None:
    """Install root handlers for the configured environment.

    Clears any existing root handlers first, so calling it twice does not
    duplicate output. Called once by ``configure_logging``.
    """
    settings = get_settings()

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    if settings.ENVIRONMENT == EnvironmentOption.STAGING:
        handlers = _staging_handlers(settings)
    elif settings.ENVIRONMENT == EnvironmentOption.PRODUCTION:
        handlers = _production_handlers(settings)
    else:
        handlers = _development_handlers(settings)

    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(settings.LOG_LEVEL_INT)

    if settings.ENVIRONMENT == EnvironmentOption.PRODUCTION:
        for logger_name, level in _NOISY_LOGGERS.items():
            logging.getLogger(logger_name).setLevel(level)


def _file_handler(settings: Settings) -> logging.Handler:
    return create_file_handler(
        filepath=settings.LOG_FILE_PATH,
        format_type="structured",
        level=logging.DEBUG,
        max_bytes=settings.LOG_FILE_MAX_SIZE,
        backup_count=settings.LOG_FILE_BACKUP_COUNT,
    )


def _development_handlers(settings: Settings) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    if settings.LOG_CONSOLE_ENABLED:
        level = logging.DEBUG if settings.LOG_DEVELOPMENT_VERBOSE else settings.LOG_LEVEL_INT
        handlers.append(create_console_handler(format_type="detailed", level=level, use_colors=True))
    if settings.LOG_FILE_ENABLED:
        handlers.append(_file_handler(settings))
    return handlers


def _staging_handlers(settings: Settings) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    if settings.LOG_CONSOLE_ENABLED:
        handlers.append(
            create_console_handler(format_type="structured", level=settings.LOG_LEVEL_INT, use_colors=False)
        )
    if settings.LOG_FILE_ENABLED:
        handlers.append(_file_handler(settings))
    return handlers


def _production_handlers(settings: Settings) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    if settings.LOG_CONSOLE_ENABLED:
        level = logging.WARNING if settings.LOG_PRODUCTION_OPTIMIZE else settings.LOG_LEVEL_INT
        handlers.append(create_console_handler(format_type="json", level=level, use_colors=False))
    return handlers


def configure_testing_logging() -> None:
    """Silence logging for test runs, keeping only errors on the root logger.

    pytest's ``caplog`` still captures records because it attaches its own
    handler to the root logger.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(create_null_handler())
    root_logger.setLevel(logging.ERROR)

    for logger_name in ("sqlalchemy.engine", "aiosqlite", "asyncpg"):
        logging.getLogger(logger_name).setLevel(logging.ERROR)
