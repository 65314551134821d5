"""
Logging configuration module for the combat engine.

Provides centralized logging setup with colored output using rich, plus the
helpers the engine uses to report its decisions with key=value context.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

ENGINE_LOGGER_NAME = "delve"


def setup_logging(level: int = logging.INFO) -> None:
    """
    Sets up logging configuration with rich colored output.

    Args:
        level (int): The logging level to set. Defaults to logging.INFO.

    """
    console = Console(width=120, force_terminal=True, force_jupyter=False)

    rich_handler = RichHandler(
        console=console,
        show_time=True,
        show_level=True,
        show_path=False,
        markup=True,
        rich_tracebacks=True,
    )
    rich_handler.setFormatter(logging.Formatter("%(name)s - %(message)s"))

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[rich_handler],
    )
    get_logger(ENGINE_LOGGER_NAME).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """
    Gets a logger instance with the specified name.

    Args:
        name (str): The name of the logger.

    Returns:
        logging.Logger: The configured logger instance.

    """
    return logging.getLogger(name)


logger = get_logger(ENGINE_LOGGER_NAME)


def _with_context(message: str, context: dict[str, Any] | None) -> str:
    """Appends the context as key=value pairs to the message."""
    if not context:
        return message
    context_str = " ".join(f"{k}={v}" for k, v in context.items())
    return f"{message} [{context_str}]"


def log_error(message: str, context: dict[str, Any] | None = None) -> None:
    """
    Logs an error message with optional context.

    Args:
        message (str): The error message.
        context (dict[str, Any] | None): Optional context dictionary.

    """
    logger.error(_with_context(message, context))


def log_warning(message: str, context: dict[str, Any] | None = None) -> None:
    """
    Logs a warning message with optional context.

    Args:
        message (str): The warning message.
        context (dict[str, Any] | None): Optional context dictionary.

    """
    logger.warning(_with_context(message, context))


def log_info(message: str, context: dict[str, Any] | None = None) -> None:
    """Logs an info message with optional context."""
    logger.info(_with_context(message, context))


def log_debug(message: str, context: dict[str, Any] | None = None) -> None:
    """Logs a debug message with optional context."""
    logger.debug(_with_context(message, context))
