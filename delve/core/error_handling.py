"""
Centralized error handling for the combat engine.

Nothing in a battle is fatal: a failing action is recorded with a severity
and turned into a failed result, and invalid numeric data is corrected to a
safe default with a warning.
"""

import logging
import math
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

from core.constants import NEUTRAL_STAT

T = TypeVar("T")


class ErrorSeverity(Enum):
    """Enumeration of error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class GameError:
    """Represents an engine error with severity, context, and optional exception."""

    message: str
    severity: ErrorSeverity
    context: dict[str, Any]
    exception: Optional[Exception] = None


class ErrorHandler:
    """Collects and logs the errors raised while resolving battles."""

    def __init__(self) -> None:
        self.logger = logging.getLogger("delve.errors")
        self.error_history: list[GameError] = []

    def handle(
        self,
        message: str,
        severity: ErrorSeverity,
        context: Optional[dict[str, Any]] = None,
        exception: Optional[Exception] = None,
    ) -> GameError:
        """
        Records an error and logs it according to its severity.

        Args:
            message (str): The error message.
            severity (ErrorSeverity): How serious the error is.
            context (Optional[dict[str, Any]]): Extra information.
            exception (Optional[Exception]): The exception, if any.

        Returns:
            GameError: The recorded error.

        """
        error = GameError(
            message=message,
            severity=severity,
            context=context or {},
            exception=exception,
        )
        self.error_history.append(error)

        # Prefix context keys to avoid clashing with reserved LogRecord keys.
        safe_context = {f"ctx_{key}": value for key, value in error.context.items()}

        if severity == ErrorSeverity.CRITICAL:
            self.logger.critical(f"CRITICAL: {message}", extra=safe_context)
            if exception:
                self.logger.critical(
                    "".join(traceback.format_exception(exception))
                )
        elif severity == ErrorSeverity.HIGH:
            self.logger.error(f"ERROR: {message}", extra=safe_context)
        elif severity == ErrorSeverity.MEDIUM:
            self.logger.warning(f"WARNING: {message}", extra=safe_context)
        else:
            self.logger.info(f"INFO: {message}", extra=safe_context)
        return error

    def safe_execute(
        self,
        operation: Callable[[], T],
        default: T,
        error_message: str,
        severity: ErrorSeverity = ErrorSeverity.HIGH,
        context: Optional[dict[str, Any]] = None,
    ) -> T:
        """
        Executes an operation, turning any exception into a logged error.

        Args:
            operation (Callable[[], T]): The operation to run.
            default (T): Value returned when the operation fails.
            error_message (str): Prefix for the logged message.
            severity (ErrorSeverity): Severity of a failure.
            context (Optional[dict[str, Any]]): Extra information.

        Returns:
            T: The operation result, or the default on failure.

        """
        try:
            return operation()
        except Exception as e:
            self.handle(f"{error_message}: {e}", severity, context, e)
            return default

    def clear(self) -> None:
        """Forget the recorded errors."""
        self.error_history.clear()


# Global error handler instance.
ERROR_HANDLER = ErrorHandler()


def log_warning(
    message: str,
    context: Optional[dict[str, Any]] = None,
    exception: Optional[Exception] = None,
) -> None:
    """Log a warning-level message."""
    ERROR_HANDLER.handle(message, ErrorSeverity.MEDIUM, context, exception)


# ==============================================================================
# VALIDATION HELPERS
# ==============================================================================
# These helpers correct invalid numeric data instead of letting it propagate
# into derived stats.


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def ensure_stat_value(
    value: Any,
    param_name: str,
    context: Optional[dict[str, Any]] = None,
) -> float:
    """
    Ensures a base stat is a number of at least 1, using the neutral value
    for missing or non-numeric input.

    Args:
        value: The raw stat value.
        param_name: Name of the stat, for the log message.
        context: Additional context for logging.

    Returns:
        float: The usable stat value.

    """
    if value is None:
        return NEUTRAL_STAT
    if not _is_number(value):
        log_warning(
            f"{param_name} is not numeric, got: {value!r}, using {NEUTRAL_STAT}",
            {**(context or {}), "param_name": param_name},
        )
        return NEUTRAL_STAT
    return max(1, value)


def ensure_non_negative_int(
    value: Any,
    param_name: str,
    default: int = 0,
    context: Optional[dict[str, Any]] = None,
) -> int:
    """
    Ensures a value is a non-negative integer, correcting if needed.
    Logs a warning for invalid values but continues execution.

    Args:
        value: The value to ensure is a non-negative integer
        param_name: Human-readable parameter name for error messages
        default: Default value if correction is needed
        context: Additional context for logging

    Returns:
        int: The corrected integer value

    """
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    log_warning(
        f"{param_name} must be non-negative integer, got: {value!r}",
        {**(context or {}), "param_name": param_name, "default": default},
    )
    if _is_number(value):
        return max(0, int(value))
    return max(0, default)


def ensure_int_in_range(
    value: Any,
    param_name: str,
    min_val: int,
    max_val: Optional[int] = None,
    default: Optional[int] = None,
    context: Optional[dict[str, Any]] = None,
) -> int:
    """
    Ensures a value is an integer within the specified range, correcting if
    needed. Logs a warning for out-of-range values but continues execution.

    Args:
        value: The value to validate
        param_name: Human-readable parameter name for error messages
        min_val: Minimum allowed value (inclusive)
        max_val: Maximum allowed value (inclusive), None for no maximum
        default: Default value for non-numeric input, uses min_val if None
        context: Additional context for logging

    Returns:
        int: The corrected integer value

    """
    if default is None:
        default = min_val
    in_range = (
        isinstance(value, int)
        and not isinstance(value, bool)
        and value >= min_val
        and (max_val is None or value <= max_val)
    )
    if in_range:
        return value
    log_warning(
        f"{param_name} must be an integer >= {min_val}"
        + (f" and <= {max_val}" if max_val is not None else "")
        + f", got: {value!r}",
        {**(context or {}), "param_name": param_name},
    )
    converted = int(value) if _is_number(value) else default
    if converted < min_val:
        return min_val
    if max_val is not None and converted > max_val:
        return max_val
    return converted
