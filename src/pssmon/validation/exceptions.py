"""
Exception types and error handling helpers.

Configuration problems surface as ``ValidationError`` before any process is
read. Problems with a single process surface as ``ProcessAccessError``
subclasses, which callers turn into skips, recorded failures or a fatal abort
depending on policy.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union

module_logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ValidationError(Exception):
    """
    Exception raised when validation fails.

    This is the main exception type used for configuration and argument errors.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


class InvalidPatternError(ValidationError):
    """The process selection regex does not compile."""


class ProcessAccessError(Exception):
    """Base class for failures reading the details of a single process."""

    def __init__(self, pid: int, message: str = ""):
        super().__init__(message or f"cannot access process {pid}")
        self.pid = pid


class ProcessPermissionError(ProcessAccessError):
    """Reading a process's details was denied."""


class ProcessVanishedError(ProcessAccessError):
    """The process exited between enumeration and the detail read."""


_LOG_LEVELS = {
    ErrorSeverity.DEBUG: logging.DEBUG,
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log an error with its context and optionally re-raise it.

    Args:
        error: The exception that occurred
        context: Where the error occurred, e.g. ``"config loading"``
        severity: Log level, as an ``ErrorSeverity`` or its name
        reraise: Whether to re-raise the exception after logging
        logger: Logger to use instead of this module's logger
    """
    severity = ErrorSeverity(severity.lower()) if isinstance(severity, str) else severity
    log = logger or module_logger
    # Tracebacks only at the extremes; warnings and errors stay one line.
    with_traceback = severity in (ErrorSeverity.DEBUG, ErrorSeverity.CRITICAL)
    log.log(_LOG_LEVELS[severity], f"Error in {context}: {error}", exc_info=with_traceback)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_cli_error(
    error: Exception,
    context: str,
    exit_code: int = 1,
    include_traceback: bool = False,
    **kwargs
) -> None:
    """Log a CLI-level error and exit the process with ``exit_code``."""
    severity = ErrorSeverity.CRITICAL if include_traceback else kwargs.pop("severity", ErrorSeverity.ERROR)
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)
    sys.exit(exit_code)
