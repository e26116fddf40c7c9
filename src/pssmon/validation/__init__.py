"""
Validation and error handling for the pssmon package.

This module provides input validation and the exception types shared by
the collection pipeline, the configuration loader and the CLI.
"""

# Core exception classes and error handling
from .exceptions import (
    ErrorSeverity,
    InvalidPatternError,
    ProcessAccessError,
    ProcessPermissionError,
    ProcessVanishedError,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
)

# Validation functions
from .validators import (
    GROUPING_MASK_LETTERS,
    validate_boolean,
    validate_enum_choice,
    validate_grouping_mask,
    validate_positive_float,
    validate_positive_integer,
    validate_regex_pattern,
)

__all__ = [
    # Exceptions
    "ErrorSeverity",
    "InvalidPatternError",
    "ProcessAccessError",
    "ProcessPermissionError",
    "ProcessVanishedError",
    "ValidationError",
    "handle_cli_error",
    "handle_config_error",
    "handle_error",
    # Validators
    "GROUPING_MASK_LETTERS",
    "validate_boolean",
    "validate_enum_choice",
    "validate_grouping_mask",
    "validate_positive_float",
    "validate_positive_integer",
    "validate_regex_pattern",
]
