"""
Validation functions for configuration values and command-line arguments.
"""

import math
import re
from typing import Any, List, Optional, Type, Union

from .exceptions import InvalidPatternError, ValidationError

# Letters accepted in a snapshot grouping mask, see classification.grouping.
GROUPING_MASK_LETTERS = "frwxsp"

Number = Union[int, float]


def _invalid(
    message: str, field_name: str, value: Any, error_cls: Type[ValidationError] = ValidationError
) -> ValidationError:
    return error_cls(f"{field_name} {message}", field_name=field_name, value=value)


def _check_bounds(number: Number, original: Any, min_value: Number, max_value: Optional[Number], field_name: str):
    if number < min_value:
        raise _invalid(f"must be >= {min_value}, got {number}", field_name, original)
    if max_value is not None and number > max_value:
        raise _invalid(f"must be <= {max_value}, got {number}", field_name, original)


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate that a value is an integer within the given bounds.

    Strings holding an integer are accepted, booleans are not.

    Raises:
        ValidationError: If validation fails
    """
    try:
        if isinstance(value, bool):
            raise TypeError("booleans are not integers")
        int_value = int(value)
    except (ValueError, TypeError) as e:
        raise _invalid(f"must be a valid integer, got {value!r}", field_name, value) from e
    _check_bounds(int_value, value, min_value, max_value, field_name)
    return int_value


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """
    Validate that a value is a finite number within the given bounds.

    Raises:
        ValidationError: If validation fails
    """
    try:
        if isinstance(value, bool):
            raise TypeError("booleans are not numbers")
        float_value = float(value)
    except (ValueError, TypeError) as e:
        raise _invalid(f"must be a valid number, got {value!r}", field_name, value) from e
    if math.isnan(float_value):
        raise _invalid("must not be NaN", field_name, value)
    _check_bounds(float_value, value, min_value, max_value, field_name)
    return float_value


def validate_boolean(value: Any, field_name: str = "value") -> bool:
    """Validate that a value is a real boolean (TOML true/false)."""
    if not isinstance(value, bool):
        raise _invalid(f"must be a boolean, got {value!r}", field_name, value)
    return value


def validate_regex_pattern(pattern: str, field_name: str = "regex_pattern") -> "re.Pattern[str]":
    """
    Compile a process selection pattern.

    Returns:
        The compiled pattern

    Raises:
        InvalidPatternError: If the pattern is empty or does not compile
    """
    if not isinstance(pattern, str) or not pattern:
        raise _invalid("must be a non-empty string", field_name, pattern, InvalidPatternError)
    try:
        return re.compile(pattern)
    except re.error as e:
        raise _invalid(f"is not a valid regex pattern: {e}", field_name, pattern, InvalidPatternError) from e


def validate_grouping_mask(mask: Any, field_name: str = "grouping_mask") -> str:
    """
    Validate a snapshot grouping mask such as ``frwxsp`` or ``fx``.

    An empty mask is valid and merges all file-backed memory into one row.
    Letters may appear in any order but only once.
    """
    if not isinstance(mask, str):
        raise _invalid(f"must be a string, got {mask!r}", field_name, mask)
    unknown = sorted(set(mask) - set(GROUPING_MASK_LETTERS))
    if unknown:
        raise _invalid(
            f"contains unknown letters {unknown}; allowed letters are '{GROUPING_MASK_LETTERS}'", field_name, mask
        )
    if len(set(mask)) != len(mask):
        raise _invalid(f"must not repeat letters: {mask}", field_name, mask)
    return mask


def validate_enum_choice(
    value: Any,
    valid_choices: List[str],
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Validate that a value is one of the allowed choices.

    Returns:
        The matching choice, in the spelling used by ``valid_choices``

    Raises:
        ValidationError: If value is not in choices
    """
    def fold(text: str) -> str:
        return text if case_sensitive else text.lower()

    wanted = fold(str(value))
    for choice in valid_choices:
        if fold(choice) == wanted:
            return choice
    raise _invalid(f"must be one of {valid_choices}, got {value!r}", field_name, value)
