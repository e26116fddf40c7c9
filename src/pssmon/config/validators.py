"""
Configuration validation utilities.

Turns the raw TOML dictionary into a validated ``MonitorConfig``. Missing
sections and keys fall back to the dataclass defaults.
"""

import logging
from typing import Any, Dict

from ..models.config import MonitorConfig
from ..validation import (
    ValidationError,
    validate_boolean,
    validate_enum_choice,
    validate_grouping_mask,
    validate_positive_float,
    validate_positive_integer,
    validate_regex_pattern,
)

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ["tsv", "json"]
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def validate_monitor_config(config_data: Dict[str, Any]) -> MonitorConfig:
    """
    Validate and create a MonitorConfig from raw configuration data.

    Args:
        config_data: Raw configuration from TOML, keyed by section

    Returns:
        Validated MonitorConfig instance

    Raises:
        ValidationError: If validation fails
    """
    defaults = MonitorConfig()
    selection = config_data.get("selection", {})
    profiler = config_data.get("profiler", {})
    snapshot = config_data.get("snapshot", {})
    logging_settings = config_data.get("logging", {})

    for name, section in (
        ("selection", selection),
        ("profiler", profiler),
        ("snapshot", snapshot),
        ("logging", logging_settings),
    ):
        if not isinstance(section, dict):
            raise ValidationError(f"[{name}] must be a table", field_name=name, value=section)

    # Validate selection settings
    pattern = selection.get("pattern", defaults.pattern)
    if pattern == "":
        pattern = None
    if pattern is not None:
        validate_regex_pattern(pattern, field_name="selection.pattern")

    match_children = validate_boolean(
        selection.get("match_children", defaults.match_children),
        field_name="selection.match_children",
    )
    match_self = validate_boolean(
        selection.get("match_self", defaults.match_self),
        field_name="selection.match_self",
    )
    fail_on_permission_error = validate_boolean(
        selection.get("fail_on_permission_error", defaults.fail_on_permission_error),
        field_name="selection.fail_on_permission_error",
    )

    # Validate profiler settings
    interval_seconds = validate_positive_float(
        profiler.get("interval_seconds", defaults.interval_seconds),
        min_value=0.01,  # 10ms minimum
        max_value=3600.0,
        field_name="profiler.interval_seconds",
    )
    output_format = validate_enum_choice(
        profiler.get("output_format", defaults.output_format),
        valid_choices=OUTPUT_FORMATS,
        field_name="profiler.output_format",
        case_sensitive=False,
    )
    graph_path = profiler.get("graph_path", defaults.graph_path)
    if graph_path == "":
        graph_path = None
    if graph_path is not None and not isinstance(graph_path, str):
        raise ValidationError(
            "profiler.graph_path must be a string",
            field_name="profiler.graph_path",
            value=graph_path,
        )
    max_workers = validate_positive_integer(
        profiler.get("max_workers", defaults.max_workers),
        min_value=1,
        max_value=64,
        field_name="profiler.max_workers",
    )

    # Validate snapshot settings
    grouping_mask = validate_grouping_mask(
        snapshot.get("grouping_mask", defaults.grouping_mask),
        field_name="snapshot.grouping_mask",
    )
    show_small = validate_boolean(
        snapshot.get("show_small", defaults.show_small),
        field_name="snapshot.show_small",
    )

    log_level = validate_enum_choice(
        logging_settings.get("level", defaults.log_level),
        valid_choices=LOG_LEVELS,
        field_name="logging.level",
        case_sensitive=False,
    )

    config = MonitorConfig(
        pattern=pattern,
        match_children=match_children,
        match_self=match_self,
        fail_on_permission_error=fail_on_permission_error,
        interval_seconds=interval_seconds,
        output_format=output_format,
        graph_path=graph_path,
        max_workers=max_workers,
        grouping_mask=grouping_mask,
        show_small=show_small,
        log_level=log_level,
    )
    logger.debug(f"Validated monitor configuration: {config}")
    return config
