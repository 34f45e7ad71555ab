"""Validation helpers for NavSim simulator settings."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping

SIMULATOR_SETTING_KEYS = (
    "tick_interval_ms",
    "step_distance_m",
    "average_speed_mps",
    "maneuver_threshold_deg",
)


@dataclass(frozen=True)
class ValidationIssue:
    """Represents a configuration validation problem."""

    field: str
    title: str
    message: str


class SettingsValidationError(ValueError):
    """Raised when settings fail validation; carries every issue found."""

    def __init__(self, issues: Iterable[ValidationIssue]):
        self.issues: List[ValidationIssue] = list(issues)
        summary = "; ".join(f"{issue.field}: {issue.title}" for issue in self.issues)
        super().__init__(f"Invalid simulator settings ({summary})")


def coerce_int(value: Any) -> int | None:
    """Best-effort conversion to ``int`` returning ``None`` on failure."""

    if isinstance(value, bool):
        # ``bool`` is a subclass of ``int`` in Python, but we treat it as invalid
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def coerce_float(value: Any) -> float | None:
    """Best-effort conversion to a finite ``float`` returning ``None`` on failure."""

    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(str(value).strip()) if not isinstance(value, (int, float)) else float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def validate_simulator_settings(settings: Mapping[str, Any]) -> List[ValidationIssue]:
    """Validate a simulator settings payload.

    Parameters
    ----------
    settings:
        Mapping of setting names to raw values, as read from ``QSettings``,
        the command line, or code.

    Returns
    -------
    list[ValidationIssue]
        A collection of validation issues. An empty list denotes success.
    """

    issues: List[ValidationIssue] = []

    for key in settings:
        if key not in SIMULATOR_SETTING_KEYS:
            issues.append(
                ValidationIssue(
                    field=str(key),
                    title="Unknown Setting",
                    message=f"'{key}' is not a simulator setting. Supported: {', '.join(SIMULATOR_SETTING_KEYS)}.",
                )
            )

    interval = coerce_int(settings.get("tick_interval_ms"))
    if interval is None:
        issues.append(
            ValidationIssue(
                field="tick_interval_ms",
                title="Tick Interval Invalid",
                message="The tick interval must be a whole number of milliseconds between 10 and 10000.",
            )
        )
    elif not 10 <= interval <= 10000:
        issues.append(
            ValidationIssue(
                field="tick_interval_ms",
                title="Tick Interval Out of Range",
                message="Choose a tick interval between 10 and 10000 milliseconds.",
            )
        )

    step = coerce_float(settings.get("step_distance_m"))
    if step is None or not 0 < step <= 1000:
        issues.append(
            ValidationIssue(
                field="step_distance_m",
                title="Step Distance Invalid",
                message="The step distance must be greater than 0 and at most 1000 meters.",
            )
        )

    speed = coerce_float(settings.get("average_speed_mps"))
    if speed is None or not 0 < speed <= 100:
        issues.append(
            ValidationIssue(
                field="average_speed_mps",
                title="Average Speed Invalid",
                message="The average speed must be greater than 0 and at most 100 m/s.",
            )
        )

    threshold = coerce_float(settings.get("maneuver_threshold_deg"))
    if threshold is None or not 0 < threshold < 180:
        issues.append(
            ValidationIssue(
                field="maneuver_threshold_deg",
                title="Maneuver Threshold Invalid",
                message="The maneuver threshold must be an angle between 0 and 180 degrees, exclusive.",
            )
        )

    return issues
