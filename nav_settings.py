"""Simulator tunables and their persistence through ``QSettings``."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Optional

from PySide6.QtCore import QSettings

from config_validation import (
    SettingsValidationError,
    coerce_float,
    coerce_int,
    validate_simulator_settings,
)

SETTINGS_ORGANIZATION = "NavSim"
SETTINGS_APPLICATION = "simulator"
SETTINGS_GROUP = "simulation"


@dataclass(frozen=True)
class SimulatorSettings:
    """Fixed parameters of a simulation session."""

    tick_interval_ms: int = 100
    step_distance_m: float = 2.0  # meters advanced per tick
    average_speed_mps: float = 13.89  # 50 km/h, used for the ETA
    maneuver_threshold_deg: float = 30.0

    @property
    def tick_interval_s(self) -> float:
        return self.tick_interval_ms / 1000.0

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "SimulatorSettings":
        """Build settings from raw values, falling back to defaults for missing keys.

        Raises ``SettingsValidationError`` listing every invalid value.
        """
        merged: Dict[str, Any] = asdict(cls())
        merged.update({key: value for key, value in values.items() if value is not None})
        issues = validate_simulator_settings(merged)
        if issues:
            raise SettingsValidationError(issues)
        return cls(
            tick_interval_ms=coerce_int(merged["tick_interval_ms"]),
            step_distance_m=coerce_float(merged["step_distance_m"]),
            average_speed_mps=coerce_float(merged["average_speed_mps"]),
            maneuver_threshold_deg=coerce_float(merged["maneuver_threshold_deg"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _default_store() -> QSettings:
    return QSettings(SETTINGS_ORGANIZATION, SETTINGS_APPLICATION)


def load_settings(store: Optional[QSettings] = None) -> SimulatorSettings:
    """Read simulator settings from ``store`` (the NavSim user settings by default)."""

    if store is None:
        store = _default_store()
    values: Dict[str, Any] = {}
    store.beginGroup(SETTINGS_GROUP)
    try:
        for item in fields(SimulatorSettings):
            value = store.value(item.name)
            if value is not None:
                values[item.name] = value
    finally:
        store.endGroup()
    return SimulatorSettings.from_mapping(values)


def save_settings(settings: SimulatorSettings, store: Optional[QSettings] = None) -> None:
    """Persist ``settings`` to ``store``."""

    if store is None:
        store = _default_store()
    store.beginGroup(SETTINGS_GROUP)
    try:
        for key, value in settings.to_dict().items():
            store.setValue(key, value)
    finally:
        store.endGroup()
    store.sync()


__all__ = [
    "SimulatorSettings",
    "SettingsValidationError",
    "load_settings",
    "save_settings",
]
