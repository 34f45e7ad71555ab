"""Tests for simulator settings and their QSettings persistence."""

from __future__ import annotations

import pytest
from PySide6.QtCore import QSettings

from nav_settings import (
    SETTINGS_GROUP,
    SettingsValidationError,
    SimulatorSettings,
    load_settings,
    save_settings,
)


@pytest.fixture()
def store(tmp_path):
    return QSettings(str(tmp_path / "navsim.ini"), QSettings.Format.IniFormat)


def test_defaults():
    settings = SimulatorSettings()
    assert settings.tick_interval_ms == 100
    assert settings.tick_interval_s == pytest.approx(0.1)
    assert settings.step_distance_m == 2.0
    assert settings.average_speed_mps == 13.89
    assert settings.maneuver_threshold_deg == 30.0


def test_from_mapping_ignores_missing_values():
    settings = SimulatorSettings.from_mapping({"tick_interval_ms": None, "step_distance_m": "5"})
    assert settings.tick_interval_ms == 100
    assert settings.step_distance_m == 5.0


def test_from_mapping_collects_every_issue():
    with pytest.raises(SettingsValidationError) as excinfo:
        SimulatorSettings.from_mapping({"tick_interval_ms": 0, "average_speed_mps": -1})
    fields = [issue.field for issue in excinfo.value.issues]
    assert fields == ["tick_interval_ms", "average_speed_mps"]
    assert isinstance(excinfo.value, ValueError)


def test_load_from_empty_store_gives_defaults(store):
    assert load_settings(store) == SimulatorSettings()


def test_save_and_load(store):
    settings = SimulatorSettings(tick_interval_ms=250, step_distance_m=4.5, maneuver_threshold_deg=40.0)
    save_settings(settings, store)
    assert load_settings(store) == settings


def test_load_rejects_corrupt_values(store):
    store.beginGroup(SETTINGS_GROUP)
    store.setValue("maneuver_threshold_deg", "sideways")
    store.endGroup()
    with pytest.raises(SettingsValidationError) as excinfo:
        load_settings(store)
    assert excinfo.value.issues[0].field == "maneuver_threshold_deg"
