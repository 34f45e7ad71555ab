"""Tests for simulator settings validation utilities."""

from __future__ import annotations

from typing import Dict

from config_validation import (
    SettingsValidationError,
    ValidationIssue,
    coerce_float,
    coerce_int,
    validate_simulator_settings,
)


def build_settings(**overrides: Dict[str, object]):
    settings = {
        'tick_interval_ms': 100,
        'step_distance_m': 2.0,
        'average_speed_mps': 13.89,
        'maneuver_threshold_deg': 30.0,
    }
    settings.update(overrides)
    return settings


def validate_single_issue(settings, field):
    issues = validate_simulator_settings(settings)
    assert issues, "Expected at least one validation issue"
    assert issues[0].field == field
    return issues[0]


def test_valid_settings_pass():
    assert validate_simulator_settings(build_settings()) == []


def test_string_values_are_accepted():
    settings = build_settings(tick_interval_ms='250', step_distance_m=' 3.5 ')
    assert validate_simulator_settings(settings) == []


def test_unknown_setting_reported():
    issue = validate_single_issue(build_settings(turbo=True), 'turbo')
    assert issue.title == 'Unknown Setting'


def test_tick_interval_must_be_whole_number():
    issue = validate_single_issue(build_settings(tick_interval_ms='fast'), 'tick_interval_ms')
    assert issue.title == 'Tick Interval Invalid'
    issue = validate_single_issue(build_settings(tick_interval_ms=True), 'tick_interval_ms')
    assert issue.title == 'Tick Interval Invalid'


def test_tick_interval_range_enforced():
    issue = validate_single_issue(build_settings(tick_interval_ms=5), 'tick_interval_ms')
    assert 'between 10 and 10000 milliseconds' in issue.message


def test_step_distance_must_be_positive():
    issue = validate_single_issue(build_settings(step_distance_m=0), 'step_distance_m')
    assert 'greater than 0 and at most 1000 meters' in issue.message


def test_average_speed_range_enforced():
    issue = validate_single_issue(build_settings(average_speed_mps=250), 'average_speed_mps')
    assert 'at most 100 m/s' in issue.message


def test_threshold_must_be_finite_and_open_range():
    issue = validate_single_issue(build_settings(maneuver_threshold_deg=180), 'maneuver_threshold_deg')
    assert 'exclusive' in issue.message
    issue = validate_single_issue(build_settings(maneuver_threshold_deg=float('nan')), 'maneuver_threshold_deg')
    assert issue.title == 'Maneuver Threshold Invalid'


def test_coercion_helpers():
    assert coerce_int(' 42 ') == 42
    assert coerce_int(False) is None
    assert coerce_int('4.5') is None
    assert coerce_float('2.5') == 2.5
    assert coerce_float(None) is None
    assert coerce_float(float('inf')) is None


def test_error_summarises_issues():
    error = SettingsValidationError([
        ValidationIssue('step_distance_m', 'Step Distance Invalid', 'bad'),
    ])
    assert 'step_distance_m: Step Distance Invalid' in str(error)
    assert len(error.issues) == 1
