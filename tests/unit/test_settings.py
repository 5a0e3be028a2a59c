"""Tests for planner settings"""

import pytest

from abplan.settings import DEFAULT_SETTINGS, PlannerSettings, load_settings


def test_defaults():
    """Test the default feasibility ceiling and sweep durations"""
    assert DEFAULT_SETTINGS.feasibility_ceiling_days == 28
    assert DEFAULT_SETTINGS.sweep_durations == (7, 14, 21, 30)
    assert DEFAULT_SETTINGS.exact_z_scores is False


def test_repo_settings_file_matches_defaults():
    """Test the shipped planner.yaml mirrors the defaults"""
    assert load_settings("planner.yaml") == PlannerSettings()


def test_load_settings_overrides(tmp_path):
    """Test partial overrides keep the remaining defaults"""
    path = tmp_path / "planner.yaml"
    path.write_text("planner:\n  feasibility_ceiling_days: 14\n  sweep_durations: [3, 5]\n")

    settings = load_settings(str(path))

    assert settings.feasibility_ceiling_days == 14
    assert settings.sweep_durations == (3, 5)
    assert settings.default_power == 0.8


def test_load_settings_empty_file(tmp_path):
    """Test an empty file gives the defaults"""
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_settings(str(path)) == PlannerSettings()


def test_load_settings_unknown_key(tmp_path):
    """Test typos in the settings file are rejected"""
    path = tmp_path / "bad.yaml"
    path.write_text("planner:\n  feasibility_ceiling: 10\n")

    with pytest.raises(ValueError, match="Unknown planner settings"):
        load_settings(str(path))


def test_load_settings_invalid_ceiling(tmp_path):
    """Test a non-positive ceiling is rejected"""
    path = tmp_path / "bad.yaml"
    path.write_text("planner:\n  feasibility_ceiling_days: 0\n")

    with pytest.raises(ValueError, match="feasibility_ceiling_days"):
        load_settings(str(path))
