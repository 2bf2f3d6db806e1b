"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from taxon_timeline.config.policies import Policies, load_policies
from taxon_timeline.config.settings import Settings


@pytest.fixture
def minimal_policy_dict() -> dict:
    return {
        "policy_version": "test-version",
        "change_filters": {
            "ignore_error_changes": True,
            "ignore_ignored_changes": False,
        },
        "recognition": {"name_columns": ["scientificName", " acceptedName "]},
        "reversions": {"min_shared_clusters": 2, "include_repeats": True},
    }


def test_load_policies_from_dict(minimal_policy_dict: dict) -> None:
    policies = load_policies(minimal_policy_dict)
    assert isinstance(policies, Policies)
    assert policies.change_filters.ignore_ignored_changes is False
    assert policies.change_filters.skip_changes_unless_added_before is None
    assert policies.recognition.name_columns == ["scientificName", "acceptedName"]


def test_load_policies_from_yaml(tmp_path: Path, minimal_policy_dict: dict) -> None:
    path = tmp_path / "policies.yaml"
    path.write_text(yaml.safe_dump(minimal_policy_dict), encoding="utf-8")
    policies = load_policies(path)
    assert policies.policy_version == "test-version"


def test_load_policies_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_policies(tmp_path / "missing.yaml")


def test_policy_env_override(monkeypatch: pytest.MonkeyPatch, minimal_policy_dict: dict) -> None:
    monkeypatch.setenv("TAXON_TIMELINE_POLICY__CHANGE_FILTERS__SKIP_CHANGES_UNLESS_ADDED_BEFORE", "1940")
    monkeypatch.setenv("TAXON_TIMELINE_POLICY__REVERSIONS__INCLUDE_REPEATS", "false")
    policies = load_policies(minimal_policy_dict)
    assert policies.change_filters.skip_changes_unless_added_before == 1940
    assert policies.reversions.include_repeats is False


def test_policy_env_override_rejects_non_mapping(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TAXON_TIMELINE_POLICY__POLICY_VERSION__NESTED", "x")
    with pytest.raises(ValueError):
        load_policies({"policy_version": "flat"})


def test_invalid_policy_values() -> None:
    with pytest.raises(ValueError):
        load_policies({"reversions": {"min_shared_clusters": 0}})
    with pytest.raises(ValueError):
        load_policies({"change_filters": {"skip_changes_unless_added_before": -5}})


def test_settings_environment_override(tmp_path: Path, minimal_policy_dict: dict) -> None:
    default_yaml = {
        "environment": "development",
        "log_level": "info",
        "policies": minimal_policy_dict,
    }
    testing_yaml = {
        "log_level": "debug",
        "policies": {"policy_version": "testing"},
    }
    (tmp_path / "default.yaml").write_text(yaml.safe_dump(default_yaml), encoding="utf-8")
    (tmp_path / "testing.yaml").write_text(yaml.safe_dump(testing_yaml), encoding="utf-8")

    settings = Settings(config_dir=tmp_path, environment="testing")
    assert settings.log_level == "DEBUG"
    assert settings.policy_version == "testing"
    assert settings.policies.change_filters.ignore_ignored_changes is False


def test_settings_env_override(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, minimal_policy_dict: dict) -> None:
    (tmp_path / "default.yaml").write_text(
        yaml.safe_dump({"policies": minimal_policy_dict}), encoding="utf-8"
    )
    monkeypatch.setenv("TAXON_TIMELINE_SETTINGS__log_level", "warning")

    settings = Settings(config_dir=tmp_path)
    assert settings.log_level == "WARNING"
    assert settings.log_file.name == "taxon_timeline.log"


def test_settings_without_yaml_uses_defaults(tmp_path: Path) -> None:
    settings = Settings(config_dir=tmp_path)
    assert settings.policies.change_filters.ignore_error_changes is True
    assert settings.policies.reversions.min_shared_clusters == 2


def test_settings_accepts_policies_instance(tmp_path: Path) -> None:
    policies = Policies(policy_version="explicit")
    settings = Settings(config_dir=tmp_path, policies=policies)
    assert settings.policies is policies
