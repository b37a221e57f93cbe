import pytest

from core.config_manager import SystemConfig, get_config
from core.exceptions import ConfigError


def test_defaults_without_runtime_file(tmp_path, monkeypatch):
    monkeypatch.delenv("HABIT_LEDGER_HEATMAP_WINDOW_DAYS", raising=False)
    cfg = get_config(tmp_path / "missing.yaml")
    assert cfg.HEATMAP_WINDOW_DAYS == SystemConfig.HEATMAP_WINDOW_DAYS
    assert cfg.STORAGE_KEY == "habit-data"


def test_runtime_yaml_then_env_overrides(tmp_path, monkeypatch):
    path = tmp_path / "runtime.yaml"
    path.write_text("CONFIRMATION_POLICY: retry\nRETRY_ATTEMPTS: 5\nUNKNOWN_KEY: 1\n", encoding="utf-8")
    monkeypatch.setenv("HABIT_LEDGER_RETRY_ATTEMPTS", "2")
    monkeypatch.setenv("HABIT_LEDGER_REQUEST_TIMEOUT", "2.5")

    cfg = get_config(path)
    assert cfg.CONFIRMATION_POLICY == "retry"
    assert cfg.RETRY_ATTEMPTS == 2
    assert cfg.REQUEST_TIMEOUT == 2.5
    assert not hasattr(cfg, "UNKNOWN_KEY")


def test_bad_values_raise_config_error(tmp_path, monkeypatch):
    bad_yaml = tmp_path / "runtime.yaml"
    bad_yaml.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        get_config(bad_yaml)

    monkeypatch.setenv("HABIT_LEDGER_DAYS_PER_WEEK", "seven")
    with pytest.raises(ConfigError):
        get_config(tmp_path / "missing.yaml")
