from __future__ import annotations

from pathlib import Path

import pytest

from faultline.config import ConfigError, ErrorHandlingConfig, load_config


def test_defaults_match_production_posture() -> None:
    cfg = ErrorHandlingConfig()
    assert cfg.mode == "production"
    assert cfg.display_errors is False
    assert cfg.notify_loggers is False
    assert cfg.notify_native_log is True


def test_resolved_run_id_returns_explicit_id() -> None:
    cfg = ErrorHandlingConfig(run_id="myrun")
    assert cfg.resolved_run_id() == "myrun"


def test_resolved_run_id_auto_is_non_empty_and_changes() -> None:
    cfg = ErrorHandlingConfig(run_id="auto")
    a = cfg.resolved_run_id()
    b = cfg.resolved_run_id()
    assert isinstance(a, str) and len(a) > 0
    assert a != b


def test_from_env_reads_overrides(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ERROR_MODE", "debug")
    monkeypatch.setenv("DISPLAY_ERRORS", "1")
    monkeypatch.setenv("NOTIFY_LOGGERS", "true")
    monkeypatch.setenv("NOTIFY_NATIVE_LOG", "0")
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "mylogs"))
    monkeypatch.setenv("WRITE_JSONL", "yes")

    cfg = ErrorHandlingConfig.from_env()

    assert cfg.mode == "debug"
    assert cfg.display_errors is True
    assert cfg.notify_loggers is True
    assert cfg.notify_native_log is False
    assert cfg.log_dir == tmp_path / "mylogs"
    assert cfg.write_jsonl is True


def test_from_env_invalid_values_fall_back(monkeypatch) -> None:
    base = ErrorHandlingConfig(mode="production", display_errors=True)

    monkeypatch.setenv("ERROR_MODE", "nonsense")
    monkeypatch.setenv("DISPLAY_ERRORS", "maybe")

    cfg = ErrorHandlingConfig.from_env(default=base)

    assert cfg.mode == "production"
    assert cfg.display_errors is True


def test_from_env_respects_prefix(monkeypatch, tmp_path: Path) -> None:
    base = ErrorHandlingConfig(env_prefix="FAULTLINE_", log_dir=Path("logs"))

    monkeypatch.setenv("FAULTLINE_ERROR_MODE", "debug")
    monkeypatch.setenv("FAULTLINE_LOG_DIR", str(tmp_path / "pref_logs"))

    cfg = ErrorHandlingConfig.from_env(default=base)

    assert cfg.mode == "debug"
    assert cfg.log_dir == tmp_path / "pref_logs"
    assert cfg.env_prefix == "FAULTLINE_"


def test_from_mapping_parses_values(tmp_path: Path) -> None:
    cfg = ErrorHandlingConfig.from_mapping(
        {
            "mode": "Debug",
            "display_errors": "on",
            "notify_loggers": True,
            "title": "My App",
            "log_dir": str(tmp_path),
            "console_level": "40",
        }
    )

    assert cfg.mode == "debug"
    assert cfg.display_errors is True
    assert cfg.notify_loggers is True
    assert cfg.title == "My App"
    assert cfg.log_dir == tmp_path
    assert cfg.console_level == 40


@pytest.mark.parametrize(
    "data",
    [{"mode": "staging"}, {"display_errors": "perhaps"}, {"file_level": "loud"}, {"colour": "red"}],
)
def test_from_mapping_rejects_invalid_values(data) -> None:
    with pytest.raises(ConfigError):
        ErrorHandlingConfig.from_mapping(data)


def test_load_config_reads_errors_section(tmp_path: Path) -> None:
    (tmp_path / "faultline.yaml").write_text(
        "errors:\n  mode: debug\n  title: \"Debug me\"\nother:\n  key: 1\n",
        encoding="utf-8",
    )
    assert load_config(tmp_path) == {"mode": "debug", "title": "Debug me"}


def test_load_config_falls_back_to_config_yaml(tmp_path: Path) -> None:
    (tmp_path / "config.yaml").write_text("errors:\n  notify_loggers: true\n", encoding="utf-8")
    assert load_config(tmp_path) == {"notify_loggers": True}


def test_load_config_missing_file_or_section(tmp_path: Path) -> None:
    assert load_config(tmp_path) == {}
    (tmp_path / "faultline.yaml").write_text("paths:\n  out_dir: x\n", encoding="utf-8")
    assert load_config(tmp_path) == {}


def test_load_config_rejects_malformed_files(tmp_path: Path) -> None:
    (tmp_path / "faultline.yaml").write_text("errors: [1, 2\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)

    (tmp_path / "faultline.yaml").write_text("errors: 3\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)
