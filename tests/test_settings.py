"""Tests for settings loading."""

from pathlib import Path

from config import Settings


def test_database_url_defaults_to_data_dir(tmp_path):
    settings = Settings(data_dir=tmp_path)

    assert settings.database_url == f"sqlite:///{tmp_path / 'automation.db'}"


def test_explicit_database_url_is_kept(tmp_path):
    settings = Settings(data_dir=tmp_path, database_url="sqlite:///elsewhere.db")

    assert settings.database_url == "sqlite:///elsewhere.db"


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("AUTOMATION_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("AUTOMATION_POLL_INTERVAL_SECONDS", "60")
    monkeypatch.setenv("AUTOMATION_LOG_FORMAT", "json")

    settings = Settings()

    assert settings.data_dir == Path(tmp_path)
    assert settings.poll_interval_seconds == 60
    assert settings.log_format == "json"


def test_defaults():
    settings = Settings(data_dir=Path("/tmp/automation"))

    assert settings.poll_interval_seconds == 300
    assert settings.lookahead_minutes == 5
    assert settings.meeting_end_threshold_seconds == 120
