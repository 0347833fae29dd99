"""
Tests for settings loading (defaults, environment, YAML preferences).
"""

import pytest

from timesheet.infra.config import ExportPreferences, Settings


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run with an empty working directory so no stray config/.env is picked up"""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _settings(workdir, **kwargs):
    return Settings(config_dir=workdir / "cfg", data_dir=workdir / "data", **kwargs)


def test_defaults(workdir):
    settings = _settings(workdir)

    assert settings.preferences == ExportPreferences()
    assert settings.preferences.timezone == "UTC"
    assert settings.get_db_url() == f"sqlite+aiosqlite:///{workdir / 'data' / 'timesheet.db'}"
    assert (workdir / "cfg").is_dir()


def test_yaml_preferences_from_config_dir(workdir):
    (workdir / "cfg").mkdir()
    (workdir / "cfg" / "settings.yaml").write_text(
        "timezone: Europe/Berlin\npdf_page_size: letter\npdf_compression: false\n", encoding="utf-8"
    )

    prefs = _settings(workdir).preferences
    assert prefs.timezone == "Europe/Berlin"
    assert prefs.pdf_page_size == "letter"
    assert prefs.pdf_compression is False


def test_workspace_config_folder_wins(workdir):
    (workdir / "config").mkdir()
    (workdir / "config" / "settings.yaml").write_text("timezone: Asia/Tokyo\n", encoding="utf-8")
    (workdir / "cfg").mkdir()
    (workdir / "cfg" / "settings.yaml").write_text("timezone: Europe/Berlin\n", encoding="utf-8")

    assert _settings(workdir).preferences.timezone == "Asia/Tokyo"


def test_environment_overrides(workdir, monkeypatch):
    monkeypatch.setenv("TIMESHEET_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("TIMESHEET_PREFERENCES__TIMEZONE", "America/New_York")

    settings = _settings(workdir)
    assert settings.get_db_url() == "sqlite+aiosqlite:///:memory:"
    assert settings.preferences.timezone == "America/New_York"


def test_export_dir(workdir):
    settings = _settings(workdir)
    assert settings.get_export_dir() == workdir / "data" / "exports"
    assert settings.get_export_dir().is_dir()

    settings.preferences = ExportPreferences(export_directory=str(workdir / "out"))
    assert settings.get_export_dir() == workdir / "out"


def test_save_preferences_round_trip(workdir):
    settings = _settings(workdir)
    settings.preferences = ExportPreferences(timezone="Asia/Kolkata", pdf_page_size="letter")
    settings.save_preferences()

    assert _settings(workdir).preferences.timezone == "Asia/Kolkata"


def test_invalid_page_size_rejected():
    with pytest.raises(ValueError):
        ExportPreferences(pdf_page_size="tabloid")
