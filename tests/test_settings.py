import logging

import pytest

from salesanalytics.settings import Settings, load_settings


@pytest.fixture
def settings_dir(tmp_path):
    (tmp_path / "common.toml").write_text('port = "8080"\npath = "data.csv"\n')
    (tmp_path / "dbconfig.toml").write_text('user = "user"\nhost = "localhost"\n')
    (tmp_path / "notes.txt").write_text("ignored")
    (tmp_path / "nested.toml").mkdir()
    return tmp_path


def test_values_are_read_per_file(settings_dir):
    settings = load_settings(settings_dir)
    assert settings.get("common", "port") == "8080"
    assert settings.get("common", "path") == "data.csv"
    assert settings.get("dbconfig", "host") == "localhost"


def test_only_toml_files_are_loaded(settings_dir):
    settings = load_settings(settings_dir)
    assert set(settings.files) == {"common", "dbconfig"}


def test_missing_key_returns_empty_and_warns(settings_dir, caplog):
    settings = load_settings(settings_dir)
    caplog.set_level(logging.WARNING, logger="salesanalytics")
    assert settings.get("common", "hours") == ""
    assert any("[common][hours]" in r.getMessage() for r in caplog.records)


def test_missing_file_returns_empty_silently(caplog):
    settings = Settings({"common": {"port": "8080"}})
    caplog.set_level(logging.WARNING, logger="salesanalytics")
    assert settings.get("other", "port") == ""
    assert caplog.records == []


def test_non_string_value_is_rejected(tmp_path):
    (tmp_path / "common.toml").write_text("hours = 5\n")
    with pytest.raises(ValueError):
        load_settings(tmp_path)


def test_invalid_toml_is_rejected(tmp_path):
    (tmp_path / "broken.toml").write_text("this is = = not toml\n")
    with pytest.raises(ValueError):
        load_settings(tmp_path)


def test_missing_folder_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "absent")