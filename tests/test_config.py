"""Tests for folderwatch.utils.config."""

import json
from pathlib import Path

import pytest

from folderwatch.errors import ConfigurationError
from folderwatch.utils.config import Config, load_config


@pytest.fixture
def isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    return tmp_path


def test_defaults(isolated_cwd):
    config = load_config()

    assert config.folder_path == Path.cwd()
    assert config.cron_expression == "* * * * *"
    assert config.watchdog.debounce_time == 1.0
    assert config.watchdog.debounce_max_wait == 30.0
    assert config.watchdog.health_check_interval == 5.0
    assert config.logging.level == "INFO"


def test_appsettings_json_keys(isolated_cwd):
    (isolated_cwd / "appsettings.json").write_text(json.dumps({
        "FolderPath": "/srv/share",
        "CronExpression": "0 * * * *",
    }))

    config = load_config()

    assert config.folder_path == Path("/srv/share")
    assert config.cron_expression == "0 * * * *"


def test_null_values_keep_defaults(isolated_cwd):
    (isolated_cwd / "appsettings.json").write_text(json.dumps({
        "FolderPath": None,
        "CronExpression": None,
    }))

    config = load_config()

    assert config.folder_path == Path.cwd()
    assert config.cron_expression == "* * * * *"


def test_yaml_sections_and_flat_keys(tmp_path):
    path = tmp_path / "watch.yaml"
    path.write_text(
        "folder_path: /data\n"
        "cron_expression: '*/5 8-18 * * 1-5'\n"
        "debounce_time: 0.25\n"
        "log_level: DEBUG\n"
        "watchdog:\n"
        "  use_polling: true\n"
        "  ignore_patterns: ['*.tmp']\n"
        "logging:\n"
        "  format: json\n"
    )

    config = load_config(path)

    assert config.folder_path == Path("/data")
    assert config.cron_expression == "*/5 8-18 * * 1-5"
    assert config.watchdog.debounce_time == 0.25
    assert config.watchdog.use_polling is True
    assert config.watchdog.ignore_patterns == ["*.tmp"]
    assert config.logging.level == "DEBUG"
    assert config.logging.format == "json"


def test_unknown_keys_are_warned_about(tmp_path, caplog):
    path = tmp_path / "watch.json"
    path.write_text(json.dumps({"colour": "blue"}))

    load_config(path)

    assert "Unknown configuration key: colour" in caplog.text


def test_unparsable_file_is_configuration_error(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("folder_path: [unclosed\n")

    with pytest.raises(ConfigurationError):
        load_config(path)


def test_non_mapping_file_is_configuration_error(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]")

    with pytest.raises(ConfigurationError):
        load_config(path)


def test_explicit_missing_file_is_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError):
        load_config(tmp_path / "nope.yaml")


def test_validate_accepts_readable_folder(tmp_path):
    Config(folder_path=str(tmp_path), cron_expression="0 9 * * 1").validate()


def test_validate_rejects_bad_cron(tmp_path):
    with pytest.raises(ConfigurationError):
        Config(folder_path=tmp_path, cron_expression="every minute").validate()


def test_validate_rejects_missing_folder(tmp_path):
    with pytest.raises(ConfigurationError, match="does not exist"):
        Config(folder_path=tmp_path / "missing").validate()


def test_to_yaml_round_trips_through_loader(tmp_path):
    config = Config(folder_path=tmp_path, cron_expression="0 9 * * *")
    path = tmp_path / "dump.yaml"
    path.write_text(config.to_yaml())

    loaded = load_config(path)

    assert loaded.folder_path == tmp_path
    assert loaded.cron_expression == "0 9 * * *"


def test_watch_tuning_keys(tmp_path):
    path = tmp_path / "watch.json"
    path.write_text(json.dumps({
        "debounce_max_wait": 10,
        "watchdog": {"health_check_interval": 0.5},
    }))

    config = load_config(path)

    assert config.watchdog.debounce_max_wait == 10
    assert config.watchdog.health_check_interval == 0.5
