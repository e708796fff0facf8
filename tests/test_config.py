"""Tests for configuration loading and validation."""

from unittest.mock import patch

import pytest

from chatcommand.config import DEFAULT_LOG_CHANNEL, Config, get_config
from chatcommand.exceptions import ConfigurationError


def _write_settings(tmp_path, text):
    (tmp_path / "settings.yaml").write_text(text)
    return Config(config_dir=tmp_path)


def test_defaults_without_files(tmp_path):
    config = Config(config_dir=tmp_path)
    assert config.settings == {}
    assert config.command_prefix == "!"
    assert config.log_channel == DEFAULT_LOG_CHANNEL
    assert config.logging_level == "INFO"
    assert config.logging_subsystem_levels == {}
    assert config.logging_max_file_size_mb == 10
    assert config.logging_backup_count == 5
    config.validate()


def test_reads_settings_yaml(tmp_path):
    config = _write_settings(tmp_path, (
        "command_prefix: '.'\n"
        "log_dir: /var/log/mybot\n"
        "logging:\n"
        "  channel: mybot.commands\n"
        "  level: DEBUG\n"
        "  subsystem_levels:\n"
        "    dispatch: WARNING\n"
        "  max_file_size_mb: 2\n"
        "  backup_count: 1\n"
    ))
    assert config.command_prefix == "."
    assert str(config.log_dir) == "/var/log/mybot"
    assert config.log_channel == "mybot.commands"
    assert config.logging_level == "DEBUG"
    assert config.logging_subsystem_levels == {"dispatch": "WARNING"}
    assert config.logging_max_file_size_mb == 2
    assert config.logging_backup_count == 1


def test_env_overrides_settings(tmp_path, monkeypatch):
    config = _write_settings(tmp_path, "command_prefix: '.'\n")
    monkeypatch.setenv("CHATCOMMAND_PREFIX", "?")
    monkeypatch.setenv("CHATCOMMAND_LOG_LEVEL", "ERROR")
    assert config.command_prefix == "?"
    assert config.logging_level == "ERROR"


def test_dotenv_file_is_loaded(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("CHATCOMMAND_PREFIX=>>\n")
    config = Config(config_dir=tmp_path)
    assert config.command_prefix == ">>"


def test_invalid_yaml_raises(tmp_path):
    (tmp_path / "settings.yaml").write_text("command_prefix: [unclosed\n")
    with pytest.raises(ConfigurationError):
        Config(config_dir=tmp_path)


def test_non_mapping_yaml_raises(tmp_path):
    (tmp_path / "settings.yaml").write_text("- just\n- a list\n")
    with pytest.raises(ConfigurationError):
        Config(config_dir=tmp_path)


@pytest.mark.parametrize("text, setting", [
    ("command_prefix: '! '\n", "command_prefix"),
    ("command_prefix: 5\n", "command_prefix"),
    ("logging:\n  level: LOUD\n", "logging.level"),
    ("logging:\n  subsystem_levels:\n    dispatch: BASIC_FORMAT\n",
     "logging.subsystem_levels.dispatch"),
    ("logging:\n  subsystem_levels: DEBUG\n", "logging.subsystem_levels"),
    ("logging:\n  channel: ''\n", "logging.channel"),
])
def test_validate_rejects_bad_values(tmp_path, text, setting):
    config = _write_settings(tmp_path, text)
    with pytest.raises(ConfigurationError) as exc_info:
        config.validate()
    assert exc_info.value.setting_name == setting


def test_get_config_is_singleton(tmp_path):
    with patch("chatcommand.config._config", None):
        with patch("chatcommand.config.Config") as mock_config:
            first = get_config()
            second = get_config()
    assert first is second
    mock_config.assert_called_once_with()


def test_validate_accepts_lowercase_subsystem_levels(tmp_path):
    config = _write_settings(tmp_path, (
        "logging:\n"
        "  subsystem_levels:\n"
        "    dispatch: debug\n"
        "    config: Warning\n"
    ))
    config.validate()
