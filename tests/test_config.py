"""Tests for config loading and validation."""

import sys
from datetime import time
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest

from components.config import ConfigError, config_from_mapping, load_config

VALID = """
server_command = "python -u mock_server.py --stop-delay 1"
start_time = "08:00"
end_time = "23:30"
discord_webhook_url = "https://discord.example/api/webhooks/1/abc"
"""


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_valid_config(tmp_path):
    config = load_config(_write(tmp_path, VALID))

    assert config.server_command == ["python", "-u", "mock_server.py", "--stop-delay", "1"]
    assert config.start_time == time(8, 0)
    assert config.end_time == time(23, 30)
    assert config.discord_webhook_url == "https://discord.example/api/webhooks/1/abc"
    assert config.check_interval == 10.0
    assert config.stop_timeout == 60.0
    assert config.source == (tmp_path / "config.toml").resolve()


def test_command_list_and_optional_settings():
    config = config_from_mapping(
        {
            "server_command": ["java", "-jar", "server jar.jar", "nogui"],
            "start_time": "22:00",
            "end_time": "02:00",
            "discord_webhook_url": "",
            "check_interval": 2,
            "stop_timeout": 5.5,
        }
    )

    assert config.server_command == ["java", "-jar", "server jar.jar", "nogui"]
    assert config.discord_webhook_url is None
    assert config.check_interval == 2.0
    assert config.stop_timeout == 5.5
    assert config.source is None


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Failed to read"):
        load_config(tmp_path / "absent.toml")


def test_invalid_toml(tmp_path):
    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(_write(tmp_path, "start_time = "))


@pytest.mark.parametrize("key", ["server_command", "start_time", "end_time"])
def test_required_keys(key):
    data = {"server_command": "run", "start_time": "08:00", "end_time": "18:00"}
    del data[key]

    with pytest.raises(ConfigError, match=key):
        config_from_mapping(data)


@pytest.mark.parametrize("value", ["8am", "25:00", "12:61", 800])
def test_bad_clock_values(value):
    with pytest.raises(ConfigError, match="start_time"):
        config_from_mapping({"server_command": "run", "start_time": value, "end_time": "18:00"})


@pytest.mark.parametrize("command", ["", "   ", [], ["ok", 3], 42])
def test_bad_commands(command):
    with pytest.raises(ConfigError, match="server_command"):
        config_from_mapping({"server_command": command, "start_time": "08:00", "end_time": "18:00"})


@pytest.mark.parametrize("value", [0, -1, "10", True])
def test_bad_intervals(value):
    with pytest.raises(ConfigError, match="check_interval"):
        config_from_mapping(
            {"server_command": "run", "start_time": "08:00", "end_time": "18:00", "check_interval": value}
        )


def test_config_error_is_a_value_error():
    assert issubclass(ConfigError, ValueError)


def test_non_utf8_file_is_a_config_error(tmp_path):
    path = tmp_path / "config.toml"
    path.write_bytes(b'server_command = "caf\xe9"\nstart_time = "08:00"\nend_time = "18:00"\n')

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(path)
