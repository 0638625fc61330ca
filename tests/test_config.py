"""Tests for the configuration manager."""

import json

import pytest

from packet_headers.config import (
    ConfigError,
    ConfigManager,
    ConfigSchema,
    create_default_config,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ConfigSchema.settings():
        monkeypatch.delenv("PKTHDR_" + key.upper().replace(".", "_"), raising=False)


def write_config(path, data):
    path.write_text(json.dumps(data))
    return str(path)


def test_defaults():
    config = ConfigManager()
    assert config.get("general.max_packet_size") == 65535
    assert config.get("output.format") == "hex"
    assert config.get("general.missing", "fallback") == "fallback"


def test_settings_lists_every_section_key():
    assert ConfigSchema.settings() == {
        "general.max_packet_size": "integer",
        "general.log_level": "string",
        "output.format": "string",
        "output.colors_enabled": "boolean",
        "output.pcap_directory": "string",
    }


def test_missing_file_uses_defaults(tmp_path):
    config = ConfigManager(str(tmp_path / "absent.json"))
    assert config.load() is False
    assert config.config == ConfigSchema.get_defaults()


def test_missing_file_strict(tmp_path):
    config = ConfigManager(str(tmp_path / "absent.json"))
    with pytest.raises(ConfigError):
        config.load(strict=True)


def test_load_merges_over_defaults(tmp_path):
    path = write_config(tmp_path / "cfg.json", {"general": {"max_packet_size": 1500}})
    config = ConfigManager(path)
    assert config.load() is True
    assert config.get("general.max_packet_size") == 1500
    assert config.get("general.log_level") == "WARNING"
    assert config.get("output.format") == "hex"


def test_invalid_values_fall_back_to_defaults(tmp_path):
    path = write_config(tmp_path / "cfg.json", {"general": {"max_packet_size": 10}})
    config = ConfigManager(path)
    assert config.load() is False
    assert config.get("general.max_packet_size") == 65535


def test_invalid_values_strict(tmp_path):
    path = write_config(tmp_path / "cfg.json", {"output": {"format": "xml"}})
    config = ConfigManager(path)
    with pytest.raises(ConfigError, match="output.format"):
        config.load(strict=True)


def test_unparsable_file(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text("{not json")
    config = ConfigManager(str(path))
    assert config.load() is False
    with pytest.raises(ConfigError):
        config.load(strict=True)


@pytest.mark.parametrize("root", [[1, 2], "text", 7, None])
def test_non_object_root(tmp_path, root):
    path = write_config(tmp_path / "cfg.json", root)
    config = ConfigManager(path)
    assert config.load() is False
    assert config.config == ConfigSchema.get_defaults()
    with pytest.raises(ConfigError, match="must be an object"):
        config.load(strict=True)


def test_non_object_section(tmp_path):
    path = write_config(tmp_path / "cfg.json", {"general": 5})
    with pytest.raises(ConfigError, match="general"):
        ConfigManager(path).load(strict=True)


def test_non_utf8_file(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_bytes(b'{"general": "\xff\xfe"}')
    config = ConfigManager(str(path))
    assert config.load() is False
    with pytest.raises(ConfigError):
        config.load(strict=True)


def test_unreadable_path(tmp_path):
    config = ConfigManager(str(tmp_path))
    assert config.load() is False
    with pytest.raises(ConfigError):
        config.load(strict=True)


def test_env_override(monkeypatch):
    monkeypatch.setenv("PKTHDR_GENERAL_MAX_PACKET_SIZE", "1500")
    monkeypatch.setenv("PKTHDR_OUTPUT_COLORS_ENABLED", "false")
    config = ConfigManager()
    config.load()
    assert config.get("general.max_packet_size") == 1500
    assert config.get("output.colors_enabled") is False


def test_env_override_keeps_strings_verbatim(monkeypatch):
    monkeypatch.setenv("PKTHDR_OUTPUT_PCAP_DIRECTORY", "1234")
    config = ConfigManager()
    config.load()
    assert config.get("output.pcap_directory") == "1234"


@pytest.mark.parametrize("var, value", [
    ("PKTHDR_GENERAL_LOG_LEVEL", "LOUD"),
    ("PKTHDR_GENERAL_MAX_PACKET_SIZE", "big"),
    ("PKTHDR_GENERAL_MAX_PACKET_SIZE", "70000"),
    ("PKTHDR_OUTPUT_FORMAT", "xml"),
])
def test_invalid_env_override_is_rejected(monkeypatch, var, value):
    monkeypatch.setenv(var, value)
    with pytest.raises(ConfigError, match="environment override"):
        ConfigManager().load()


def test_env_override_is_not_saved(tmp_path, monkeypatch):
    monkeypatch.setenv("PKTHDR_OUTPUT_FORMAT", "dissect")
    path = str(tmp_path / "cfg.json")
    config = ConfigManager(path)
    config.load()
    assert config.effective()["output"]["format"] == "dissect"
    config.save()
    with open(path) as f:
        assert json.load(f)["output"]["format"] == "hex"


def test_set_and_save_round_trip(tmp_path):
    path = str(tmp_path / "cfg.json")
    config = ConfigManager(path)
    config.set("output.format", "hexdump")
    config.set("general.max_packet_size", "1500")
    config.save()

    reloaded = ConfigManager(path)
    assert reloaded.load() is True
    assert reloaded.get("output.format") == "hexdump"
    assert reloaded.get("general.max_packet_size") == 1500


def test_set_unknown_key():
    with pytest.raises(ConfigError, match="Unknown config key"):
        ConfigManager().set("general.port", "80")


def test_set_invalid_value_leaves_config_unchanged():
    config = ConfigManager()
    with pytest.raises(ConfigError):
        config.set("general.max_packet_size", "10")
    assert config.get("general.max_packet_size") == 65535


def test_create_default_config(tmp_path):
    path = tmp_path / "default.json"
    create_default_config(str(path))
    assert json.loads(path.read_text()) == ConfigSchema.get_defaults()
