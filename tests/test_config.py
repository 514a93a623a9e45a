"""Tests for configuration loading."""

import pytest

from traceprov import config
from traceprov.config import get_config, load_config, reset_config


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    """Point config discovery at a YAML file in tmp_path."""
    path = tmp_path / "config.yaml"
    monkeypatch.setattr(config, "CONFIG_LOCATIONS", [tmp_path / "absent.yaml", path])
    return path


def test_defaults():
    """Test defaults without any file or environment."""
    cfg = load_config()
    assert cfg.keys.private_key is None
    assert cfg.keys.public_key is None
    assert cfg.provider.id is None
    assert cfg.provider.name is None
    assert cfg.stamp.embed is False
    assert cfg.stamp.strict_media_type is False


def test_yaml_file(config_file):
    """Test values are read from the first existing file."""
    config_file.write_text(
        "keys:\n"
        "  private_key: /keys/trace-key.pem\n"
        "provider:\n"
        "  id: p1\n"
        "  name: Provider One\n"
        "stamp:\n"
        "  embed: true\n"
    )
    cfg = load_config()
    assert cfg.keys.private_key == "/keys/trace-key.pem"
    assert cfg.provider.id == "p1"
    assert cfg.provider.name == "Provider One"
    assert cfg.stamp.embed is True
    assert cfg.stamp.strict_media_type is False


def test_env_overrides_file(config_file, monkeypatch):
    """Test TRACEPROV_* variables take priority over the file."""
    config_file.write_text("provider:\n  id: from-file\nstamp:\n  embed: true\n")
    monkeypatch.setenv("TRACEPROV_PROVIDER_ID", "from-env")
    monkeypatch.setenv("TRACEPROV_EMBED", "no")
    monkeypatch.setenv("TRACEPROV_STRICT_MEDIA_TYPE", "1")
    cfg = load_config()
    assert cfg.provider.id == "from-env"
    assert cfg.stamp.embed is False
    assert cfg.stamp.strict_media_type is True


def test_key_paths_expand_user(monkeypatch, tmp_path):
    """Test ~ in key paths is expanded."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("TRACEPROV_PRIVATE_KEY", "~/trace-key.pem")
    assert load_config().keys.private_key == str(tmp_path / "trace-key.pem")


@pytest.mark.parametrize("content", ["", "- just\n- a list\n", "keys: [unclosed\n"])
def test_unusable_file_falls_back_to_defaults(config_file, content):
    """Test empty, non-mapping, or invalid YAML yields defaults."""
    config_file.write_text(content)
    assert load_config().provider.id is None


def test_get_config_is_cached(monkeypatch):
    """Test the global config is loaded once until reset."""
    first = get_config()
    monkeypatch.setenv("TRACEPROV_PROVIDER_ID", "p9")
    assert get_config() is first
    reset_config()
    assert get_config().provider.id == "p9"
