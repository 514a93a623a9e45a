"""Configuration management for traceprov.

Supports loading configuration from:
1. Environment variables (TRACEPROV_*)
2. Config file (~/.traceprov/config.yaml)
3. Default values

Example config file (~/.traceprov/config.yaml):
    keys:
      private_key: "~/.traceprov/trace-key.pem"
    provider:
      id: "p1"
      name: "Provider One"
    stamp:
      embed: true
      strict_media_type: false
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# Config file search locations (in priority order)
CONFIG_LOCATIONS = [
    Path.home() / ".traceprov" / "config.yaml",
    Path.home() / ".config" / "traceprov" / "config.yaml",
    Path(".traceprov.yaml"),
]

DEFAULT_KEY_FILE = "trace-key.pem"


@dataclass
class KeysConfig:
    """Signing key configuration."""

    private_key: str | None = None
    public_key: str | None = None


@dataclass
class ProviderConfig:
    """Default provider identity for stamping."""

    id: str | None = None
    name: str | None = None


@dataclass
class StampConfig:
    """Stamping behaviour."""

    embed: bool = False
    strict_media_type: bool = False


@dataclass
class TraceConfig:
    """Main configuration for traceprov."""

    keys: KeysConfig = field(default_factory=KeysConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    stamp: StampConfig = field(default_factory=StampConfig)


def _load_yaml_config() -> dict[str, Any]:
    """Load configuration from the first YAML file found."""
    for config_path in CONFIG_LOCATIONS:
        if config_path.exists():
            try:
                with open(config_path) as f:
                    data = yaml.safe_load(f)
                    return data if isinstance(data, dict) else {}
            except (OSError, yaml.YAMLError):
                continue
    return {}


def _get_env(key: str, default: Any = None) -> Any:
    """Get environment variable with TRACEPROV_ prefix."""
    return os.environ.get(f"TRACEPROV_{key}", default)


def _parse_bool(value: str | None) -> bool | None:
    """Parse boolean from string."""
    if value is None:
        return None
    return value.lower() in ("true", "1", "yes", "on")


def _expand(path: str | None) -> str | None:
    return os.path.expanduser(path) if path else None


def load_config() -> TraceConfig:
    """Load configuration from file and environment variables.

    Priority (highest first):
    1. Environment variables (TRACEPROV_*)
    2. Config file (~/.traceprov/config.yaml)
    3. Default values
    """
    file_config = _load_yaml_config()

    # Keys
    keys_config = file_config.get("keys") or {}
    keys = KeysConfig(
        private_key=_expand(_get_env("PRIVATE_KEY") or keys_config.get("private_key")),
        public_key=_expand(_get_env("PUBLIC_KEY") or keys_config.get("public_key")),
    )

    # Provider
    provider_config = file_config.get("provider") or {}
    provider = ProviderConfig(
        id=_get_env("PROVIDER_ID") or provider_config.get("id"),
        name=_get_env("PROVIDER_NAME") or provider_config.get("name"),
    )

    # Stamp
    stamp_config = file_config.get("stamp") or {}
    stamp = StampConfig(
        embed=(
            _parse_bool(_get_env("EMBED"))
            if _get_env("EMBED")
            else bool(stamp_config.get("embed", False))
        ),
        strict_media_type=(
            _parse_bool(_get_env("STRICT_MEDIA_TYPE"))
            if _get_env("STRICT_MEDIA_TYPE")
            else bool(stamp_config.get("strict_media_type", False))
        ),
    )

    return TraceConfig(keys=keys, provider=provider, stamp=stamp)


# Global config instance (lazy loaded)
_config: TraceConfig | None = None


def get_config() -> TraceConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
