"""Settings for caddyctl commands.

Values are layered, lowest priority first:

1. built-in defaults
2. YAML settings file (``--config-file`` or ``$CADDYCTL_CONFIG``)
3. ``CADDYCTL_*`` environment variables
4. command-line flags (applied by the caller via ``dataclasses.replace``)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from caddyctl.errors import ConfigError

DEFAULT_SITES_DIR = Path("/srv/proxy/sites")
DEFAULT_EXTENSION = ".caddy"
DEFAULT_CONTAINER = "caddy"
DEFAULT_CADDYFILE = "/etc/caddy/Caddyfile"

CONFIG_ENV = "CADDYCTL_CONFIG"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Options shared by the label and new-entry commands."""

    directory: Path = DEFAULT_SITES_DIR
    extension: str = DEFAULT_EXTENSION
    force: bool = False
    quiet: bool = False


@dataclass(frozen=True)
class ReloadSettings:
    """Options for the docker exec reload sequence."""

    container: str = DEFAULT_CONTAINER
    config: str = DEFAULT_CADDYFILE
    tty: bool = True
    quiet: bool = False


@dataclass(frozen=True)
class CaddyctlConfig:
    settings: Settings = field(default_factory=Settings)
    reload: ReloadSettings = field(default_factory=ReloadSettings)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CaddyctlConfig":
        """Parse and validate a settings mapping."""
        sites = _section(data, "sites")
        reload = _section(data, "reload")

        settings = Settings()
        if "dir" in sites:
            settings = replace(settings, directory=Path(str(sites["dir"])))
        if "ext" in sites:
            settings = replace(settings, extension=str(sites["ext"] or ""))

        reload_settings = ReloadSettings(
            container=str(reload.get("container", DEFAULT_CONTAINER)),
            config=str(reload.get("config", DEFAULT_CADDYFILE)),
            tty=_as_bool(reload.get("tty", True), "reload.tty"),
        )
        return cls(settings=settings, reload=reload_settings)


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"settings section {name!r} must be a mapping, got {type(value).__name__}")
    return value


def _as_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"invalid boolean for {name}: {value!r}")


def normalize_extension(ext: str | None) -> str:
    """Add the leading dot; an empty extension falls back to ``.caddy``."""
    if not ext:
        return DEFAULT_EXTENSION
    if not ext.startswith("."):
        ext = "." + ext
    return ext


def load_config_file(path: Path) -> CaddyctlConfig:
    """Load a YAML settings file.

    Raises:
        ConfigError: If the file cannot be read or is not a valid mapping
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"unable to read settings file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed YAML settings at {path}: {e}") from e

    if data is None:
        return CaddyctlConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid settings structure in {path}: top level must be a mapping")
    return CaddyctlConfig.from_dict(data)


def apply_env(config: CaddyctlConfig, environ: dict[str, str] | None = None) -> CaddyctlConfig:
    env = os.environ if environ is None else environ
    settings = config.settings
    reload = config.reload

    if env.get("CADDYCTL_SITES_DIR"):
        settings = replace(settings, directory=Path(env["CADDYCTL_SITES_DIR"]))
    if "CADDYCTL_EXT" in env:
        settings = replace(settings, extension=env["CADDYCTL_EXT"])
    if env.get("CADDYCTL_CONTAINER"):
        reload = replace(reload, container=env["CADDYCTL_CONTAINER"])
    if env.get("CADDYCTL_CADDYFILE"):
        reload = replace(reload, config=env["CADDYCTL_CADDYFILE"])
    if env.get("CADDYCTL_TTY"):
        reload = replace(reload, tty=_as_bool(env["CADDYCTL_TTY"], "CADDYCTL_TTY"))
    return CaddyctlConfig(settings=settings, reload=reload)


def load_config(path: Path | None = None, environ: dict[str, str] | None = None) -> CaddyctlConfig:
    """Resolve settings from file and environment."""
    env = os.environ if environ is None else environ
    if path is None and env.get(CONFIG_ENV):
        path = Path(env[CONFIG_ENV])

    config = load_config_file(path) if path is not None else CaddyctlConfig()
    return apply_env(config, env)
