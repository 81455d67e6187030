"""
Runtime configuration for gotoolkit.

Settings are layered, later layers winning:

1. Built-in defaults (upstream Go endpoints, timeouts, ``~/.local`` prefix)
2. Optional YAML configuration file
3. Process environment switches (``FORCE_DIRECT_INSTALL``, ``DRY_RUN``,
   ``GO_PREFIX``)
4. Command-line flags

Example YAML file::

    endpoints:
      version_text: https://go.dev/VERSION?m=text
      checksum_mirrors:
        - https://dl.google.com/go
    timeouts:
      metadata: 10
    install:
      prefix: ~/opt
"""

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from gotoolkit.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GOTOOLKIT_CONFIG"

DEFAULT_VERSION_TEXT_URL = "https://go.dev/VERSION?m=text"
DEFAULT_RELEASE_LISTING_URL = "https://go.dev/dl/?mode=json&include=all"
DEFAULT_DOWNLOAD_BASE = "https://go.dev/dl"
DEFAULT_CHECKSUM_MIRRORS = [
    "https://dl.google.com/go",
    "https://storage.googleapis.com/golang",
]

_TRUE_VALUES = ("1", "true", "yes", "on")


def _default_prefix() -> Path:
    return Path.home() / ".local"


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for a single run."""

    version_text_url: str = DEFAULT_VERSION_TEXT_URL
    release_listing_url: str = DEFAULT_RELEASE_LISTING_URL
    download_base: str = DEFAULT_DOWNLOAD_BASE
    checksum_mirrors: List[str] = field(
        default_factory=lambda: list(DEFAULT_CHECKSUM_MIRRORS)
    )

    metadata_timeout: float = 15
    """Timeout for the small version probes, in seconds"""

    checksum_timeout: float = 60
    """Timeout for each checksum source, in seconds"""

    download_connect_timeout: float = 15
    download_read_timeout: float = 60

    user_prefix: Path = field(default_factory=_default_prefix)
    """Install prefix used when elevated privileges are unavailable"""

    force_direct_install: bool = False
    dry_run: bool = False

    @property
    def download_timeout(self) -> tuple:
        """(connect, read) timeout pair for artifact downloads."""
        return (self.download_connect_timeout, self.download_read_timeout)


def env_flag(name: str, environ: Optional[Mapping[str, str]] = None) -> bool:
    """
    Read a boolean switch from the environment.

    Args:
        name: Variable name
        environ: Environment mapping (default: os.environ)

    Returns:
        True if the variable is set to 1/true/yes/on (case-insensitive)
    """
    environ = os.environ if environ is None else environ
    return environ.get(name, "").strip().lower() in _TRUE_VALUES


def load_yaml_config(config_file: Path, required: bool = False) -> Dict[str, Any]:
    """
    Load and parse a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file
        required: If True, raise error if file doesn't exist

    Returns:
        Configuration dictionary (empty dict if file doesn't exist and not required)

    Raises:
        ConfigurationError: If the file is required and missing, or is not
            a valid YAML mapping
    """
    if not config_file.exists():
        if required:
            raise ConfigurationError(f"Configuration file not found: {config_file}")
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e

    config = config or {}
    if not isinstance(config, dict):
        raise ConfigurationError(
            f"Invalid configuration in {config_file}: expected a mapping"
        )
    return config


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = config.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"Configuration section '{name}' must be a mapping")
    return value


def _string(section: Dict[str, Any], key: str, current: str) -> str:
    if key not in section:
        return current
    value = section[key]
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"Configuration key '{key}' must be a non-empty string")
    return value


def _timeout(section: Dict[str, Any], key: str, current: float) -> float:
    if key not in section:
        return current
    value = section[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigurationError(f"Timeout '{key}' must be a positive number")
    return float(value)


def apply_config(settings: Settings, config: Dict[str, Any]) -> Settings:
    """
    Overlay a parsed configuration mapping onto settings.

    Args:
        settings: Current settings
        config: Mapping as returned by load_yaml_config()

    Returns:
        New Settings instance

    Raises:
        ConfigurationError: If a key has the wrong type
    """
    endpoints = _section(config, "endpoints")
    timeouts = _section(config, "timeouts")
    install = _section(config, "install")

    mirrors = settings.checksum_mirrors
    if "checksum_mirrors" in endpoints:
        mirrors = endpoints["checksum_mirrors"]
        if not isinstance(mirrors, list) or not all(
            isinstance(m, str) and m for m in mirrors
        ):
            raise ConfigurationError(
                "Configuration key 'checksum_mirrors' must be a list of URLs"
            )

    prefix = settings.user_prefix
    if "prefix" in install:
        prefix = Path(_string(install, "prefix", "")).expanduser()

    return replace(
        settings,
        version_text_url=_string(endpoints, "version_text", settings.version_text_url),
        release_listing_url=_string(
            endpoints, "release_listing", settings.release_listing_url
        ),
        download_base=_string(
            endpoints, "download_base", settings.download_base
        ).rstrip("/"),
        checksum_mirrors=[m.rstrip("/") for m in mirrors],
        metadata_timeout=_timeout(timeouts, "metadata", settings.metadata_timeout),
        checksum_timeout=_timeout(timeouts, "checksum", settings.checksum_timeout),
        download_connect_timeout=_timeout(
            timeouts, "download_connect", settings.download_connect_timeout
        ),
        download_read_timeout=_timeout(
            timeouts, "download_read", settings.download_read_timeout
        ),
        user_prefix=prefix,
    )


def load_settings(
    config_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    force: Optional[bool] = None,
    dry_run: Optional[bool] = None,
    prefix: Optional[Path] = None,
) -> Settings:
    """
    Build settings from defaults, config file, environment and CLI overrides.

    Keyword overrides left as None defer to the environment.

    Args:
        config_file: Explicit YAML file (required to exist if given)
        environ: Environment mapping (default: os.environ)
        force: Force-bypass override
        dry_run: Dry-run override
        prefix: Non-privileged install prefix override

    Returns:
        Resolved Settings

    Raises:
        ConfigurationError: If the configuration file is invalid
    """
    environ = os.environ if environ is None else environ
    settings = Settings()

    if config_file is not None:
        settings = apply_config(settings, load_yaml_config(Path(config_file), True))
    elif environ.get(CONFIG_ENV_VAR):
        env_file = Path(environ[CONFIG_ENV_VAR]).expanduser()
        settings = apply_config(settings, load_yaml_config(env_file, True))

    env_prefix = environ.get("GO_PREFIX")
    if prefix is None and env_prefix:
        prefix = Path(env_prefix)

    return replace(
        settings,
        force_direct_install=(
            env_flag("FORCE_DIRECT_INSTALL", environ) if force is None else force
        ),
        dry_run=env_flag("DRY_RUN", environ) if dry_run is None else dry_run,
        user_prefix=(
            Path(prefix).expanduser() if prefix is not None else settings.user_prefix
        ),
    )
