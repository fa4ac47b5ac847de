from __future__ import annotations  # Python 3.6+ compatibility

import importlib.util
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pkghome.i18n import _
from pkghome.paths import ADDITIONAL_ROOTS_ENV, PRIMARY_ROOT_ENV, normalize_root, split_path_list

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "PKGHOME_CONFIG"
SSL_ENV = "PKGHOME_SSL"

# No package source is configured until the user adds one.
DEFAULT_SOURCES: List[str] = []

SSL_AVAILABLE = importlib.util.find_spec("ssl") is not None

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def default_config_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    environ = environ if environ is not None else os.environ
    override = environ.get(CONFIG_PATH_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "pkghome" / "config.json"


def parse_flag(value) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    text = str(value).strip().lower()
    if text in _TRUTHY:
        return True
    if text in _FALSY:
        return False
    return None


class ConfigManager:
    """
    Loads and persists the user's pkghome config file (JSON).
    A missing file is an empty config; a corrupted one is reported and ignored.
    """

    def __init__(self, config_path=None, environ: Optional[Mapping[str, str]] = None):
        self.config_path = Path(config_path) if config_path else default_config_path(environ)
        self.config: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.config_path.exists():
            return {}
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError:
            logger.warning(_("Config file %s is corrupted, ignoring it."), self.config_path)
            return {}
        except OSError as e:
            logger.warning(_("Config file %s is unreadable: %s"), self.config_path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning(_("Config file %s does not hold an object, ignoring it."), self.config_path)
            return {}
        return data

    def reload(self):
        self.config = self._load()

    def get(self, key, default=None):
        """Get a configuration value, with an optional default."""
        return self.config.get(key, default)

    def set(self, key, value):
        """Set a configuration value and save the file."""
        self.config[key] = value
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(self.config, f, indent=4)


@dataclass
class EnvironmentConfig:
    """Merged view of the recognized options: environment > file > defaults."""

    primary_root: Optional[Path] = None
    additional_roots: List[Path] = field(default_factory=list)
    ssl_available: bool = SSL_AVAILABLE
    sources: List[str] = field(default_factory=lambda: list(DEFAULT_SOURCES))

    @classmethod
    def load(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        config_manager: Optional[ConfigManager] = None,
    ) -> "EnvironmentConfig":
        environ = environ if environ is not None else os.environ
        file_config = config_manager.config if config_manager is not None else {}

        primary_root = None
        if environ.get(PRIMARY_ROOT_ENV):
            primary_root = normalize_root(environ[PRIMARY_ROOT_ENV])
        elif file_config.get("primary_root"):
            primary_root = normalize_root(file_config["primary_root"])

        # A set but empty ADDITIONAL_PACKAGE_PATH still overrides the file.
        if ADDITIONAL_ROOTS_ENV in environ:
            additional_roots = split_path_list(environ.get(ADDITIONAL_ROOTS_ENV))
        else:
            additional_roots = [normalize_root(p) for p in file_config.get("additional_roots") or []]

        ssl_available = parse_flag(environ.get(SSL_ENV))
        if ssl_available is None:
            ssl_available = parse_flag(file_config.get("ssl_available"))
        if ssl_available is None:
            ssl_available = SSL_AVAILABLE

        sources = file_config.get("sources") or list(DEFAULT_SOURCES)

        return cls(
            primary_root=primary_root,
            additional_roots=additional_roots,
            ssl_available=ssl_available,
            sources=list(sources),
        )
