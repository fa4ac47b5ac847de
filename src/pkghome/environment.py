"""
Environment - the long-lived state binding repository roots, the source index,
the path searcher and the table of activated packages.

Every cached field is guarded by one re-entrant lock. ``clear_paths`` drops the
roots and everything derived from them; activated packages are never forgotten.
"""

from __future__ import annotations  # Python 3.6+ compatibility

import logging
import os
import sys
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence

from packaging.utils import canonicalize_name

from pkghome.activator import Activator
from pkghome.common_utils import CapabilityUnavailable, UnknownPackage
from pkghome.config import ConfigManager, EnvironmentConfig
from pkghome.i18n import _
from pkghome.paths import RepositoryPathSet, default_dir, ensure_subdirectories
from pkghome.registry import SourceIndex
from pkghome.searcher import PathSearcher
from pkghome.specification import PackageSpecification

logger = logging.getLogger(__name__)


class Environment:
    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        config_manager: Optional[ConfigManager] = None,
        load_path: Optional[List[str]] = None,
    ):
        self._environ = environ if environ is not None else os.environ
        self._config_manager = config_manager
        self._load_path = load_path if load_path is not None else sys.path
        self._lock = threading.RLock()

        self._path_set: Optional[RepositoryPathSet] = None
        self._source_index: Optional[SourceIndex] = None
        # Path set generation the cached index was scanned at.
        self._index_generation = -1
        self._searcher: Optional[PathSearcher] = None
        self._settings: Optional[EnvironmentConfig] = None
        self._ssl_available: Optional[bool] = None

        self._loaded_specs: Dict[str, PackageSpecification] = {}
        self._activator = Activator(self._loaded_specs, self._load_path)

    # ------------------------------------------------------------------
    # configuration
    # ------------------------------------------------------------------
    @property
    def config_manager(self) -> ConfigManager:
        with self._lock:
            if self._config_manager is None:
                self._config_manager = ConfigManager(environ=self._environ)
            return self._config_manager

    @property
    def settings(self) -> EnvironmentConfig:
        with self._lock:
            if self._settings is None:
                self._settings = EnvironmentConfig.load(self._environ, self.config_manager)
            return self._settings

    @property
    def path_set(self) -> RepositoryPathSet:
        with self._lock:
            if self._path_set is None:
                self._path_set = RepositoryPathSet(settings=self.settings)
            return self._path_set

    @property
    def dir(self) -> Path:
        """The resolved primary root."""
        return self.path_set.resolved_primary()

    @property
    def path(self) -> List[Path]:
        """Every root searched, additional roots first and the primary root last."""
        return self.path_set.all_roots()

    def use_paths(self, primary, additional: Optional[Sequence] = None) -> None:
        """Point the environment at explicit roots, dropping derived caches."""
        with self._lock:
            self.path_set.reconfigure(primary, additional if additional is not None else ())
            self._source_index = None
            self._searcher = None
            # Resolving provisions the primary root's layout.
            self.path_set.resolved_primary()

    reconfigure = use_paths

    def clear_paths(self) -> None:
        """Forget roots, index and searcher so the next access re-reads the environment."""
        with self._lock:
            self._path_set = None
            self._source_index = None
            self._searcher = None
            self._settings = None
            if self._config_manager is not None:
                self._config_manager.reload()
        logger.debug("Cleared cached repository paths")

    @staticmethod
    def default_dir() -> Path:
        return default_dir()

    @staticmethod
    def ensure_subdirectories(root) -> None:
        ensure_subdirectories(root)

    @property
    def user_home(self) -> Path:
        return Path.home()

    @property
    def sources(self) -> List[str]:
        return list(self.settings.sources)

    # ------------------------------------------------------------------
    # index and searcher
    # ------------------------------------------------------------------
    @property
    def source_index(self) -> SourceIndex:
        with self._lock:
            path_set = self.path_set
            if self._source_index is None or self._index_generation != path_set.generation:
                roots = path_set.all_roots()
                logger.debug("Scanning repository roots: %s", roots)
                self._source_index = SourceIndex.from_roots(roots)
                self._index_generation = path_set.generation
                self._searcher = None
            return self._source_index

    @source_index.setter
    def source_index(self, value: Optional[SourceIndex]) -> None:
        with self._lock:
            self._source_index = value
            if value is not None:
                self._index_generation = self.path_set.generation
            self._searcher = None

    def refresh(self) -> SourceIndex:
        """Rescan the current roots."""
        self.source_index = None
        return self.source_index

    @property
    def searcher(self) -> PathSearcher:
        with self._lock:
            index = self.source_index
            if self._searcher is None:
                self._searcher = PathSearcher(index)
            return self._searcher

    def all_load_paths(self) -> List[Path]:
        return self.searcher.all_load_paths()

    def latest_load_paths(self) -> List[Path]:
        return self.searcher.latest_load_paths()

    def required_location(self, name: str, relative_file: str, requirement=None) -> Path:
        return self.searcher.required_location(name, relative_file, requirement)

    # ------------------------------------------------------------------
    # activation
    # ------------------------------------------------------------------
    @property
    def loaded_specs(self) -> Mapping[str, PackageSpecification]:
        with self._lock:
            return MappingProxyType(dict(self._loaded_specs))

    @property
    def load_path(self) -> List[str]:
        return self._load_path

    def activate(self, name: str, requirement=None, autoload: bool = True) -> PackageSpecification:
        with self._lock:
            return self._activator.activate(self.source_index, name, requirement, autoload)

    def datadir(self, name: str) -> Optional[Path]:
        """Data directory of an activated or installed package, None when unavailable."""
        with self._lock:
            spec = self._loaded_specs.get(canonicalize_name(name))
            if spec is None:
                try:
                    spec = self.source_index.find_best(name)
                except UnknownPackage:
                    return None
        data_path = spec.data_path()
        return data_path if data_path.is_dir() else None

    # ------------------------------------------------------------------
    # capabilities
    # ------------------------------------------------------------------
    @property
    def ssl_available(self) -> bool:
        with self._lock:
            if self._ssl_available is None:
                return self.settings.ssl_available
            return self._ssl_available

    @ssl_available.setter
    def ssl_available(self, value: bool) -> None:
        with self._lock:
            self._ssl_available = bool(value)

    def ensure_ssl_available(self) -> None:
        if not self.ssl_available:
            raise CapabilityUnavailable(_("SSL is not installed on this system"))

    def __repr__(self):
        return f"<Environment {self._path_set!r}>"
