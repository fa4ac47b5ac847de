"""
Repository roots: one primary root plus ordered additional search roots.

Explicit values win; otherwise roots come from the merged settings (the
environment variables ``PACKAGE_HOME`` / ``ADDITIONAL_PACKAGE_PATH``, then
the config file), then the per-interpreter default under ``sys.prefix``.
"""

from __future__ import annotations  # Python 3.6+ compatibility

import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

PRIMARY_ROOT_ENV = "PACKAGE_HOME"
ADDITIONAL_ROOTS_ENV = "ADDITIONAL_PACKAGE_PATH"

DIRECTORIES = ("cache", "doc", "gems", "specifications")
DEFAULT_SCOPE_DIRECTORIES = ("gems/default", "specifications/default")


def default_dir() -> Path:
    """Per-interpreter default primary root, e.g. ``<prefix>/lib/pkghome/packages/3.11``."""
    runtime_version = f"{sys.version_info.major}.{sys.version_info.minor}"
    return Path(sys.prefix) / "lib" / "pkghome" / "packages" / runtime_version


def normalize_root(path) -> Path:
    return Path(os.path.normpath(os.path.expanduser(str(path))))


def split_path_list(value: Optional[str]) -> List[Path]:
    if not value:
        return []
    return [normalize_root(p) for p in value.split(os.pathsep) if p.strip()]


def ensure_subdirectories(root) -> None:
    """
    Create ``root`` and its fixed layout, best effort.

    Every directory is attempted on its own; failures (read-only or
    write-protected locations) are logged and skipped, never raised.
    """
    root = Path(root)
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.debug("Could not create repository root %s: %s", root, e)

    for name in DIRECTORIES + DEFAULT_SCOPE_DIRECTORIES:
        target = root / name
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.debug("Could not create %s: %s", target, e)


class RepositoryPathSet:
    """
    Ordered, de-duplicated set of repository roots.

    Explicit roots win over ``settings`` (an ``EnvironmentConfig``), which
    carries the environment and config file values. ``generation`` increases
    on every reconfiguration so owners of derived caches (the source index,
    the searcher) know to rebuild.
    """

    def __init__(self, primary=None, additional: Optional[Sequence] = None, settings=None):
        self._settings = settings
        self._primary: Optional[Path] = None
        self._additional: Optional[List[Path]] = None
        self._resolved_primary: Optional[Path] = None
        self.generation = 0
        self._assign(primary, additional)

    def _assign(self, primary, additional):
        self._primary = normalize_root(primary) if primary else None
        if additional is None:
            self._additional = None
        else:
            self._additional = [normalize_root(p) for p in additional]
        self._resolved_primary = None

    def reconfigure(self, primary, additional: Optional[Sequence] = ()) -> None:
        self._assign(primary, additional)
        self.generation += 1
        logger.debug("Repository roots reconfigured: primary=%s additional=%s", primary, additional)

    @property
    def explicit(self) -> bool:
        return self._primary is not None or self._additional is not None

    def configured_primary(self) -> Optional[Path]:
        """The primary root from explicit, environment or config file settings, if any."""
        if self._primary is not None:
            return self._primary
        if self._settings is not None:
            return self._settings.primary_root
        return None

    def resolved_primary(self) -> Path:
        if self._resolved_primary is None:
            primary = self.configured_primary() or default_dir()
            ensure_subdirectories(primary)
            self._resolved_primary = primary
        return self._resolved_primary

    def resolved_additional(self) -> List[Path]:
        if self._additional is not None:
            return list(self._additional)
        if self._settings is not None:
            return list(self._settings.additional_roots)
        return []

    def all_roots(self) -> List[Path]:
        """Additional roots followed by the primary root, first occurrence wins."""
        roots: List[Path] = []
        seen = set()
        for root in self.resolved_additional() + [self.resolved_primary()]:
            key = os.path.normcase(str(root))
            if key in seen:
                continue
            seen.add(key)
            roots.append(root)
        return roots

    def provision(self, root=None) -> None:
        ensure_subdirectories(root if root is not None else self.resolved_primary())

    def __repr__(self):
        return f"RepositoryPathSet(primary={self._primary!r}, additional={self._additional!r})"
