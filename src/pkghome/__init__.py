"""
pkghome: environment resolution for installed, versioned packages.

Locates installed packages across one primary and any number of additional
repository roots, resolves name + version requirements, computes library
load paths and activates at most one version of each package per process.

The module-level functions below operate on a lazily created process-wide
Environment. Code that wants isolation (tests, embedded tools) constructs
its own ``pkghome.environment.Environment`` instead.

Copyright (c) 2025  pkghome contributors

This file is part of `pkghome`.

pkghome is free software: you can redistribute it and/or modify
it under the terms of the GNU Affero General Public License as published by
the Free Software Foundation, version 3 of the License.

pkghome is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the License for more details.

You should have received a copy of the GNU Affero General Public License
along with pkghome. If not, see <https://www.gnu.org/licenses/>.
"""

from __future__ import annotations  # Python 3.6+ compatibility

import threading
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _distribution_version
from pathlib import Path

# On Python >= 3.11 use the built-in `tomllib`, otherwise the `tomli` backport.
try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib

from pkghome.common_utils import (
    CapabilityUnavailable,
    FileNotFound,
    NoMatchingVersion,
    ParseError,
    PkgHomeError,
    UnknownPackage,
    VersionConflict,
)
from pkghome.environment import Environment
from pkghome.specification import PackageSpecification
from pkghome.version import Requirement, Version

__version__ = "0.0.0"  # fallback default

_pkg_name = "pkghome"

try:
    __version__ = _distribution_version(_pkg_name)
except PackageNotFoundError:
    # Likely running from source → try pyproject.toml
    pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject_path.exists():
        with pyproject_path.open("rb") as f:
            pyproject_data = tomllib.load(f)
        __version__ = pyproject_data["project"]["version"]

_environment = None
_environment_lock = threading.Lock()


def get_environment() -> Environment:
    """The process-wide Environment, created from os.environ on first use."""
    global _environment
    with _environment_lock:
        if _environment is None:
            _environment = Environment()
        return _environment


def reset_environment(environment: Environment = None) -> None:
    """Replace (or drop) the process-wide Environment."""
    global _environment
    with _environment_lock:
        _environment = environment


def activate(name, requirement=None, autoload=True):
    return get_environment().activate(name, requirement, autoload)


def required_location(name, relative_file, requirement=None):
    return get_environment().required_location(name, relative_file, requirement)


def all_load_paths():
    return get_environment().all_load_paths()


def latest_load_paths():
    return get_environment().latest_load_paths()


def datadir(name):
    return get_environment().datadir(name)


def clear_paths():
    get_environment().clear_paths()


def use_paths(primary, additional=None):
    get_environment().use_paths(primary, additional)


def ensure_ssl_available():
    get_environment().ensure_ssl_available()


def primary_root():
    return get_environment().dir


def roots():
    return get_environment().path


def loaded_specs():
    return get_environment().loaded_specs


__all__ = [
    "CapabilityUnavailable",
    "Environment",
    "FileNotFound",
    "NoMatchingVersion",
    "PackageSpecification",
    "ParseError",
    "PkgHomeError",
    "Requirement",
    "UnknownPackage",
    "Version",
    "VersionConflict",
    "activate",
    "all_load_paths",
    "clear_paths",
    "datadir",
    "ensure_ssl_available",
    "get_environment",
    "latest_load_paths",
    "loaded_specs",
    "primary_root",
    "required_location",
    "reset_environment",
    "roots",
    "use_paths",
]
