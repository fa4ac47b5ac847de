from __future__ import annotations  # Python 3.6+ compatibility

import importlib
import importlib.util
import logging
import sys
from pathlib import Path, PurePosixPath
from types import ModuleType
from typing import Dict, List, Optional

from packaging.utils import canonicalize_name

from pkghome.common_utils import FileNotFound, VersionConflict
from pkghome.registry import SourceIndex
from pkghome.specification import PackageSpecification
from pkghome.version import Requirement

logger = logging.getLogger(__name__)


def module_name_for(relative_file: str) -> str:
    """Dotted module name for an autoload entry: ``pkg/mod.py`` -> ``pkg.mod``."""
    parts = list(PurePosixPath(relative_file).parts)
    if parts[-1].endswith(".py"):
        parts[-1] = parts[-1][: -len(".py")]
    if parts[-1] == "__init__" and len(parts) > 1:
        parts.pop()
    return ".".join(parts)


class Activator:
    """
    Activates one version of a named package into a load path.

    ``loaded_specs`` is shared with the owning Environment; once a name is
    recorded there it stays for the life of the process.
    """

    def __init__(self, loaded_specs: Dict[str, PackageSpecification], load_path: List[str]):
        self.loaded_specs = loaded_specs
        self.load_path = load_path

    def activate(
        self,
        source_index: SourceIndex,
        name: str,
        requirement=None,
        autoload: bool = True,
    ) -> PackageSpecification:
        requirement = Requirement.parse(requirement)

        existing = self.loaded_specs.get(canonicalize_name(name))
        if existing is not None and requirement.satisfied_by(existing.version):
            logger.debug("%s already activated", existing.full_name)
            return existing

        spec = source_index.find_best(name, requirement)
        if existing is not None:
            raise VersionConflict(spec.name, existing.version, spec.version)

        lib_paths = [str(p) for p in spec.lib_paths()]
        new_entries = [p for p in lib_paths if p not in self.load_path]
        self.load_path[0:0] = new_entries
        importlib.invalidate_caches()
        self.loaded_specs[spec.canonical_name] = spec
        logger.debug("Activated %s (load path += %s)", spec.full_name, new_entries)

        if autoload:
            for relative_file in spec.autoload:
                self._autoload(spec, relative_file)
        return spec

    def _autoload(self, spec: PackageSpecification, relative_file: str) -> ModuleType:
        """Execute the located file itself, whatever the load path or sys.modules hold."""
        location = self._locate(spec, relative_file)
        if location is None:
            raise FileNotFound(spec.full_name, relative_file)
        module_name = module_name_for(relative_file)

        current = sys.modules.get(module_name)
        if current is not None and getattr(current, "__file__", None) == str(location):
            return current

        if location.name == "__init__.py":
            module_spec = importlib.util.spec_from_file_location(
                module_name, str(location), submodule_search_locations=[str(location.parent)]
            )
        else:
            module_spec = importlib.util.spec_from_file_location(module_name, str(location))
        module = importlib.util.module_from_spec(module_spec)
        logger.debug("Autoloading %s from %s", module_name, location)

        sys.modules[module_name] = module
        try:
            module_spec.loader.exec_module(module)
        except BaseException:
            if current is not None:
                sys.modules[module_name] = current
            else:
                sys.modules.pop(module_name, None)
            raise
        return module

    @staticmethod
    def _locate(spec: PackageSpecification, relative_file: str) -> Optional[Path]:
        candidates = [relative_file]
        if not relative_file.endswith(".py"):
            candidates.append(relative_file + ".py")
            candidates.append(str(PurePosixPath(relative_file) / "__init__.py"))
        for lib_path in spec.lib_paths():
            for candidate in candidates:
                path = lib_path / candidate
                if path.is_file():
                    return path
        return None
