from __future__ import annotations  # Python 3.6+ compatibility

from pathlib import Path
from typing import List, Optional

from pkghome.common_utils import FileNotFound
from pkghome.registry import SourceIndex
from pkghome.specification import PackageSpecification


class PathSearcher:
    """Read-only queries mapping installed packages to library directories."""

    def __init__(self, source_index: SourceIndex):
        self.source_index = source_index

    def all_load_paths(self) -> List[Path]:
        """Library directories of every installed version of every package."""
        paths = []
        for spec in self.source_index:
            paths.extend(spec.lib_paths())
        return paths

    def latest_load_paths(self) -> List[Path]:
        """Library directories of the newest version of each package only."""
        paths = []
        for spec in self.source_index.latest_specs():
            paths.extend(spec.lib_paths())
        return paths

    def required_location(self, name: str, relative_file: str, requirement=None) -> Path:
        spec = self.source_index.find_best(name, requirement)
        for lib_path in spec.lib_paths():
            candidate = lib_path / relative_file
            if candidate.is_file():
                return candidate
        raise FileNotFound(spec.full_name, relative_file)

    def find(self, relative_file: str) -> Optional[PackageSpecification]:
        """Newest installed package shipping ``relative_file`` in a library directory."""
        specs = sorted(self.source_index, key=lambda s: s.version, reverse=True)
        for spec in specs:
            if any((lib_path / relative_file).is_file() for lib_path in spec.lib_paths()):
                return spec
        return None
