"""
SourceIndex - in-memory catalogue of every installed package specification
found under the configured repository roots.
"""

from __future__ import annotations  # Python 3.6+ compatibility

import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, Iterator, List

from packaging.utils import canonicalize_name

from pkghome.common_utils import NoMatchingVersion, ParseError, UnknownPackage
from pkghome.specification import SPEC_SUFFIX, PackageSpecification
from pkghome.version import Requirement

logger = logging.getLogger(__name__)

# (metadata directory, install directory) pairs relative to a root, scanned in order
SCOPES = (
    (Path("specifications"), Path("gems")),
    (Path("specifications") / "default", Path("gems") / "default"),
)


def iter_spec_files(root: Path) -> Iterator:
    """Yield ``(metadata file, install directory)`` for every metadata file under ``root``."""
    for spec_dir, install_dir in SCOPES:
        directory = root / spec_dir
        try:
            candidates = sorted(p for p in directory.iterdir() if p.suffix == SPEC_SUFFIX)
        except OSError:
            continue
        for spec_file in candidates:
            if spec_file.is_file():
                yield spec_file, root / install_dir


class SourceIndex:
    def __init__(self, specs: Iterable[PackageSpecification] = ()):
        self._specs: Dict[str, Dict[str, PackageSpecification]] = defaultdict(dict)
        for spec in specs:
            self.add_spec(spec)

    @classmethod
    def from_roots(cls, roots: Iterable) -> "SourceIndex":
        index = cls()
        index.scan(roots)
        return index

    def scan(self, roots: Iterable) -> int:
        """
        Load every metadata file under ``roots``. A file that fails to parse is
        logged and skipped so one corrupt package cannot hide the others.
        Returns the number of specifications added.
        """
        added = 0
        skipped = 0
        for root in roots:
            root = Path(root)
            for spec_file, install_dir in iter_spec_files(root):
                try:
                    spec = PackageSpecification.load(spec_file)
                except ParseError as e:
                    skipped += 1
                    logger.warning("Skipping invalid package specification: %s", e)
                    continue
                spec = spec.with_location(install_dir / spec.full_name, spec_file)
                if self.add_spec(spec):
                    added += 1
                else:
                    logger.debug("Ignoring %s, already indexed from an earlier root", spec_file)
        logger.debug("Indexed %d specification(s), skipped %d", added, skipped)
        return added

    def add_spec(self, spec: PackageSpecification) -> bool:
        """Index ``spec``; returns False when that name and version is already present."""
        versions = self._specs[spec.canonical_name]
        key = str(spec.version)
        if any(existing.version == spec.version for existing in versions.values()):
            return False
        versions[key] = spec
        return True

    def remove_spec(self, full_name: str) -> bool:
        for name, versions in list(self._specs.items()):
            for key, spec in list(versions.items()):
                if spec.full_name == full_name:
                    del versions[key]
                    if not versions:
                        del self._specs[name]
                    return True
        return False

    def find(self, name: str) -> List[PackageSpecification]:
        """Every installed version of ``name``, lowest first. Unknown names give []."""
        versions = self._specs.get(canonicalize_name(name), {})
        return sorted(versions.values(), key=lambda s: s.version)

    def search(self, name: str, requirement=None) -> List[PackageSpecification]:
        requirement = Requirement.parse(requirement)
        return [s for s in self.find(name) if requirement.satisfied_by(s.version)]

    def find_best(self, name: str, requirement=None) -> PackageSpecification:
        installed = self.find(name)
        if not installed:
            raise UnknownPackage(name)
        requirement = Requirement.parse(requirement)
        matching = [s for s in installed if requirement.satisfied_by(s.version)]
        if not matching:
            raise NoMatchingVersion(name, requirement, [s.version for s in installed])
        return matching[-1]

    def latest_specs(self) -> List[PackageSpecification]:
        return [self.find(name)[-1] for name in sorted(self._specs)]

    def names(self) -> List[str]:
        return sorted(self._specs)

    def __contains__(self, name) -> bool:
        return bool(self._specs.get(canonicalize_name(name)))

    def __iter__(self) -> Iterator[PackageSpecification]:
        for name in sorted(self._specs):
            yield from self.find(name)

    def __len__(self) -> int:
        return sum(len(v) for v in self._specs.values())

    def __repr__(self):
        return f"<SourceIndex {len(self)} specification(s)>"
