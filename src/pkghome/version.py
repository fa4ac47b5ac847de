"""
Version and requirement handling for installed packages.

A Version is a dot separated sequence of non-negative integers compared
numerically component by component, shorter sequences padded with zeros.
Ordering and the comparison operators come from ``packaging``; only the
pessimistic ``~>`` bound is computed here.
A Requirement is a conjunction of operator/version Constraints.
"""

from __future__ import annotations  # Python 3.6+ compatibility

import re
from functools import total_ordering
from typing import Iterable, List, Optional, Tuple

from packaging.specifiers import Specifier
from packaging.version import Version as _PackagingVersion

from pkghome.common_utils import ParseError
from pkghome.i18n import _

# ASCII digits only, no pre-release or local segments.
_VERSION_RE = re.compile(r"^[0-9]+(?:\.[0-9]+)*$")
_CONSTRAINT_RE = re.compile(r"^\s*(~>|>=|<=|!=|=|>|<)?\s*(\S+)\s*$")

OPERATORS = ("=", "!=", "<", "<=", ">", ">=", "~>")

# Operator spelling understood by packaging.specifiers.
_SPECIFIER_OPS = {"=": "==", "!=": "!=", "<": "<", "<=": "<=", ">": ">", ">=": ">="}


@total_ordering
class Version:
    __slots__ = ("_components", "_version")

    def __init__(self, components: Iterable[int]):
        components = tuple(int(c) for c in components)
        if not components or any(c < 0 for c in components):
            raise ParseError(_("Invalid version components: {}").format(components))
        self._components = components
        self._version = _PackagingVersion(".".join(str(c) for c in components))

    @classmethod
    def parse(cls, text) -> "Version":
        if isinstance(text, Version):
            return text
        if not isinstance(text, str):
            raise ParseError(_("Version must be a string, got {}").format(type(text).__name__))
        text = text.strip()
        if not _VERSION_RE.match(text):
            raise ParseError(_("Malformed version number string '{}'").format(text))
        return cls(int(part) for part in text.split("."))

    @property
    def components(self) -> Tuple[int, ...]:
        return self._components

    @property
    def packaging_version(self) -> _PackagingVersion:
        return self._version

    def bump(self) -> "Version":
        """Upper bound for the pessimistic operator: 1.2.3 -> 1.3, 1.2 -> 2, 1 -> 2."""
        parts = list(self._components)
        if len(parts) > 1:
            parts.pop()
        parts[-1] += 1
        return Version(parts)

    def __eq__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return self._version == other._version

    def __lt__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return self._version < other._version

    def __hash__(self):
        return hash(self._version)

    def __str__(self):
        return ".".join(str(c) for c in self._components)

    def __repr__(self):
        return f"Version('{self}')"


def compare(a, b) -> int:
    """Three-way comparison returning -1, 0 or 1."""
    a, b = Version.parse(a), Version.parse(b)
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


class Constraint:
    """A single operator paired with a version, e.g. ``~> 1.2``."""

    __slots__ = ("op", "version", "_specifier")

    def __init__(self, op: str, version):
        if op not in OPERATORS:
            raise ParseError(_("Unknown version operator '{}'").format(op))
        self.op = op
        self.version = Version.parse(version)
        if op == "~>":
            self._specifier = None
        else:
            self._specifier = Specifier(f"{_SPECIFIER_OPS[op]}{self.version}")

    @classmethod
    def parse(cls, text: str) -> "Constraint":
        match = _CONSTRAINT_RE.match(text)
        if not match:
            raise ParseError(_("Illformed requirement '{}'").format(text))
        op, version = match.groups()
        return cls(op or "=", version)

    def satisfied_by(self, version) -> bool:
        version = Version.parse(version)
        if self._specifier is None:
            return self.version <= version < self.version.bump()
        return self._specifier.contains(version.packaging_version, prereleases=True)

    def __eq__(self, other):
        if not isinstance(other, Constraint):
            return NotImplemented
        return (self.op, self.version) == (other.op, other.version)

    def __hash__(self):
        return hash((self.op, self.version))

    def __str__(self):
        return f"{self.op} {self.version}"

    def __repr__(self):
        return f"Constraint('{self}')"


class Requirement:
    """
    A conjunction of constraints. ``Requirement.parse(None)`` is the "any version"
    requirement (``>= 0``).
    """

    def __init__(self, constraints: Iterable[Constraint]):
        self.constraints: Tuple[Constraint, ...] = tuple(constraints)
        if not self.constraints:
            self.constraints = (Constraint(">=", "0"),)

    @classmethod
    def default(cls) -> "Requirement":
        return cls([Constraint(">=", "0")])

    @classmethod
    def parse(cls, value) -> "Requirement":
        if value is None:
            return cls.default()
        if isinstance(value, Requirement):
            return value
        if isinstance(value, Constraint):
            return cls([value])
        if isinstance(value, Version):
            return cls([Constraint("=", value)])
        if isinstance(value, str):
            parts = [p for p in value.split(",") if p.strip()]
            if not parts:
                raise ParseError(_("Empty requirement string"))
            return cls(Constraint.parse(p) for p in parts)
        if isinstance(value, (list, tuple)):
            constraints: List[Constraint] = []
            for item in value:
                constraints.extend(cls.parse(item).constraints)
            return cls(constraints)
        raise ParseError(_("Cannot build a requirement from {!r}").format(value))

    def satisfied_by(self, version) -> bool:
        version = Version.parse(version)
        return all(c.satisfied_by(version) for c in self.constraints)

    def __eq__(self, other):
        if not isinstance(other, Requirement):
            return NotImplemented
        return set(self.constraints) == set(other.constraints)

    def __hash__(self):
        return hash(frozenset(self.constraints))

    def __str__(self):
        return ", ".join(str(c) for c in self.constraints)

    def __repr__(self):
        return f"Requirement('{self}')"


def select_best(versions: Iterable, requirement=None) -> Optional[Version]:
    """Highest version satisfying ``requirement``, or None when nothing matches."""
    requirement = Requirement.parse(requirement)
    candidates = [Version.parse(v) for v in versions]
    matching = [v for v in candidates if requirement.satisfied_by(v)]
    return max(matching) if matching else None
