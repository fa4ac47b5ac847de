from __future__ import annotations  # Python 3.6+ compatibility

import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Optional, Tuple

from packaging.utils import canonicalize_name

from pkghome.common_utils import ParseError
from pkghome.i18n import _
from pkghome.version import Version

# On Python >= 3.11 use the built-in `tomllib`, otherwise the `tomli` backport.
try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib

logger = logging.getLogger(__name__)

SPEC_SUFFIX = ".toml"
DEFAULT_LIB_DIRS = ("lib",)


def _relative_path(value: str, field_name: str, source: Optional[str]) -> str:
    """Reject absolute paths and paths that climb out of the package directory."""
    posix = value.replace("\\", "/")
    pure = PurePosixPath(posix)
    if not value or pure.is_absolute() or ".." in pure.parts or posix[1:3] == ":/":
        raise ParseError(
            _("'{}' entry '{}' must be a relative path inside the package").format(field_name, value),
            source,
        )
    return str(pure)


def _string_list(data: Dict[str, Any], key: str, default, source, allow_string=False):
    if key not in data:
        return tuple(default)
    value = data[key]
    if allow_string and isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ParseError(_("'{}' must be a list of strings").format(key), source)
    return tuple(value)


@dataclass(frozen=True)
class PackageSpecification:
    """
    Metadata of one installed package version.

    Identity (equality and hashing) is ``(name, version)``; where the package lives
    on disk is carried alongside but never compared.
    """

    name: str
    version: Version
    lib_dirs: Tuple[str, ...] = field(default=DEFAULT_LIB_DIRS, compare=False)
    autoload: Tuple[str, ...] = field(default=(), compare=False)
    files: Tuple[str, ...] = field(default=(), compare=False)
    summary: str = field(default="", compare=False)
    data_dir: Optional[str] = field(default=None, compare=False)
    gem_dir: Optional[Path] = field(default=None, compare=False)
    loaded_from: Optional[Path] = field(default=None, compare=False)

    def __post_init__(self):
        if not isinstance(self.version, Version):
            object.__setattr__(self, "version", Version.parse(self.version))
        for name in ("lib_dirs", "autoload", "files"):
            value = getattr(self, name)
            if isinstance(value, str):
                value = (value,)
            object.__setattr__(self, name, tuple(value))
        if self.gem_dir is not None:
            object.__setattr__(self, "gem_dir", Path(self.gem_dir))
        if self.loaded_from is not None:
            object.__setattr__(self, "loaded_from", Path(self.loaded_from))

    @property
    def full_name(self) -> str:
        return f"{self.name}-{self.version}"

    @property
    def canonical_name(self) -> str:
        return canonicalize_name(self.name)

    def _require_gem_dir(self) -> Path:
        if self.gem_dir is None:
            raise ValueError(_("{} has no installation directory").format(self.full_name))
        return self.gem_dir

    def lib_paths(self):
        """Absolute library directories in declared order."""
        gem_dir = self._require_gem_dir()
        return [gem_dir / lib_dir for lib_dir in self.lib_dirs]

    def data_path(self) -> Path:
        gem_dir = self._require_gem_dir()
        if self.data_dir:
            return gem_dir / self.data_dir
        return gem_dir / "data" / self.name

    def with_location(self, gem_dir, loaded_from=None) -> "PackageSpecification":
        return PackageSpecification(
            name=self.name,
            version=self.version,
            lib_dirs=self.lib_dirs,
            autoload=self.autoload,
            files=self.files,
            summary=self.summary,
            data_dir=self.data_dir,
            gem_dir=gem_dir,
            loaded_from=loaded_from,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "version": str(self.version),
            "lib_dirs": list(self.lib_dirs),
            "autoload": list(self.autoload),
            "files": list(self.files),
            "summary": self.summary,
        }
        if self.data_dir:
            data["data_dir"] = self.data_dir
        return data

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], gem_dir=None, loaded_from=None
    ) -> "PackageSpecification":
        source = str(loaded_from) if loaded_from else None
        if not isinstance(data, dict):
            raise ParseError(_("Specification must be a table"), source)

        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ParseError(_("'name' is required and must be a non-empty string"), source)
        raw_version = data.get("version")
        if not isinstance(raw_version, str):
            raise ParseError(_("'version' is required and must be a string"), source)
        try:
            version = Version.parse(raw_version)
        except ParseError as e:
            raise ParseError(str(e), source) from e

        lib_dirs = _string_list(data, "lib_dirs", DEFAULT_LIB_DIRS, source)
        autoload = _string_list(data, "autoload", (), source, allow_string=True)
        files = _string_list(data, "files", (), source)
        lib_dirs = tuple(_relative_path(p, "lib_dirs", source) for p in lib_dirs)
        autoload = tuple(_relative_path(p, "autoload", source) for p in autoload)

        summary = data.get("summary", "")
        if not isinstance(summary, str):
            raise ParseError(_("'summary' must be a string"), source)
        data_dir = data.get("data_dir")
        if data_dir is not None:
            if not isinstance(data_dir, str):
                raise ParseError(_("'data_dir' must be a string"), source)
            data_dir = _relative_path(data_dir, "data_dir", source)

        return cls(
            name=name.strip(),
            version=version,
            lib_dirs=lib_dirs,
            autoload=autoload,
            files=files,
            summary=summary,
            data_dir=data_dir,
            gem_dir=gem_dir,
            loaded_from=loaded_from,
        )

    @classmethod
    def load(cls, path, gem_dir=None) -> "PackageSpecification":
        """Parse one metadata file. Any failure surfaces as ParseError."""
        path = Path(path)
        try:
            with path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ParseError(_("Invalid TOML: {}").format(e), str(path)) from e
        except UnicodeDecodeError as e:
            raise ParseError(_("Specification is not valid UTF-8: {}").format(e), str(path)) from e
        except OSError as e:
            raise ParseError(_("Unreadable specification: {}").format(e), str(path)) from e
        spec = cls.from_dict(data, gem_dir=gem_dir, loaded_from=path)
        if path.name != spec.full_name + SPEC_SUFFIX:
            logger.debug("Specification %s declares %s", path, spec.full_name)
        return spec
