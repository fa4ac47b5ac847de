from __future__ import annotations  # Python 3.6+ compatibility

import sys
import unicodedata
from typing import Optional

from pkghome.i18n import _

# Keep a reference to the original, built-in print function
_builtin_print = print


def safe_print(*args, **kwargs):
    """
    Print that survives consoles which cannot encode the text.
    On non-UTF-8 Windows sessions (like cp1252) symbols are replaced instead of crashing.
    """
    if "flush" not in kwargs:
        kwargs["flush"] = True
    try:
        _builtin_print(*args, **kwargs)
    except UnicodeEncodeError:
        stream = kwargs.get("file") or sys.stdout
        encoding = getattr(stream, "encoding", None) or "utf-8"
        safe_args = []
        for arg in args:
            if isinstance(arg, str):
                if sys.platform == "win32" and encoding.lower() not in ("utf-8", "utf8"):
                    arg = "".join(
                        (c if ord(c) < 128 or unicodedata.category(c)[0] != "S" else "?")
                        for c in arg
                    )
                arg = arg.encode(encoding, "replace").decode(encoding)
            safe_args.append(arg)
        _builtin_print(*safe_args, **kwargs)


class PkgHomeError(Exception):
    """Base class for every error raised by pkghome."""

    pass


class ParseError(PkgHomeError, ValueError):
    """
    Raised for a malformed version, requirement or package metadata file.
    Scanning catches it and skips the offending file; direct parsing lets it propagate.
    """

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        if source:
            message = _("{}: {}").format(source, message)
        super().__init__(message)


class UnknownPackage(PkgHomeError, LookupError):
    """No installed version of the package exists on any configured root."""

    def __init__(self, package_name: str):
        self.package_name = package_name
        super().__init__(_("Could not find package '{}' in any repository root").format(package_name))


class NoMatchingVersion(PkgHomeError, LookupError):
    """
    The package is installed, but none of its versions satisfies the requirement.
    Carries the installed versions so callers can report what is available.
    """

    def __init__(self, package_name: str, requirement, available=()):
        self.package_name = package_name
        self.requirement = requirement
        self.available = list(available)
        installed = ", ".join(str(v) for v in self.available) or _("none")
        super().__init__(
            _("No version of '{}' matches '{}' (installed: {})").format(
                package_name, requirement, installed
            )
        )


class FileNotFound(PkgHomeError, FileNotFoundError):
    """The resolved package does not ship the requested file in any library directory."""

    def __init__(self, package_name: str, relative_file: str):
        self.package_name = package_name
        self.relative_file = relative_file
        message = _("Package '{}' does not contain '{}'").format(package_name, relative_file)
        super().__init__(message)


class VersionConflict(PkgHomeError):
    """The requested version is incompatible with the one already activated in this process."""

    def __init__(self, package_name: str, activated_version, requested_version):
        self.package_name = package_name
        self.activated_version = activated_version
        self.requested_version = requested_version
        super().__init__(
            _("Can't activate {}-{}, already activated {}-{}").format(
                package_name, requested_version, package_name, activated_version
            )
        )


class CapabilityUnavailable(PkgHomeError):
    """A guarded optional capability (such as SSL) is not present."""

    pass
