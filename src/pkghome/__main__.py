from __future__ import annotations  # Python 3.6+ compatibility

import sys

from pkghome import __version__, get_environment
from pkghome.common_utils import safe_print
from pkghome.i18n import _


def main(environment=None) -> int:
    """Print a summary of the resolved package environment."""
    env = environment if environment is not None else get_environment()
    safe_print(_("pkghome environment:"))
    safe_print(_("  - PKGHOME VERSION: {}").format(__version__))
    safe_print(_("  - PYTHON VERSION: {}.{}").format(sys.version_info.major, sys.version_info.minor))
    safe_print(_("  - PRIMARY ROOT: {}").format(env.dir))
    safe_print(_("  - SSL AVAILABLE: {}").format(env.ssl_available))
    safe_print(_("  - REPOSITORY ROOTS:"))
    for root in env.path:
        safe_print(f"     - {root}")
    safe_print(_("  - SOURCES:"))
    for source in env.sources:
        safe_print(f"     - {source}")
    safe_print(_("  - INSTALLED PACKAGES: {}").format(len(env.source_index)))
    return 0


# This runs the main function and ensures the script exits with the correct status code.
if __name__ == "__main__":
    sys.exit(main())
