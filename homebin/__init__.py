"""homebin — install binaries to $HOME. Not a package manager.

The public API is re-exported here:

    from homebin import install_manifest, remove_manifest, installed_manifest_version
"""

__version__ = "0.3.0"

from homebin.core.engine.executor import (  # noqa: E402
    files_to_remove,
    install_manifest,
    installed_files,
    remove_manifest,
)
from homebin.core.services.environment import check_environment  # noqa: E402
from homebin.core.services.version_probe import (  # noqa: E402
    installed_manifest_version,
    outdated_manifest_version,
)

__all__ = [
    "__version__",
    "check_environment",
    "files_to_remove",
    "install_manifest",
    "installed_files",
    "installed_manifest_version",
    "outdated_manifest_version",
    "remove_manifest",
]
