from __future__ import annotations

"""Recognition of paths inside packaged application bundles.

Files inside an Electron `.asar` archive or a Bun standalone executable's
virtual file system cannot be re-read and hashed from disk; their content is
fixed by packaging.
"""

import re

BUNFS_PREFIX_UNIX = "/$bunfs/"
BUNFS_PREFIX_WINDOWS = "B:\\~BUN\\"
BUNFS_PREFIX_WINDOWS_URL = "B:/~BUN/"

_ASAR_SEGMENT = re.compile(r"\.asar[\\/]")


def is_within_asar(path: str) -> bool:
    return _ASAR_SEGMENT.search(path) is not None


def is_within_bunfs(path: str) -> bool:
    return path.startswith((BUNFS_PREFIX_UNIX, BUNFS_PREFIX_WINDOWS, BUNFS_PREFIX_WINDOWS_URL))


def is_packaged_path(path: str) -> bool:
    """True if `path` points inside an archive that cannot be re-hashed."""

    return is_within_asar(path) or is_within_bunfs(path)
