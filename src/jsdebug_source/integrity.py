from __future__ import annotations

"""Deciding whether a file on disk can back a mapping.

A runtime reports a content hash for each script it loads. If the file on
disk no longer hashes to that value, it changed after the script was loaded
and must not be trusted.
"""

import asyncio
import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path

from .paths import is_packaged_path

logger = logging.getLogger(__name__)

UTF8_BOM = b"\xef\xbb\xbf"

# Node.js compiles CommonJS modules inside this wrapper.
NODE_WRAPPER_PREFIX = b"(function (exports, require, module, __filename, __dirname) { "
NODE_WRAPPER_SUFFIX = b"\n});"


@dataclass(frozen=True)
class ContentHasher:
    """Stateless content hashing; safe to share between concurrent checks."""

    algorithm: str = "sha256"

    def digest(self, data: bytes | str) -> str:
        if isinstance(data, str):
            data = data.encode("utf-8")
        return hashlib.new(self.algorithm, data).hexdigest()

    def verify(self, data: bytes | str, expected: str, check_node_wrapper: bool = True) -> bool:
        """True if `data`, as the runtime may have seen it, hashes to `expected`."""

        if isinstance(data, str):
            data = data.encode("utf-8")
        expected = expected.lower()

        candidates = [data]
        if data.startswith(UTF8_BOM):
            candidates.append(data[len(UTF8_BOM) :])
        if check_node_wrapper:
            candidates.extend(NODE_WRAPPER_PREFIX + c + NODE_WRAPPER_SUFFIX for c in list(candidates))

        return any(self.digest(candidate) == expected for candidate in candidates)

    def verify_file(self, path: Path, expected: str, check_node_wrapper: bool = True) -> bool:
        try:
            data = path.read_bytes()
        except OSError as e:
            logger.debug("cannot read %s for hashing: %s", path, e)
            return False
        return self.verify(data, expected, check_node_wrapper)


DEFAULT_HASHER = ContentHasher()


def check_content_hash(
    absolute_path: str,
    content_hash: str | None = None,
    content_override: str | None = None,
    *,
    hasher: ContentHasher = DEFAULT_HASHER,
) -> str | None:
    """Return `absolute_path` if it may be trusted as the loaded script's source."""

    if not absolute_path:
        return None

    if is_packaged_path(absolute_path):
        return absolute_path

    if not content_hash:
        return absolute_path if Path(absolute_path).exists() else None

    if content_override is not None:
        matches = hasher.verify(content_override, content_hash)
    else:
        matches = hasher.verify_file(Path(absolute_path), content_hash)

    if not matches:
        logger.debug("content hash mismatch for %s", absolute_path)
        return None
    return absolute_path


async def check_content_hash_async(
    absolute_path: str,
    content_hash: str | None = None,
    content_override: str | None = None,
    *,
    hasher: ContentHasher = DEFAULT_HASHER,
) -> str | None:
    return await asyncio.to_thread(
        check_content_hash,
        absolute_path,
        content_hash,
        content_override,
        hasher=hasher,
    )
