"""Byte storage behind a buffer: memory-mapped or heap-resident.

A source is chosen once per load by size threshold and never mutated.
Compressed files are always decompressed onto the heap before indexing.
"""

from __future__ import annotations

import bz2
import gzip
import logging
import lzma
import mmap
import os
from pathlib import Path
from typing import Union

from ..errors import ContentLoadError

logger = logging.getLogger(__name__)

DEFAULT_MMAP_THRESHOLD = 10 * 1024 * 1024
BINARY_PROBE_BYTES = 8192

_DECOMPRESSORS = {
    ".gz": gzip.open,
    ".bz2": bz2.open,
    ".xz": lzma.open,
    ".lzma": lzma.open,
}


class MemorySource:
    """Heap-resident immutable byte span."""

    kind = "memory"

    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)

    def __len__(self) -> int:
        return len(self.data)

    def close(self) -> None:
        pass


class MappedSource:
    """Read-only memory mapping of a whole file."""

    kind = "mmap"

    def __init__(self, path: Path) -> None:
        fd = os.open(path, os.O_RDONLY)
        try:
            self.data = mmap.mmap(fd, 0, access=mmap.ACCESS_READ)
        finally:
            os.close(fd)

    def __len__(self) -> int:
        return len(self.data)

    def close(self) -> None:
        self.data.close()


ContentSource = Union[MemorySource, MappedSource]


def is_compressed_path(path: Path) -> bool:
    """Return whether ``path`` has an extension handled by transparent decompression."""
    return path.suffix.lower() in _DECOMPRESSORS


def _decompress(path: Path) -> bytes:
    opener = _DECOMPRESSORS[path.suffix.lower()]
    try:
        with opener(path, "rb") as handle:
            return handle.read()
    except FileNotFoundError as exc:
        raise ContentLoadError(path, "no such file") from exc
    except (OSError, EOFError, lzma.LZMAError) as exc:
        raise ContentLoadError(path, f"failed to decompress: {exc}") from exc


def load_source(path: Path, mmap_threshold: int = DEFAULT_MMAP_THRESHOLD) -> ContentSource:
    """Load ``path`` into a content source.

    Files whose size reaches ``mmap_threshold`` are mapped, smaller files are
    read fully. Empty files are always heap-resident since they cannot be
    mapped.
    """
    if is_compressed_path(path):
        data = _decompress(path)
        logger.debug("decompressed %s into %d bytes", path, len(data))
        return MemorySource(data)

    try:
        size = path.stat().st_size
    except FileNotFoundError as exc:
        raise ContentLoadError(path, "no such file") from exc
    except OSError as exc:
        raise ContentLoadError(path, f"cannot stat: {exc.strerror or exc}") from exc
    if path.is_dir():
        raise ContentLoadError(path, "is a directory")

    try:
        if size > 0 and size >= mmap_threshold:
            return MappedSource(path)
        return MemorySource(path.read_bytes())
    except (OSError, ValueError) as exc:
        raise ContentLoadError(path, f"cannot read: {exc}") from exc


def probe_binary(source: ContentSource) -> bool:
    """Return ``True`` when a NUL byte appears in the first 8 KiB."""
    return b"\x00" in source.data[:BINARY_PROBE_BYTES]
