"""Async filesystem operations used by the build engine.

Blocking calls run in worker threads so that probes, reads and writes of
sibling builds do not block each other on the event loop.
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class FileStat:
    """Metadata of an existing path."""

    path: str
    mtime: float
    size: int
    is_directory: bool


class LocalFileSystem:
    """Filesystem facade rooted at a directory."""

    def __init__(self, root: Path | str = "."):
        """Initialize filesystem.

        Args:
            root: Directory relative paths are resolved against (~ is expanded)
        """
        self.root = Path(os.path.expanduser(str(root)))

    def resolve(self, path: str | Path) -> Path:
        """Resolve a path against the root directory."""
        p = Path(os.path.expanduser(str(path)))
        if p.is_absolute():
            return p
        return self.root / p

    async def stat(self, path: str | Path) -> FileStat | None:
        """Probe a path.

        Returns:
            FileStat if the path exists, None otherwise
        """
        return await asyncio.to_thread(self._stat, self.resolve(path))

    async def read_bytes(self, path: str | Path) -> bytes:
        """Read a whole file."""
        return await asyncio.to_thread(self.resolve(path).read_bytes)

    async def write_bytes(self, path: str | Path, data: bytes) -> None:
        """Write a whole file, creating missing parent directories."""
        await asyncio.to_thread(self._write, self.resolve(path), bytes(data))

    async def ensure_directory(self, path: str | Path) -> None:
        """Create a directory and its missing parents."""
        await asyncio.to_thread(self._mkdir, self.resolve(path))

    @staticmethod
    def _stat(path: Path) -> FileStat | None:
        try:
            st = path.stat()
        except FileNotFoundError:
            return None
        except NotADirectoryError:
            return None
        return FileStat(
            path=str(path),
            mtime=st.st_mtime,
            size=st.st_size,
            is_directory=path.is_dir(),
        )

    @staticmethod
    def _mkdir(path: Path) -> None:
        # exist_ok covers a directory created concurrently by another process
        path.mkdir(parents=True, exist_ok=True)

    @classmethod
    def _write(cls, path: Path, data: bytes) -> None:
        cls._mkdir(path.parent)
        path.write_bytes(data)
