"""Resolved build artifacts.

An entry is the result of resolving a target: a display name plus content
that is computed at most once. The text form is always the UTF-8 decoding
of the byte form.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable

if TYPE_CHECKING:
    from ..fsx import LocalFileSystem


@dataclass(frozen=True)
class NamedDependency:
    """A dependency target, optionally bound to a role name."""

    value: str
    name: str | None = None


class _Lazy:
    """Memoized async value shared by every awaiter."""

    def __init__(self, factory: Callable[[], Awaitable[Any]]):
        self._factory = factory
        self._task: asyncio.Future | None = None

    async def get(self) -> Any:
        if self._task is None:
            self._task = asyncio.ensure_future(self._factory())
        # One cancelled awaiter must not cancel the shared load
        return await asyncio.shield(self._task)


class Entry:
    """Base class for resolved artifacts."""

    def __init__(self, name: str):
        self._name = name
        self._text: str | None = None

    @property
    def name(self) -> str:
        return self._name

    async def contents(self) -> bytes:
        raise NotImplementedError

    async def text(self) -> str:
        if self._text is None:
            self._text = (await self.contents()).decode("utf-8")
        return self._text

    async def mtime(self) -> float | None:
        """Filesystem timestamp, or None for computed content."""
        return None

    def renamed(self, name: str) -> Entry:
        if name == self._name:
            return self
        return _AliasEntry(name, self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._name!r})"


class BytesEntry(Entry):
    """Entry holding computed bytes."""

    def __init__(self, name: str, data: bytes):
        super().__init__(name)
        self._data = bytes(data)

    async def contents(self) -> bytes:
        return self._data


class TextEntry(Entry):
    """Entry holding computed text."""

    def __init__(self, name: str, text: str):
        super().__init__(name)
        self._text = text
        self._data: bytes | None = None

    async def contents(self) -> bytes:
        if self._data is None:
            self._data = self._text.encode("utf-8")
        return self._data

    async def text(self) -> str:
        return self._text


class _AliasEntry(Entry):
    """Another entry's content under a different name."""

    def __init__(self, name: str, source: Entry):
        super().__init__(name)
        self._source = source

    async def contents(self) -> bytes:
        return await self._source.contents()

    async def text(self) -> str:
        return await self._source.text()

    async def mtime(self) -> float | None:
        return await self._source.mtime()

    def renamed(self, name: str) -> Entry:
        return self._source.renamed(name)


class FileEntry(Entry):
    """Entry backed by a file on disk.

    Content and mtime are fetched from the filesystem on first access and
    cached. Renamed copies share the cache.
    """

    def __init__(
        self,
        name: str,
        path: str,
        fs: "LocalFileSystem",
        original_path: str | None = None,
        mtime: float | None = None,
    ):
        super().__init__(name)
        self.path = path
        self.original_path = original_path if original_path is not None else path
        self._fs = fs
        self._contents = _Lazy(lambda: fs.read_bytes(path))
        self._mtime = _Lazy(self._load_mtime) if mtime is None else None
        self._known_mtime = mtime
        self._decoded = _Lazy(self._decode)

    async def _load_mtime(self) -> float:
        stat = await self._fs.stat(self.path)
        if stat is None:
            raise FileNotFoundError(self.path)
        return stat.mtime

    async def _decode(self) -> str:
        return (await self._contents.get()).decode("utf-8")

    async def contents(self) -> bytes:
        return await self._contents.get()

    async def text(self) -> str:
        return await self._decoded.get()

    async def mtime(self) -> float:
        if self._mtime is None:
            return self._known_mtime
        return await self._mtime.get()

    def renamed(self, name: str) -> Entry:
        if name == self.name:
            return self
        copy = FileEntry.__new__(FileEntry)
        copy.__dict__.update(self.__dict__)
        copy._name = name
        return copy


def to_entry(name: str, value: Any) -> Entry:
    """Normalize an action result into an entry.

    Bytes-like values become a BytesEntry, strings a TextEntry, and entries
    pass through unchanged.

    Raises:
        TypeError: For any other value
    """
    if isinstance(value, Entry):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BytesEntry(name, bytes(value))
    if isinstance(value, str):
        return TextEntry(name, value)
    raise TypeError(f"Action for {name} returned {type(value).__name__}, expected bytes, str or Entry")
