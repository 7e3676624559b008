"""Built-in terminal actions."""

from __future__ import annotations

import asyncio

from ..fsx import LocalFileSystem
from .context import Context
from .entries import BytesEntry, Entry, FileEntry
from .errors import ActionError


def _fs(context: Context) -> LocalFileSystem:
    return context.fs or LocalFileSystem()


async def store(context: Context) -> bytes:
    """Write the first dependency to the context's path (or name)."""
    entry = context.entries[0] if context.entries else None
    path = context.path or context.name
    if entry is None or not path:
        raise ActionError(context.target, f"Failed to store {context.target} (missing path or entry)")
    contents = await entry.contents()
    await _fs(context).write_bytes(path, contents)
    return contents


async def store_deps(context: Context) -> Entry:
    """Write every dependency to its own path."""
    fs = _fs(context)

    async def write(entry: Entry) -> None:
        path = entry.path if isinstance(entry, FileEntry) else entry.name
        await fs.write_bytes(path, await entry.contents())

    await asyncio.gather(*(write(entry) for entry in context.entries))
    return BytesEntry(context.name or "", b"")


def pass_through(context: Context) -> Entry:
    """Return the first dependency unchanged, under the context's name."""
    if not context.entries:
        raise ActionError(context.target, f"Failed to pass {context.target} (missing source entry)")
    entry = context.entries[0]
    return entry.renamed(context.name or entry.name or "source")
