"""Context passed to rule actions.

A context is built fresh for every invocation from the resolved dependency
entries. Decorators return a new context via ``dataclasses.replace``.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable, Mapping

from .entries import Entry

if TYPE_CHECKING:
    from ..fsx import LocalFileSystem


@dataclass(frozen=True)
class Context:
    """Resolved dependencies of a target.

    Attributes:
        target: Target being built
        entries: Dependency entries in generator order
        named: Entries bound to a role name
        mtime: Newest dependency mtime, or the build time if there are none
        name: Output name, set by decorators
        path: Output path, set by decorators
        fs: Filesystem the pipeline builds against
    """

    target: str
    entries: tuple[Entry, ...] = ()
    named: Mapping[str, Entry] = field(default_factory=lambda: MappingProxyType({}))
    mtime: float = 0.0
    name: str | None = None
    path: str | None = None
    fs: "LocalFileSystem | None" = None

    @classmethod
    async def compose(
        cls,
        target: str,
        entries: Iterable[tuple[str | None, Entry]],
        fs: "LocalFileSystem | None" = None,
    ) -> "Context":
        """Build a context from (role name, entry) pairs."""
        pairs = list(entries)
        resolved = tuple(entry for _, entry in pairs)
        named = {role: entry for role, entry in pairs if role}
        return cls(
            target=target,
            entries=resolved,
            named=MappingProxyType(named),
            mtime=await compose_mtime(resolved),
            fs=fs,
        )

    def __getitem__(self, role: str) -> Entry:
        return self.named[role]

    def get(self, role: str, default: Entry | None = None) -> Entry | None:
        return self.named.get(role, default)


async def compose_mtime(entries: tuple[Entry, ...]) -> float:
    """Newest mtime among entries.

    Entries without a filesystem timestamp count as now, and so does an
    empty list.
    """
    now = time.time()
    if not entries:
        return now
    mtimes = await asyncio.gather(*(entry.mtime() for entry in entries))
    return max(now if m is None else m for m in mtimes)


Decorator = Callable[[Context], "Context | Awaitable[Context]"]


# ##################################################################
# built-in decorators
# each returns a modified copy of the context
def target_path(context: Context) -> Context:
    """Write output to the target path itself."""
    return replace(context, path=context.target, name=context.name or context.target)


def output_path(template: str) -> Decorator:
    """Write output to ``template.format(target=...)``."""

    def decorate(context: Context) -> Context:
        return replace(context, path=template.format(target=context.target))

    return decorate


def named(name: str) -> Decorator:
    """Set the output name."""

    def decorate(context: Context) -> Context:
        return replace(context, name=name)

    return decorate
