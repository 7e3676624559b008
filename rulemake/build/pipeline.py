"""Pipeline executor.

Resolves a target by matching it against the rule set, recursively
resolving the dependencies the matching rule derives, and running the
rule's action only when the target's file is missing or not newer than
its dependencies. Targets without a matching rule must exist on disk.

Each top-level call is a build session: a target is resolved at most once
per session and a target reached again through its own dependency chain
fails with DependencyCycleError.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import re
import time
from collections import defaultdict
from typing import Any, Iterable, Sequence

from ..fsx import FileStat, LocalFileSystem
from ..log import console_logger, trace
from .context import Context
from .entries import Entry, FileEntry, NamedDependency, to_entry
from .errors import DependencyCycleError, InvalidRuleError, MissingActionError, UnresolvedTargetError
from .rules import Rule, RuleSet
from .staleness import check_staleness

logger = logging.getLogger(__name__)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class Pipeline:
    """Incremental build executor over an ordered rule set."""

    def __init__(
        self,
        rules: RuleSet | Sequence[Rule],
        logger: logging.Logger | int | str | None = None,
        fs: LocalFileSystem | None = None,
        concurrent: bool = True,
    ):
        """Initialize pipeline.

        Args:
            rules: Rules, tried in order
            logger: Logger, a minimum level for a console logger, or None
                for the package logger
            fs: Filesystem targets are resolved against (default: cwd)
            concurrent: Resolve sibling dependencies concurrently
        """
        self.rules = rules if isinstance(rules, RuleSet) else RuleSet(rules)
        if logger is None:
            logger = logging.getLogger(__name__)
        elif not isinstance(logger, logging.Logger):
            logger = console_logger(logger)
        self.logger: logging.Logger = logger
        self.fs = fs or LocalFileSystem()
        self.concurrent = concurrent

    async def exec(self, target: str, name: str | None = None) -> Entry:
        """Resolve a target to an entry.

        Raises:
            UnresolvedTargetError: No rule matches and no file exists
            InvalidRuleError: A matched rule produced no dependency sequence
            MissingActionError: The target is stale and its rule has no action
            DependencyCycleError: The target depends on itself
        """
        session = _BuildSession(self)
        try:
            return await session.resolve(target, name, ())
        finally:
            session.close()

    async def exec_many(self, targets: Iterable[str]) -> list[Entry]:
        """Resolve several targets in one session, in input order."""
        session = _BuildSession(self)
        try:
            return list(await asyncio.gather(*(session.resolve(t, None, ()) for t in targets)))
        finally:
            session.close()


class _BuildSession:
    """State of one top-level build.

    Tracks the in-flight resolution of every target and the dependency
    edges seen so far. An edge that closes a loop raises before anything
    awaits it, so shared resolutions never wait on each other.
    """

    def __init__(self, pipeline: Pipeline):
        self.pipeline = pipeline
        self.logger = pipeline.logger
        self.fs = pipeline.fs
        self._tasks: dict[str, asyncio.Task] = {}
        self._edges: dict[str, set[str]] = defaultdict(set)

    def close(self) -> None:
        for task in self._tasks.values():
            if not task.done():
                task.cancel()

    async def resolve(self, target: str, name: str | None, chain: tuple[str, ...]) -> Entry:
        if chain:
            self._add_edge(chain[-1], target)
        task = self._tasks.get(target)
        if task is None:
            task = asyncio.ensure_future(self._build(target, chain + (target,)))
            self._tasks[target] = task
        else:
            trace(self.logger, "Reusing resolution of %s", target)
        entry = await asyncio.shield(task)
        return entry.renamed(name) if name else entry

    def _add_edge(self, parent: str, target: str) -> None:
        path = self._find_path(target, parent)
        if path is not None:
            raise DependencyCycleError(target, (parent,) + path)
        self._edges[parent].add(target)

    def _find_path(self, start: str, goal: str) -> tuple[str, ...] | None:
        """Path of known edges from start to goal, if any."""
        stack = [(start, (start,))]
        seen = {start}
        while stack:
            node, path = stack.pop()
            if node == goal:
                return path
            for child in self._edges.get(node, ()):
                if child not in seen:
                    seen.add(child)
                    stack.append((child, path + (child,)))
        return None

    async def _build(self, target: str, chain: tuple[str, ...]) -> Entry:
        self.logger.debug("Processing %s...", target)
        started = time.perf_counter()

        probe = asyncio.ensure_future(self.fs.stat(target))
        try:
            found = self.pipeline.rules.find(target)
            if found is None:
                entry = self._leaf(target, await probe)
            else:
                rule, match = found
                entry = await self._build_rule(target, rule, match, probe, chain)
        finally:
            if not probe.done():
                probe.cancel()

        elapsed_ms = (time.perf_counter() - started) * 1000
        self.logger.info("Done processing %s in %.1f ms", target, elapsed_ms)
        return entry

    def _leaf(self, target: str, stat: FileStat | None) -> Entry:
        if stat is None:
            raise UnresolvedTargetError(target)
        trace(self.logger, "No rule for %s, using existing file", target)
        return FileEntry(target, stat.path, self.fs, original_path=target, mtime=stat.mtime)

    async def _build_rule(
        self,
        target: str,
        rule: Rule,
        match: re.Match,
        probe: asyncio.Future,
        chain: tuple[str, ...],
    ) -> Entry:
        trace(self.logger, "Found rule for %s: %s", target, rule.pattern.pattern)

        sequence = rule.dependencies_for(target, match)
        if sequence is None:
            raise InvalidRuleError(target, rule.pattern.pattern)
        dependencies: list[NamedDependency] = list(sequence)
        trace(self.logger, "%s depends on: %s", target, ",".join(d.value for d in dependencies))

        entries = await self._resolve_all(dependencies, chain)
        context = await Context.compose(
            target,
            zip((d.name for d in dependencies), entries),
            fs=self.fs,
        )
        for decorator in rule.decorators:
            context = await _maybe_await(decorator(context))

        stat: FileStat | None = await probe
        staleness = check_staleness(
            stat.mtime if stat else None,
            len(dependencies),
            context.mtime,
        )
        if not staleness.is_stale:
            trace(self.logger, "%s is up to date (%s), skipping.", target, staleness.details)
            return FileEntry(target, stat.path, self.fs, original_path=target, mtime=stat.mtime)

        self.logger.debug("Building %s: %s", target, staleness.details)
        if rule.action is None:
            raise MissingActionError(target)
        result = await _maybe_await(rule.action(context))
        return to_entry(target, result)

    async def _resolve_all(self, dependencies: list[NamedDependency], chain: tuple[str, ...]) -> list[Entry]:
        if not dependencies:
            return []
        if self.pipeline.concurrent:
            return list(await asyncio.gather(*(self.resolve(d.value, d.name, chain) for d in dependencies)))
        entries = []
        for dependency in dependencies:
            entries.append(await self.resolve(dependency.value, dependency.name, chain))
        return entries
