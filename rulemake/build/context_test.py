"""Tests for action contexts."""

from __future__ import annotations

import time
from dataclasses import FrozenInstanceError

import pytest

from ..fsx import LocalFileSystem
from .context import Context, compose_mtime, named, output_path, target_path
from .entries import FileEntry, TextEntry


class TestCompose:
    """Tests for building a context from resolved entries."""

    @pytest.mark.asyncio
    async def test_entries_keep_order_and_roles(self):
        a = TextEntry("a", "A")
        b = TextEntry("b", "B")
        context = await Context.compose("out", [(None, a), ("style", b)])

        assert context.target == "out"
        assert context.entries == (a, b)
        assert context["style"] is b
        assert context.get("missing") is None
        assert dict(context.named) == {"style": b}

    @pytest.mark.asyncio
    async def test_named_is_read_only(self):
        context = await Context.compose("out", [("a", TextEntry("a", "A"))])
        with pytest.raises(TypeError):
            context.named["b"] = TextEntry("b", "B")

    @pytest.mark.asyncio
    async def test_context_is_frozen(self):
        context = await Context.compose("out", [])
        with pytest.raises(FrozenInstanceError):
            context.path = "x"


class TestComposeMtime:
    """Tests for the composed freshness timestamp."""

    @pytest.mark.asyncio
    async def test_no_entries_is_now(self):
        before = time.time()
        mtime = await compose_mtime(())
        assert before <= mtime <= time.time()

    @pytest.mark.asyncio
    async def test_newest_file_wins(self, tmp_path):
        fs = LocalFileSystem(tmp_path)
        entries = (
            FileEntry("a", "a", fs, mtime=100.0),
            FileEntry("b", "b", fs, mtime=300.0),
            FileEntry("c", "c", fs, mtime=200.0),
        )
        assert await compose_mtime(entries) == 300.0

    @pytest.mark.asyncio
    async def test_computed_entry_counts_as_now(self, tmp_path):
        fs = LocalFileSystem(tmp_path)
        before = time.time()
        mtime = await compose_mtime((FileEntry("a", "a", fs, mtime=100.0), TextEntry("b", "")))
        assert mtime >= before


class TestDecorators:
    """Tests for built-in decorators."""

    @pytest.mark.asyncio
    async def test_target_path(self):
        context = target_path(await Context.compose("dist/app.js", []))
        assert context.path == "dist/app.js"
        assert context.name == "dist/app.js"

    @pytest.mark.asyncio
    async def test_target_path_keeps_name(self):
        context = target_path(named("bundle")(await Context.compose("dist/app.js", [])))
        assert context.name == "bundle"
        assert context.path == "dist/app.js"

    @pytest.mark.asyncio
    async def test_output_path(self):
        context = output_path("build/{target}")(await Context.compose("app.js", []))
        assert context.path == "build/app.js"
