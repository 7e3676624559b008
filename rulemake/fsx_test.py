"""Tests for the async filesystem facade."""

import os
import tempfile
from pathlib import Path

import pytest

from .fsx import FileStat, LocalFileSystem


class TestResolve:
    """Tests for path resolution."""

    def test_relative_path_joined_to_root(self):
        fs = LocalFileSystem("/srv/site")
        assert fs.resolve("css/app.css") == Path("/srv/site/css/app.css")

    def test_absolute_path_unchanged(self):
        fs = LocalFileSystem("/srv/site")
        assert fs.resolve("/etc/hosts") == Path("/etc/hosts")

    def test_expand_tilde(self):
        fs = LocalFileSystem("/srv/site")
        assert fs.resolve("~/notes.txt") == Path.home() / "notes.txt"


class TestStat:
    """Tests for existence probes."""

    @pytest.mark.asyncio
    async def test_existing_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            Path(tmpdir, "a.txt").write_bytes(b"hello")
            os.utime(Path(tmpdir, "a.txt"), (1000, 1000))

            stat = await LocalFileSystem(tmpdir).stat("a.txt")
            assert isinstance(stat, FileStat)
            assert stat.mtime == 1000
            assert stat.size == 5
            assert not stat.is_directory

    @pytest.mark.asyncio
    async def test_missing_file_is_none(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            assert await LocalFileSystem(tmpdir).stat("missing.txt") is None

    @pytest.mark.asyncio
    async def test_path_below_a_file_is_none(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            Path(tmpdir, "a.txt").write_text("x")
            assert await LocalFileSystem(tmpdir).stat("a.txt/b.txt") is None

    @pytest.mark.asyncio
    async def test_directory(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            Path(tmpdir, "sub").mkdir()
            stat = await LocalFileSystem(tmpdir).stat("sub")
            assert stat is not None
            assert stat.is_directory


class TestReadWrite:
    """Tests for whole-file reads and writes."""

    @pytest.mark.asyncio
    async def test_write_creates_parents(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            fs = LocalFileSystem(tmpdir)
            await fs.write_bytes("out/deep/file.bin", b"\x00\x01")
            assert Path(tmpdir, "out", "deep", "file.bin").read_bytes() == b"\x00\x01"
            assert await fs.read_bytes("out/deep/file.bin") == b"\x00\x01"

    @pytest.mark.asyncio
    async def test_read_missing_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(FileNotFoundError):
                await LocalFileSystem(tmpdir).read_bytes("missing.txt")

    @pytest.mark.asyncio
    async def test_ensure_directory_is_idempotent(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            fs = LocalFileSystem(tmpdir)
            await fs.ensure_directory("a/b/c")
            await fs.ensure_directory("a/b/c")
            assert Path(tmpdir, "a", "b", "c").is_dir()
