"""
Tests for the transactional-io command line.
"""

import io
import sys

import pytest

import cli
from tests.conftest import leftovers


@pytest.fixture
def stdin(monkeypatch):
    """Replace stdin with the given bytes."""
    def feed(data: bytes):
        monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data)))
    return feed


@pytest.fixture(autouse=True)
def run_in_tmp(tmp_path, monkeypatch):
    """Keep config.yaml lookups inside tmp_path."""
    monkeypatch.chdir(tmp_path)


class TestWriteCommand:
    """Test the write command."""

    def test_write_from_stdin(self, existing, stdin):
        stdin(b"<Settings/>")

        assert cli.main(["write", str(existing), "-m", "truncate"]) == 0
        assert existing.read_bytes() == b"<Settings/>"
        assert leftovers(existing) == []

    def test_write_from_input_file(self, existing, tmp_path):
        source = tmp_path / "input.bin"
        source.write_bytes(b"B")

        assert cli.main(["write", str(existing), "-m", "append", "-i", str(source)]) == 0
        assert existing.read_bytes() == b"AB"

    def test_default_mode_creates(self, target, stdin):
        stdin(b"Hello")

        assert cli.main(["write", str(target)]) == 0
        assert target.read_bytes() == b"Hello"

    def test_dry_run_leaves_target(self, existing, stdin, capsys):
        stdin(b"B")

        assert cli.main(["write", str(existing), "-m", "truncate", "--dry-run"]) == 0
        assert existing.read_bytes() == b"A"
        assert "dry run" in capsys.readouterr().out

    def test_missing_target_with_open_mode(self, target, stdin, capsys):
        stdin(b"B")

        assert cli.main(["write", str(target), "-m", "open"]) == 1
        assert "does not exist" in capsys.readouterr().err
        assert not target.exists()

    def test_small_chunks_copy_everything(self, existing, tmp_path, stdin):
        (tmp_path / "config.yaml").write_text("defaults:\n  chunk_size: 1\n")
        stdin(b"NEWDATA")

        assert cli.main(["write", str(existing), "-m", "truncate"]) == 0
        assert existing.read_bytes() == b"NEWDATA"

    def test_zero_chunk_size_leaves_target(self, existing, tmp_path, stdin, capsys):
        """Test a chunk size that would read nothing is rejected before writing."""
        (tmp_path / "config.yaml").write_text("defaults:\n  chunk_size: 0\n")
        stdin(b"NEWDATA")

        assert cli.main(["write", str(existing), "-m", "truncate"]) == 1
        assert "chunk_size" in capsys.readouterr().err
        assert existing.read_bytes() == b"A"
        assert leftovers(existing) == ["config.yaml"]

    @pytest.mark.parametrize("content", ["defaults: [unclosed\n", "defaults: null\n"])
    def test_broken_config_is_reported(self, existing, tmp_path, stdin, capsys, content):
        (tmp_path / "config.yaml").write_text(content)
        stdin(b"B")

        assert cli.main(["write", str(existing)]) == 1
        assert capsys.readouterr().err.startswith("error: ")
        assert existing.read_bytes() == b"A"

    def test_unknown_mode(self, target, capsys):
        assert cli.main(["write", str(target), "-m", "sideways"]) == 1
        assert "Unknown file mode" in capsys.readouterr().err

    def test_missing_input_file(self, target, tmp_path, capsys):
        assert cli.main(["write", str(target), "-i", str(tmp_path / "nope")]) == 1
        assert "cannot read input" in capsys.readouterr().err

    def test_mode_from_config(self, existing, tmp_path, stdin):
        (tmp_path / "config.yaml").write_text("defaults:\n  mode: append\n")
        stdin(b"B")

        assert cli.main(["write", str(existing)]) == 0
        assert existing.read_bytes() == b"AB"


class TestOtherCommands:
    """Test init, status and recover."""

    def test_init(self, tmp_path):
        assert cli.main(["init"]) == 0
        assert (tmp_path / "config.yaml").exists()

    def test_init_refuses_to_overwrite(self, tmp_path, capsys):
        (tmp_path / "config.yaml").write_text("keep: me\n")

        assert cli.main(["init"]) == 1
        assert (tmp_path / "config.yaml").read_text() == "keep: me\n"
        assert cli.main(["init", "--force"]) == 0

    def test_status_clean(self, existing, capsys):
        assert cli.main(["status", str(existing)]) == 0
        assert "clean" in capsys.readouterr().out

    def test_status_lists_artifacts(self, target, capsys):
        target.with_name("settings.xml.t1.original.tmp").write_bytes(b"A")

        assert cli.main(["status", str(target)]) == 0
        out = capsys.readouterr().out
        assert "backup  settings.xml.t1.original.tmp" in out
        assert "recover" in out

    def test_recover(self, target, capsys):
        target.with_name("settings.xml.t1.original.tmp").write_bytes(b"A")
        target.with_name("settings.xml.t2.tmp").write_bytes(b"partial")

        assert cli.main(["recover", str(target), "--clean"]) == 0
        assert target.read_bytes() == b"A"
        assert leftovers(target) == []
        assert "restored" in capsys.readouterr().out

    def test_no_command(self, capsys):
        assert cli.main([]) == 1

    def test_recover_with_broken_config(self, target, tmp_path, capsys):
        (tmp_path / "config.yaml").write_text("logging: [unclosed\n")

        assert cli.main(["recover", str(target)]) == 1
        assert "Invalid config file" in capsys.readouterr().err
