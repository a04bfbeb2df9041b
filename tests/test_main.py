"""Tests for the command line entry point."""

from pathlib import Path

import pytest

from shellbeats import main as entry
from shellbeats.core.config import Config, LibraryConfig


class TestParser:
    """Tests for command line arguments."""

    def test_defaults(self) -> None:
        """No arguments means default config and level."""
        args = entry.build_parser().parse_args([])
        assert args.config is None
        assert args.log_level is None

    def test_options(self) -> None:
        """Config path and log level are parsed; level is case-insensitive."""
        args = entry.build_parser().parse_args(["--config", "/x/c.toml", "--log-level", "debug"])
        assert args.config == Path("/x/c.toml")
        assert args.log_level == "DEBUG"

    def test_bad_level_rejected(self) -> None:
        """Unknown log levels exit with a usage error."""
        with pytest.raises(SystemExit):
            entry.build_parser().parse_args(["--log-level", "loud"])


class TestRun:
    """Tests for startup checks."""

    def test_missing_mpv(self, monkeypatch) -> None:
        """A missing mpv binary is reported."""
        monkeypatch.setattr(entry.shutil, "which", lambda name: None)
        assert entry.missing_dependencies(Config()) == ["mpv"]

    def test_mpv_present(self, monkeypatch) -> None:
        """A runnable mpv passes the check."""
        monkeypatch.setattr(entry.shutil, "which", lambda name: "/usr/bin/mpv")
        monkeypatch.setattr(entry, "check_mpv_available", lambda binary: True)
        assert entry.missing_dependencies(Config()) == []

    def test_run_exits_when_mpv_missing(self, monkeypatch, capsys) -> None:
        """Startup stops with exit code 1 before touching the terminal."""
        monkeypatch.setattr(entry, "missing_dependencies", lambda config: ["mpv"])
        assert entry.run(Config()) == 1
        assert "Missing dependencies: mpv" in capsys.readouterr().err

    def test_run_exits_when_library_cannot_be_created(
        self, tmp_path: Path, monkeypatch, capsys
    ) -> None:
        """An unusable library directory is fatal."""
        blocker = tmp_path / "file"
        blocker.write_text("x")
        config = Config(library=LibraryConfig(root_dir=str(blocker / "lib")))
        monkeypatch.setattr(entry, "missing_dependencies", lambda config: [])
        assert entry.run(config) == 1
        assert "Failed to initialize library directory" in capsys.readouterr().err
