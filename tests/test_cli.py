"""Tests for the command-line interface."""

from unittest.mock import patch

import pytest

from bubblegraph.auth import credential_hash
from bubblegraph.cli import main


class TestCli:
    def test_hash_prints_digest(self, capsys):
        assert main(["hash", "admin", "s3cret"]) == 0
        assert capsys.readouterr().out.strip() == credential_hash("admin", "s3cret")

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 2
        assert "serve" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "0.1.0" in capsys.readouterr().out

    def test_serve_runs_uvicorn(self):
        with (
            patch("bubblegraph.cli.uvicorn.run") as run,
            patch("bubblegraph.cli.configure_logging") as configure,
        ):
            assert main(["serve", "--port", "9001"]) == 0

        configure.assert_called_once()
        run.assert_called_once_with(
            "bubblegraph.server.app:app", host="127.0.0.1", port=9001, reload=False
        )
