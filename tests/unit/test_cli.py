"""Tests for the healthwait CLI."""

import json
from unittest.mock import MagicMock, patch

import pytest

from healthwait.__main__ import main
from healthwait.config import DisplayConfig


@pytest.fixture
def mock_watcher():
    with patch("healthwait.cli.HealthWatcher") as mock_watcher_class:
        watcher = MagicMock()
        watcher.run.return_value = 0
        mock_watcher_class.return_value = watcher
        yield watcher


@pytest.fixture
def mock_source():
    with patch("healthwait.cli.EventSource") as mock_source_class:
        yield mock_source_class


class TestCLI:
    """Test the click command."""

    def test_help_exits_one(self, capsys, mock_watcher):
        exit_code = main(["--help"])

        captured = capsys.readouterr()
        assert exit_code == 1
        assert "Usage:" in captured.out
        assert "--timeout" in captured.out
        mock_watcher.run.assert_not_called()

    def test_short_help_flag(self, capsys, mock_watcher):
        assert main(["-h"]) == 1
        assert "Usage:" in capsys.readouterr().out

    def test_missing_container(self, capsys, mock_watcher):
        exit_code = main([])

        assert exit_code == 1
        assert "Missing argument" in capsys.readouterr().err
        mock_watcher.run.assert_not_called()

    def test_defaults(self, mock_watcher, mock_source):
        assert main(["web1"]) == 0

        mock_watcher.run.assert_called_once_with(
            "web1", since=None, timeout=10, display=DisplayConfig()
        )
        assert mock_source.call_args.kwargs["runtime"] == "docker"

    def test_options_forwarded(self, mock_watcher, mock_source):
        mock_watcher.run.return_value = 1

        exit_code = main(["web1", "-q", "-m", "-s", "1700000000", "-t", "5", "-r", "podman"])

        assert exit_code == 1
        mock_watcher.run.assert_called_once_with(
            "web1",
            since="1700000000",
            timeout="5",
            display=DisplayConfig(quiet=True, monochrome=True),
        )
        assert mock_source.call_args.kwargs["runtime"] == "podman"

    def test_config_file_defaults(self, tmp_home, mock_watcher, mock_source):
        (tmp_home / ".healthwait.json").write_text(
            json.dumps({"timeout": 30, "runtime": "podman", "monochrome": True})
        )

        main(["web1"])

        kwargs = mock_watcher.run.call_args.kwargs
        assert kwargs["timeout"] == 30
        assert kwargs["display"] == DisplayConfig(monochrome=True)
        assert mock_source.call_args.kwargs["runtime"] == "podman"

    def test_config_log_level(self, tmp_home, mock_watcher, mock_source):
        (tmp_home / ".healthwait.json").write_text(json.dumps({"log_level": "ERROR"}))

        with patch("healthwait.cli.setup_logging") as mock_setup:
            main(["web1"])

        mock_setup.assert_called_once_with("ERROR")

    def test_options_override_config(self, tmp_home, mock_watcher, mock_source):
        (tmp_home / ".healthwait.json").write_text(json.dumps({"timeout": 30}))

        main(["web1", "--timeout", "0"])

        assert mock_watcher.run.call_args.kwargs["timeout"] == "0"

    def test_invalid_config(self, tmp_home, capsys, mock_watcher):
        (tmp_home / ".healthwait.json").write_text("{broken")

        exit_code = main(["web1"])

        assert exit_code == 1
        assert "Error: Failed to load config" in capsys.readouterr().err
        mock_watcher.run.assert_not_called()

    def test_invalid_timeout_prints_usage(self, capsys, mock_source):
        exit_code = main(["web1", "--timeout", "abc"])

        captured = capsys.readouterr()
        assert exit_code == 1
        assert "Usage:" in captured.err
        assert "Invalid timeout" in captured.err
        mock_source.return_value.open_channel.assert_not_called()

    def test_version(self, capsys):
        assert main(["--version"]) == 0
        assert "healthwait" in capsys.readouterr().out
