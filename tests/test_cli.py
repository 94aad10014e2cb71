"""Tests for timedivision.cli — main() argument parsing and dispatch."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from timedivision.cli import main
from timedivision.cycle import CycleResult
from timedivision.models import ParticipantTotal


class TestCli:
    @patch("timedivision.cli.watch")
    @patch("timedivision.cli.run_cycle")
    @patch("timedivision.cli.load_config")
    def test_once_mode_prints_rows(self, mock_load, mock_run, mock_watch, capsys):
        mock_load.return_value = MagicMock()
        mock_run.return_value = CycleResult(
            aggregate={"Alice": ParticipantTotal(90), "Bob": ParticipantTotal(60)},
            panel=MagicMock(),
            anchor=MagicMock(),
            written=True,
        )
        mock_load.return_value.target_path = Path("/agenda/agenda.html")
        main(["--once"])
        mock_run.assert_called_once()
        assert mock_run.call_args.kwargs["dry_run"] is False
        mock_watch.assert_not_called()
        assert capsys.readouterr().out.splitlines() == [
            "Alice: 1h 30min",
            "Bob: 1h 0min",
            "Panel written to /agenda/agenda.html",
        ]

    @patch("timedivision.cli.run_cycle", return_value=None)
    @patch("timedivision.cli.load_config")
    def test_once_mode_no_planner(self, mock_load, mock_run, capsys):
        mock_load.return_value = MagicMock()
        main(["--once"])
        assert "not found" in capsys.readouterr().out

    @patch("timedivision.cli.run_cycle")
    @patch("timedivision.cli.load_config")
    def test_once_mode_nobody_assigned(self, mock_load, mock_run, capsys):
        mock_load.return_value = MagicMock()
        mock_run.return_value = CycleResult(aggregate={}, panel=MagicMock())
        main(["--once"])
        assert "No facilitators" in capsys.readouterr().out

    @patch("timedivision.cli.run_cycle")
    @patch("timedivision.cli.load_config")
    def test_once_mode_reports_missing_anchor(self, mock_load, mock_run, capsys):
        mock_load.return_value = MagicMock()
        mock_run.return_value = CycleResult(aggregate={"Alice": ParticipantTotal(5)}, panel=MagicMock())
        main(["--once"])
        assert capsys.readouterr().out.splitlines()[-1] == "Placement anchor not found; document not updated"

    @patch("timedivision.cli.run_cycle")
    @patch("timedivision.cli.load_config")
    def test_once_mode_reports_concurrent_edit(self, mock_load, mock_run, capsys):
        mock_load.return_value = MagicMock()
        mock_run.return_value = CycleResult(
            aggregate={"Alice": ParticipantTotal(5)}, panel=MagicMock(), anchor=MagicMock(), stale=True
        )
        main(["--once"])
        assert capsys.readouterr().out.splitlines()[-1] == "Document changed during update; not written"

    @patch("timedivision.cli.run_cycle")
    @patch("timedivision.cli.load_config")
    def test_once_mode_dry_run_reports_target(self, mock_load, mock_run, capsys):
        mock_load.return_value = MagicMock()
        mock_load.return_value.target_path = Path("/agenda/out.html")
        mock_run.return_value = CycleResult(
            aggregate={"Alice": ParticipantTotal(5)}, panel=MagicMock(), anchor=MagicMock()
        )
        main(["--once", "--dry-run"])
        assert capsys.readouterr().out.splitlines()[-1] == "[DRY RUN] Would write /agenda/out.html"

    @patch("timedivision.cli.watch")
    @patch("timedivision.cli.load_config")
    def test_daemon_mode(self, mock_load, mock_watch):
        mock_load.return_value = MagicMock()
        main([])
        mock_watch.assert_called_once_with(mock_load.return_value, dry_run=False)

    @patch("timedivision.cli.run_cycle", return_value=None)
    @patch("timedivision.cli.load_config")
    def test_verbose_sets_debug(self, mock_load, mock_run):
        mock_load.return_value = MagicMock()
        with patch("timedivision.cli.logging.basicConfig") as mock_bc:
            main(["--once", "--verbose"])
            mock_bc.assert_called_once()
            assert mock_bc.call_args.kwargs["level"] == logging.DEBUG

    @patch("timedivision.cli.run_cycle", return_value=None)
    @patch("timedivision.cli.load_config")
    def test_default_logging_info(self, mock_load, mock_run):
        mock_load.return_value = MagicMock()
        with patch("timedivision.cli.logging.basicConfig") as mock_bc:
            main(["--once"])
            assert mock_bc.call_args.kwargs["level"] == logging.INFO

    @patch("timedivision.cli.run_cycle", return_value=None)
    @patch("timedivision.cli.load_config")
    def test_dry_run_forwarded(self, mock_load, mock_run):
        mock_load.return_value = MagicMock()
        main(["--once", "--dry-run"])
        assert mock_run.call_args.kwargs["dry_run"] is True

    @patch("timedivision.cli.load_config")
    def test_config_path_forwarded(self, mock_load):
        mock_load.side_effect = FileNotFoundError("nope")
        with pytest.raises(SystemExit):
            main(["--config", "/custom/path.yaml", "--once"])
        mock_load.assert_called_once_with(Path("/custom/path.yaml"))

    @patch("timedivision.cli.load_config", side_effect=FileNotFoundError("not found"))
    def test_file_not_found_error(self, mock_load, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--once"])
        assert exc_info.value.code == 1
        assert "not found" in capsys.readouterr().err

    @patch("timedivision.cli.load_config", side_effect=ValueError("bad config"))
    def test_value_error(self, mock_load, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--once"])
        assert exc_info.value.code == 1
        assert "bad config" in capsys.readouterr().err

    def test_end_to_end_once(self, tmp_path, document_file, capsys):
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(f"document_path: {document_file}\n")
        main(["--config", str(cfg_file), "--once"])
        assert capsys.readouterr().out.splitlines() == [
            "Alice: 1h 30min",
            "Bob: 1h 0min",
            f"Panel written to {document_file}",
        ]
        assert 'id="time-division"' in document_file.read_text()


class TestMainModule:
    @patch("timedivision.cli.main")
    def test_dunder_main(self, mock_main):
        """__main__.py calls main() when executed."""
        import runpy
        runpy.run_module("timedivision", run_name="__main__", alter_sys=True)
        mock_main.assert_called_once()
