"""Tests for the command-line interface."""

import json
import tempfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from cin7_hubspot_sync.cli.main import main
from cin7_hubspot_sync.errors import ConfigError, HubSpotError

SUMMARY = {"ok": True, "cin7Count": 2, "errorsCount": 0}


class TestSyncCommand:
    """Tests for the sync subcommand."""

    def test_prints_summary(self, capsys) -> None:
        with patch("cin7_hubspot_sync.sync.run_from_env", return_value=(True, SUMMARY)) as mock_run:
            main(["sync"])

        assert json.loads(capsys.readouterr().out) == SUMMARY
        mock_run.assert_called_once_with()

    def test_overrides(self) -> None:
        with patch("cin7_hubspot_sync.sync.run_from_env", return_value=(True, SUMMARY)) as mock_run:
            main(["sync", "--since", "2026-01-21T00:00:00", "--mode", "search"])

        mock_run.assert_called_once_with(force_since="2026-01-21T00:00:00Z", upsert_mode="search")

    def test_invalid_since(self) -> None:
        with patch("cin7_hubspot_sync.sync.run_from_env") as mock_run:
            with pytest.raises(SystemExit, match="Invalid --since"):
                main(["sync", "--since", "yesterday"])
        mock_run.assert_not_called()

    def test_fatal_error_exits_1(self, capsys) -> None:
        failed = {"ok": False, "error": "Cin7 error 401: Unauthorized"}
        with patch("cin7_hubspot_sync.sync.run_from_env", return_value=(False, failed)):
            with pytest.raises(SystemExit) as exc:
                main(["sync"])

        assert exc.value.code == 1
        assert json.loads(capsys.readouterr().out) == failed

    def test_output_file(self, capsys) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            out = Path(tmp) / "summary.json"
            with patch("cin7_hubspot_sync.sync.run_from_env", return_value=(True, SUMMARY)):
                main(["sync", "--output", str(out)])

            assert json.loads(out.read_text()) == SUMMARY
        assert "Wrote sync summary" in capsys.readouterr().out


class TestServeCommand:
    """Tests for the serve subcommand."""

    def test_runs_uvicorn(self) -> None:
        with patch("uvicorn.run") as mock_run:
            main(["serve", "--port", "9000"])
        mock_run.assert_called_once_with(
            "cin7_hubspot_sync.api.app:app", host="127.0.0.1", port=9000
        )


class TestPropertiesCommand:
    """Tests for the properties subcommand."""

    def test_lists_sorted_names(self, capsys) -> None:
        hubspot = MagicMock()
        hubspot.get_property_names.return_value = {"hs_total_price", "cin7_order_id"}
        with patch("cin7_hubspot_sync.config.SyncConfig.from_env"), patch(
            "cin7_hubspot_sync.connectors.HubSpotClient.from_config", return_value=hubspot
        ):
            main(["properties"])

        assert capsys.readouterr().out.splitlines() == ["cin7_order_id", "hs_total_price"]
        hubspot.close.assert_called_once_with()

    def test_client_closed_on_error(self, capsys) -> None:
        hubspot = MagicMock()
        hubspot.get_property_names.side_effect = HubSpotError("HubSpot error 401: denied", 401)
        with patch("cin7_hubspot_sync.config.SyncConfig.from_env"), patch(
            "cin7_hubspot_sync.connectors.HubSpotClient.from_config", return_value=hubspot
        ):
            with pytest.raises(SystemExit) as exc:
                main(["properties"])

        assert exc.value.code == 1
        hubspot.close.assert_called_once_with()
        assert "HubSpot error 401" in capsys.readouterr().err

    def test_config_error_exits_1(self, capsys) -> None:
        with patch(
            "cin7_hubspot_sync.config.SyncConfig.from_env",
            side_effect=ConfigError("Missing env var: CIN7_KEY"),
        ):
            with pytest.raises(SystemExit) as exc:
                main(["properties"])

        assert exc.value.code == 1
        assert "Missing env var: CIN7_KEY" in capsys.readouterr().err


class TestArgs:
    """Tests for argument parsing."""

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            main([])

    def test_unknown_mode_rejected(self) -> None:
        with pytest.raises(SystemExit):
            main(["sync", "--mode", "merge"])
