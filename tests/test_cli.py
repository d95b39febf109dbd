"""Tests for the command line interface."""

import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest

from escpos_receipt.__main__ import main
from escpos_receipt.models import TransportOutcome
from escpos_receipt.transport import PrinterMode


class TestAnalyze:
    def test_prints_one_row_per_char(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["analyze", "قهوة"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 4
        assert lines[0].endswith("Mapped: 0xe2")


class TestTestPrint:
    def test_writes_sample(self, device_node: Path) -> None:
        assert main(["test-print", "--device", str(device_node)]) == 0
        assert b"TEST PRINT" in device_node.read_bytes()

    def test_no_device(self, tmp_path: Path) -> None:
        assert main(["test-print", "--device", str(tmp_path / "missing")]) == 1


class TestStatus:
    def test_reports_device(
        self, device_node: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("PRINTER_DEVICE_PATHS", str(device_node))
        with patch("escpos_receipt.__main__.find_usb_printers", return_value=[]):
            assert main(["status"]) == 0
        report = json.loads(capsys.readouterr().out)
        assert report["device_path"] == str(device_node)


class TestSend:
    def test_dispatches_file(self, tmp_path: Path, coffee_payload: dict[str, Any]) -> None:
        receipt_file = tmp_path / "receipt.json"
        receipt_file.write_text(json.dumps(coffee_payload), encoding="utf-8")
        with patch(
            "escpos_receipt.__main__.PrintTransportDispatcher.try_print",
            new=AsyncMock(return_value=TransportOutcome.succeeded("agent")),
        ) as mock_print:
            assert main(["send", str(receipt_file), "--mode", "local"]) == 0
        assert mock_print.await_args.args[0].order_id == "A-1001"

    def test_failed_outcome(self, tmp_path: Path, coffee_payload: dict[str, Any]) -> None:
        receipt_file = tmp_path / "receipt.json"
        receipt_file.write_text(json.dumps(coffee_payload), encoding="utf-8")
        outcome = TransportOutcome.failed("server", "503: busy")
        with patch(
            "escpos_receipt.__main__.PrintTransportDispatcher.try_print",
            new=AsyncMock(return_value=outcome),
        ):
            assert main(["send", str(receipt_file)]) == 1

    def test_invalid_receipt(self, tmp_path: Path) -> None:
        receipt_file = tmp_path / "receipt.json"
        receipt_file.write_text(json.dumps({"items": "Coffee"}), encoding="utf-8")
        assert main(["send", str(receipt_file)]) == 2

    def test_missing_file(self, tmp_path: Path) -> None:
        assert main(["send", str(tmp_path / "nope.json")]) == 2

    @pytest.mark.parametrize("env_value", ["LOCAL", "local", " Local "])
    def test_mode_from_environment(
        self,
        tmp_path: Path,
        coffee_payload: dict[str, Any],
        monkeypatch: pytest.MonkeyPatch,
        env_value: str,
    ) -> None:
        receipt_file = tmp_path / "receipt.json"
        receipt_file.write_text(json.dumps(coffee_payload), encoding="utf-8")
        monkeypatch.setenv("PRINTER_MODE", env_value)
        with patch("escpos_receipt.__main__.PrintTransportDispatcher") as mock_dispatcher:
            mock_dispatcher.return_value.try_print = AsyncMock(
                return_value=TransportOutcome.succeeded("agent")
            )
            assert main(["send", str(receipt_file)]) == 0
        assert mock_dispatcher.call_args.kwargs["mode"] is PrinterMode.LOCAL

    def test_mode_flag_is_case_insensitive(
        self, tmp_path: Path, coffee_payload: dict[str, Any]
    ) -> None:
        receipt_file = tmp_path / "receipt.json"
        receipt_file.write_text(json.dumps(coffee_payload), encoding="utf-8")
        with patch("escpos_receipt.__main__.PrintTransportDispatcher") as mock_dispatcher:
            mock_dispatcher.return_value.try_print = AsyncMock(
                return_value=TransportOutcome.succeeded("server")
            )
            assert main(["send", str(receipt_file), "--mode", "SERVER"]) == 0
        assert mock_dispatcher.call_args.kwargs["mode"] is PrinterMode.SERVER

    def test_unknown_mode_from_environment(
        self, tmp_path: Path, coffee_payload: dict[str, Any], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        receipt_file = tmp_path / "receipt.json"
        receipt_file.write_text(json.dumps(coffee_payload), encoding="utf-8")
        monkeypatch.setenv("PRINTER_MODE", "BLUETOOTH")
        with patch("escpos_receipt.__main__.PrintTransportDispatcher") as mock_dispatcher:
            assert main(["send", str(receipt_file)]) == 2
        mock_dispatcher.assert_not_called()
