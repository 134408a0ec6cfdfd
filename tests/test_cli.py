"""Unit tests for CLI interface."""

import json

import openpyxl
import pytest

from line_reconciler.cli.main import (
    TransactionLoadError,
    load_transaction_file,
    main,
    process_transaction,
)
from line_reconciler.config.profile_manager import reset_profile


@pytest.fixture(autouse=True)
def clean_profile(monkeypatch):
    monkeypatch.delenv("DEFAULT_GST_PERCENTAGE", raising=False)
    reset_profile()
    yield
    reset_profile()


@pytest.fixture
def transaction():
    return {
        "type": "sales",
        "company": {"_id": "c1", "gstin": "27AAPFU0939F1ZV"},
        "party": "cust1",
        "products": [{"product": "p1", "quantity": 3, "pricePerUnit": 100, "gstPercentage": 18}],
        "services": [{"service": "s1", "amount": 1000, "gstPercentage": 0}],
    }


@pytest.fixture
def transaction_file(tmp_path, transaction):
    p = tmp_path / "txn.json"
    p.write_text(json.dumps(transaction), encoding="utf-8")
    return p


def test_process_transaction_returns_totals(transaction):
    result = process_transaction(transaction)

    assert result["status"] == "OK"
    assert result["line_count"] == 2
    assert result["totals"] == {"subTotal": 1300.0, "taxAmount": 54.0, "invoiceTotal": 1354.0}
    assert result["payload"]["invoiceTotal"] == 1354.0
    assert result["error"] is None


def test_process_transaction_honours_edit_sources(transaction):
    transaction["products"][0]["lineTotal"] = 400
    transaction["editSources"] = {"0": "lineTotal"}

    result = process_transaction(transaction)

    assert result["totals"]["invoiceTotal"] == 1400.0
    assert result["payload"]["products"][0]["pricePerUnit"] == 112.99


def test_process_transaction_bad_edit_source(transaction):
    transaction["editSources"] = {"7": "amount"}

    result = process_transaction(transaction)

    assert result["status"] == "FAILED"
    assert "7" in result["error"]


def test_process_transaction_tax_override(transaction):
    result = process_transaction(transaction, tax_enabled=False)

    assert result["tax_enabled"] is False
    assert result["totals"]["invoiceTotal"] == 1300.0


def test_load_transaction_file_errors(tmp_path):
    with pytest.raises(TransactionLoadError):
        load_transaction_file(str(tmp_path / "missing.json"))

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(TransactionLoadError):
        load_transaction_file(str(broken))

    listing = tmp_path / "list.json"
    listing.write_text("[]", encoding="utf-8")
    with pytest.raises(TransactionLoadError):
        load_transaction_file(str(listing))


def test_main_writes_payload(transaction_file, tmp_path):
    output = tmp_path / "out.json"

    exit_code = main(["--input", str(transaction_file), "--output", str(output)])

    assert exit_code == 0
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["subTotal"] == 1300.0
    assert payload["party"] == "cust1"


def test_main_stdout(transaction_file, capsys):
    exit_code = main(["--input", str(transaction_file), "--no-tax"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["taxAmount"] == 0.0
    assert payload["invoiceTotal"] == 1300.0


def test_main_excel(transaction_file, tmp_path):
    excel = tmp_path / "out.xlsx"

    exit_code = main(["--input", str(transaction_file), "--output", str(tmp_path / "o.json"), "--excel", str(excel)])

    assert exit_code == 0
    wb = openpyxl.load_workbook(excel)
    assert wb["Lines"].max_row == 3


def test_main_missing_input(tmp_path):
    assert main(["--input", str(tmp_path / "missing.json")]) == 1


def test_main_unknown_profile_falls_back(transaction_file, tmp_path):
    exit_code = main([
        "--input", str(transaction_file),
        "--output", str(tmp_path / "o.json"),
        "--profile", "does-not-exist",
    ])

    assert exit_code == 0


def test_tax_flags_are_exclusive(transaction_file):
    with pytest.raises(SystemExit):
        main(["--input", str(transaction_file), "--tax-enabled", "--no-tax"])
