"""
Tests for the command line interface.
"""
import json
from decimal import Decimal

import pytest
from typer.testing import CliRunner

from ..app import _load_aggregator, app
from .conftest import make_transaction

runner = CliRunner()


@pytest.fixture
def ledger_file(tmp_path, three_month_ledger):
    path = tmp_path / "transactions.json"
    path.write_text(json.dumps([t.model_dump(mode="json") for t in three_month_ledger]))
    return path


class TestStatementsCommand:

    def test_lists_statements(self, ledger_file):
        result = runner.invoke(app, ["statements", str(ledger_file)])
        assert result.exit_code == 0
        assert "Bank Statements" in result.output

    def test_no_transactions(self, tmp_path):
        path = tmp_path / "transactions.json"
        path.write_text("[]")
        result = runner.invoke(app, ["statements", str(path)])
        assert result.exit_code == 0
        assert "No transactions found" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["statements", str(tmp_path / "missing.json")])
        assert result.exit_code == 1


class TestTransactionsCommand:

    def test_month_statement(self, ledger_file):
        result = runner.invoke(app, ["transactions", str(ledger_file), "2024-02"])
        assert result.exit_code == 0
        assert "1,050.00" in result.output

    def test_overall_is_default(self, tmp_path):
        path = tmp_path / "transactions.json"
        row = make_transaction(1, "2024-01-05T10:00:00+00:00", "deposit", "25")
        path.write_text(json.dumps([row.model_dump(mode="json")]))
        result = runner.invoke(app, ["transactions", str(path)])
        assert result.exit_code == 0
        assert "1,025.00" in result.output

    def test_invalid_statement_id(self, ledger_file):
        result = runner.invoke(app, ["transactions", str(ledger_file), "2024-13"])
        assert result.exit_code == 1
        assert "Invalid statement id" in result.output


def test_parse_missing_pdf(tmp_path):
    result = runner.invoke(app, ["parse", str(tmp_path / "missing.pdf")])
    assert result.exit_code == 1
    assert "Error" in result.output


def test_parse_writes_page_marked_text(tmp_path, monkeypatch):
    class Page:
        width, height = 600, 800

        def extract_words(self, **kwargs):
            return [{"text": "Rent", "x0": 50, "top": 90, "bottom": 100},
                    {"text": "$900.00", "x0": 100, "top": 90, "bottom": 100}]

    class PDF:
        pages = [Page()]

        def close(self):
            pass

    monkeypatch.setattr("pdfplumber.open", lambda path: PDF())
    pdf_path = tmp_path / "statement.pdf"
    pdf_path.write_bytes(b"%PDF-1.4")
    out = tmp_path / "statement.txt"

    result = runner.invoke(app, ["parse", str(pdf_path), "--text", "--out", str(out)])
    assert result.exit_code == 0
    assert out.read_text() == "--- Page 1 ---\n\nRent $900.00"


class TestInitialBalanceOption:

    def test_kept_as_exact_decimal(self, ledger_file):
        aggregator = _load_aggregator(ledger_file, None, "1000.123456789012345678")
        assert aggregator.initial_balance == Decimal("1000.123456789012345678")

    def test_applied_to_balances(self, ledger_file):
        result = runner.invoke(app, ["transactions", str(ledger_file), "2024-01", "-b", "0.10"])
        assert result.exit_code == 0
        assert "150.10" in result.output

    def test_invalid_value(self, ledger_file):
        result = runner.invoke(app, ["statements", str(ledger_file), "--initial-balance", "lots"])
        assert result.exit_code == 1
        assert "invalid initial balance" in result.output
