"""Tests for trial balance and chart commands."""

import json

import pytest

from ctengine.cli.main import cli


def run(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])


@pytest.fixture
def trading_journals(write_json):
    return write_json(
        "journals.json",
        [
            {
                "id": "S1",
                "date": "2024-03-31",
                "reference": "SALES",
                "lines": [{"accountCode": "1200", "debit": 100000}, {"accountCode": "4000", "credit": 100000}],
            },
            {
                "id": "P1",
                "date": "2024-03-31",
                "reference": "PURCHASES",
                "lines": [{"accountCode": "5000", "debit": 20000}, {"accountCode": "1200", "credit": 20000}],
            },
            {
                "id": "D1",
                "date": "2024-03-31",
                "reference": "DEPN",
                "lines": [{"accountCode": "6600", "debit": 5000}, {"accountCode": "1000", "credit": 5000}],
            },
        ],
    )


def test_show_empty_trial_balance(cli_runner, temp_db):
    result = run(cli_runner, temp_db, "trial-balance", "show", "acme", "2024")

    assert result.exit_code == 0
    assert "No trial balance entries" in result.output


def test_show_trial_balance(cli_runner, temp_db, trading_journals):
    run(cli_runner, temp_db, "journal", "merge", "acme", "2024", "--file", trading_journals)

    result = run(cli_runner, temp_db, "trial-balance", "show", "acme", "2024", "--detail")

    assert result.exit_code == 0
    assert "Sales Revenue" in result.output
    assert "100,000.00" in result.output
    assert "S1" in result.output
    assert "Trial balance is balanced." in result.output


def test_show_trial_balance_json(cli_runner, temp_db, trading_journals):
    run(cli_runner, temp_db, "journal", "merge", "acme", "2024", "--file", trading_journals)

    result = run(cli_runner, temp_db, "trial-balance", "show", "acme", "2024", "--json", "--detail")

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["totalDebits"] == payload["totalCredits"] == 125000.0
    bank = payload["entries"][0]
    assert bank["accountCode"] == "1200"
    assert [c["entryId"] for c in bank["breakdown"]] == ["S1", "P1"]


def test_import_extraction(cli_runner, temp_db, write_json):
    """Test AI totals land as single-sided rows and show the imbalance."""
    path = write_json(
        "totals.json",
        {"turnover": 50000, "costOfSales": 12000.5, "professionalFees": 800, "processedDocuments": 31},
    )

    result = run(cli_runner, temp_db, "trial-balance", "import-extraction", "acme", "2024", "B1", "--file", path)

    assert result.exit_code == 0
    assert "Imported extraction batch 'B1'" in result.output
    assert "OUT OF BALANCE by 37,199.50" in result.output
    ledger = temp_db.get_ledger("acme", "2024")
    assert ledger.get("5000").document_ref == "AI processed purchase invoices"


def test_import_extraction_twice(cli_runner, temp_db, write_json):
    path = write_json("totals.json", {"turnover": 500})
    run(cli_runner, temp_db, "trial-balance", "import-extraction", "acme", "2024", "B1", "--file", path)

    result = run(cli_runner, temp_db, "trial-balance", "import-extraction", "acme", "2024", "B1", "--file", path)

    assert result.exit_code == 0
    assert "already imported, skipped" in result.output
    assert temp_db.get_ledger("acme", "2024").get("4000").credit == 500


def test_import_extraction_rejects_negative(cli_runner, temp_db, write_json):
    path = write_json("totals.json", {"turnover": -1})

    result = run(cli_runner, temp_db, "trial-balance", "import-extraction", "acme", "2024", "B1", "--file", path)

    assert result.exit_code == 1
    assert "cannot be negative" in result.output


def test_statements(cli_runner, temp_db, trading_journals):
    run(cli_runner, temp_db, "journal", "merge", "acme", "2024", "--file", trading_journals)

    result = run(cli_runner, temp_db, "trial-balance", "statements", "acme", "2024", "--json")

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["profitAndLoss"]["grossProfit"] == 80000.0
    assert payload["profitAndLoss"]["netProfit"] == 75000.0
    assert payload["balanceSheet"]["netAssets"] == 75000.0


def test_statements_text(cli_runner, temp_db, trading_journals):
    run(cli_runner, temp_db, "journal", "merge", "acme", "2024", "--file", trading_journals)

    result = run(cli_runner, temp_db, "trial-balance", "statements", "acme", "2024")

    assert result.exit_code == 0
    assert "Net profit" in result.output
    assert "75,000.00" in result.output


def test_statements_refuse_unbalanced(cli_runner, temp_db, write_json):
    path = write_json("totals.json", {"turnover": 500})
    run(cli_runner, temp_db, "trial-balance", "import-extraction", "acme", "2024", "B1", "--file", path)

    result = run(cli_runner, temp_db, "trial-balance", "statements", "acme", "2024")

    assert result.exit_code == 1
    assert "out of balance by 500.00" in result.output


def test_trial_balance_tax(cli_runner, temp_db, trading_journals):
    run(cli_runner, temp_db, "journal", "merge", "acme", "2024", "--file", trading_journals)

    result = run(cli_runner, temp_db, "trial-balance", "tax", "acme", "2024")

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["chargeableProfits"] == 80000.0
    assert payload["corporationTaxDue"] == 17450.0


def test_trial_balance_tax_with_options(cli_runner, temp_db, trading_journals):
    run(cli_runner, temp_db, "journal", "merge", "acme", "2024", "--file", trading_journals)

    result = run(
        cli_runner,
        temp_db,
        "trial-balance",
        "tax",
        "acme",
        "2024",
        "--no-depreciation-add-back",
        "--associated-companies",
        "1",
    )

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["chargeableProfits"] == 75000.0
    assert payload["corporationTaxRate"] == 0.25
    assert payload["breakdown"]["taxCalculation"]["marginalReliefApplied"] is True


def test_list_trial_balances(cli_runner, temp_db, trading_journals):
    run(cli_runner, temp_db, "journal", "merge", "acme", "2024", "--file", trading_journals)

    result = run(cli_runner, temp_db, "trial-balance", "list")

    assert result.exit_code == 0
    assert "acme / 2024" in result.output


def test_chart_list(cli_runner, temp_db):
    result = run(cli_runner, temp_db, "chart", "list")

    assert result.exit_code == 0
    assert "4000" in result.output
    assert "Suspense" in result.output


def test_chart_classify(cli_runner, temp_db):
    result = run(cli_runner, temp_db, "chart", "classify", "6600")

    assert result.exit_code == 0
    assert "6600: Depreciation (Expense)" in result.output


def test_chart_classify_unknown(cli_runner, temp_db):
    result = run(cli_runner, temp_db, "chart", "classify", "7100")

    assert result.exit_code == 1
    assert "not in the chart of accounts" in result.output
