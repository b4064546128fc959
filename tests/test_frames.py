from datetime import date
from decimal import Decimal

from fintrack.aggregation import monthly_series
from fintrack.domain import Account, ExpenseCategory, Transaction
from fintrack.frames import TRANSACTION_COLUMNS, export_transactions_csv, rows_frame, transactions_frame

ACCOUNTS = (Account("a1", "Checking", "checking", Decimal(0)),)
CATEGORIES = (ExpenseCategory("c1", "Food", "#10B981"),)
TRANS = (
    Transaction("t1", "expense", Decimal("12.30"), "Lunch", date(2025, 10, 1), "a1", "c1"),
    Transaction("t2", "income", Decimal(100), "Pay", date(2025, 10, 5), "a1"),
    Transaction("t3", "expense", Decimal(5), "Old", date(2025, 9, 1), "gone", "deleted"),
)


def test_rows_frame_converts_decimals():
    df = rows_frame(monthly_series(TRANS, 2, today=date(2025, 10, 19)))
    assert list(df.columns) == ["month", "income", "expenses", "balance"]
    assert df["income"].tolist() == [0.0, 100.0]
    assert df["expenses"].dtype == float


def test_rows_frame_empty():
    df = rows_frame([], columns=["name", "value"])
    assert df.empty
    assert list(df.columns) == ["name", "value"]


def test_transactions_frame_joins_names_and_sorts_newest_first():
    df = transactions_frame(TRANS, ACCOUNTS, CATEGORIES)

    assert list(df.columns) == TRANSACTION_COLUMNS
    assert df["description"].tolist() == ["Pay", "Lunch", "Old"]
    assert df.loc[1, "category"] == "Food"
    assert df.loc[2, "account"] == "gone"
    assert df.loc[2, "category"] is None


def test_export_transactions_csv():
    csv = export_transactions_csv(TRANS[:1], ACCOUNTS, CATEGORIES)
    lines = csv.strip().splitlines()
    assert lines[0] == "date,type,amount,description,account,category"
    assert lines[1] == "2025-10-01,expense,12.3,Lunch,Checking,Food"


def test_export_without_transactions():
    assert export_transactions_csv(()).strip() == ",".join(TRANSACTION_COLUMNS)
