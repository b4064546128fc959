from datetime import date
from decimal import Decimal

from fintrack import SEED_PATH
from fintrack.domain import Investment, Transaction
from fintrack.naming_conventions import Tables
from fintrack.transforms import load_seed, record_from_row, row_from_record, snapshot_from_rows


def test_record_from_row_parses_money_and_dates_and_drops_extra_columns():
    row = {
        "id": "t1", "user_id": "u1", "type": "expense", "amount": 12.5,
        "description": "Lunch", "date": "2025-09-01T10:00:00", "account_id": "a1",
        "category_id": "c1", "created_at": "2025-09-01",
    }
    t = record_from_row(Transaction, row)

    assert t.amount == Decimal("12.5")
    assert t.date == date(2025, 9, 1)
    assert t.category_id == "c1"


def test_record_from_row_keeps_stored_total_invested():
    row = {"id": "i1", "asset_name": "X", "asset_type_id": "s", "quantity": "2",
           "average_price": "10", "total_invested": "25", "investment_types": {"name": "Stocks"}}
    inv = record_from_row(Investment, row)
    assert inv.total_invested == Decimal(25)


def test_row_from_record_is_serializable():
    t = Transaction("t1", "income", Decimal("10.10"), "Pay", date(2025, 1, 2), "a1")
    row = row_from_record(t)
    assert row["amount"] == "10.10"
    assert row["date"] == "2025-01-02"
    assert row["category_id"] is None


def test_snapshot_from_rows_with_missing_tables():
    snapshot = snapshot_from_rows({Tables.ACCOUNTS: [{"id": "a", "name": "A", "type": "cash", "balance": "1"}]})
    assert len(snapshot.accounts) == 1
    assert snapshot.transactions == ()
    assert not snapshot.is_empty()


def test_load_seed():
    tables = load_seed(SEED_PATH)

    assert set(tables) == set(Tables)
    assert len(tables[Tables.ACCOUNTS]) >= 3
    assert len(tables[Tables.TRANSACTIONS]) >= 5
    assert len(tables[Tables.INVESTMENT_TYPES]) >= 3
    assert tables[Tables.BALANCE_ADJUSTMENTS] == []
