import json
import logging
from dataclasses import asdict, fields
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Tuple, Type, TypeVar

from fintrack.domain import (
    Account,
    BalanceAdjustment,
    Budget,
    ExpenseCategory,
    Goal,
    Investment,
    InvestmentType,
    Snapshot,
    Transaction,
    UpcomingBill,
)
from fintrack.naming_conventions import Tables

logger = logging.getLogger(__name__)

R = TypeVar("R")

Row = Dict[str, Any]

_DECIMAL_FIELDS = {
    "balance", "amount", "target_amount", "current_amount", "quantity",
    "average_price", "total_invested", "old_balance", "new_balance",
}
_DATE_FIELDS = {"date", "due_date"}

RECORD_TYPES: Dict[Tables, Type] = {
    Tables.ACCOUNTS: Account,
    Tables.TRANSACTIONS: Transaction,
    Tables.GOALS: Goal,
    Tables.CATEGORIES: ExpenseCategory,
    Tables.INVESTMENTS: Investment,
    Tables.INVESTMENT_TYPES: InvestmentType,
    Tables.BILLS: UpcomingBill,
    Tables.BUDGETS: Budget,
    Tables.BALANCE_ADJUSTMENTS: BalanceAdjustment,
}


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if value is None or value == "":
        return Decimal(0)
    return Decimal(str(value))


def to_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    # timestamps like "2025-09-01T10:00:00" keep only their calendar day
    return date.fromisoformat(str(value)[:10])


def record_from_row(cls: Type[R], row: Mapping[str, Any]) -> R:
    """Build a domain record from a backend row, ignoring columns it does not know.

    Numeric money columns become Decimal and date columns become ``datetime.date``.
    Joined or bookkeeping columns such as ``user_id`` are dropped.
    """
    known = {f.name for f in fields(cls)}
    values = {}
    for key, value in row.items():
        if key not in known:
            continue
        if key in _DECIMAL_FIELDS:
            value = to_decimal(value)
        elif key in _DATE_FIELDS:
            value = to_date(value)
        values[key] = value
    return cls(**values)


def records_from_rows(table: Tables, rows: Iterable[Mapping[str, Any]]) -> Tuple[Any, ...]:
    cls = RECORD_TYPES[table]
    return tuple(record_from_row(cls, r) for r in rows)


def row_from_record(record: Any) -> Row:
    """Inverse of ``record_from_row``: Decimal to str and dates to ISO strings."""
    row = asdict(record)
    for key, value in row.items():
        if isinstance(value, Decimal):
            row[key] = str(value)
        elif isinstance(value, date):
            row[key] = value.isoformat()
    return row


def snapshot_from_rows(tables: Mapping[Tables, Iterable[Mapping[str, Any]]]) -> Snapshot:
    def get(table: Tables):
        return records_from_rows(table, tables.get(table, ()))

    return Snapshot(
        accounts=get(Tables.ACCOUNTS),
        transactions=get(Tables.TRANSACTIONS),
        goals=get(Tables.GOALS),
        categories=get(Tables.CATEGORIES),
        investments=get(Tables.INVESTMENTS),
        investment_types=get(Tables.INVESTMENT_TYPES),
        upcoming_bills=get(Tables.BILLS),
        budgets=get(Tables.BUDGETS),
    )


def load_seed(path: str) -> Dict[Tables, List[Row]]:
    """Read a JSON seed file keyed by table name. Missing tables load as empty."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    tables = {t: list(data.get(t.value, [])) for t in Tables}
    logger.debug(f"Loaded seed {path}: " + ", ".join(f"{t.value}={len(r)}" for t, r in tables.items()))
    return tables

