from decimal import Decimal
from typing import Iterable, List, Optional

import pandas as pd

from fintrack.domain import Account, ExpenseCategory, Transaction
from fintrack.transforms import Row

TRANSACTION_COLUMNS = ["date", "type", "amount", "description", "account", "category"]


def rows_frame(rows: Iterable[Row], columns: Optional[List[str]] = None) -> pd.DataFrame:
    """Chart rows as a DataFrame; Decimal values become floats for plotting."""
    df = pd.DataFrame(list(rows), columns=columns)
    for col in df.columns:
        if df[col].map(lambda v: isinstance(v, Decimal)).any():
            df[col] = df[col].astype(float)
    return df


def transactions_frame(
    trans: Iterable[Transaction],
    accounts: Iterable[Account] = (),
    categories: Iterable[ExpenseCategory] = (),
) -> pd.DataFrame:
    account_names = {a.id: a.name for a in accounts}
    category_names = {c.id: c.name for c in categories}

    df = pd.DataFrame([
        {
            "date": t.date,
            "type": t.type,
            "amount": float(t.amount),
            "description": t.description,
            "account": account_names.get(t.account_id, t.account_id),
            "category": category_names.get(t.category_id) if t.category_id else None,
        }
        for t in trans
    ], columns=TRANSACTION_COLUMNS)
    df["date"] = pd.to_datetime(df["date"])
    if not df.empty:
        df = df.sort_values("date", ascending=False).reset_index(drop=True)
    return df


def export_transactions_csv(
    trans: Iterable[Transaction],
    accounts: Iterable[Account] = (),
    categories: Iterable[ExpenseCategory] = (),
) -> str:
    df = transactions_frame(trans, accounts, categories)
    df["date"] = df["date"].dt.strftime("%Y-%m-%d")
    return df.to_csv(index=False)
