"""
Derived figures for the dashboard.

Every function here is pure: it reads the collections it is given, never
mutates them, and returns zero or an empty list for empty input. ``month`` is
1-12; ``month`` and ``year`` default to the calendar month containing
``today`` (itself defaulting to ``date.today()``).
"""
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from fintrack import SERIES_MONTHS
from fintrack.domain import (
    Account,
    ExpenseCategory,
    Goal,
    Investment,
    InvestmentType,
    Transaction,
)
from fintrack.filters import by_month, by_type, search
from fintrack.functional import Maybe, Nothing, Some
from fintrack.naming_conventions import TransactionType

ZERO = Decimal(0)
HUNDRED = Decimal(100)

Row = Dict[str, Any]


def _target_month(month: Optional[int], year: Optional[int], today: Optional[date]) -> Tuple[int, int]:
    today = today or date.today()
    return (month if month is not None else today.month,
            year if year is not None else today.year)


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """``part`` as a percentage of ``whole``; a zero ``whole`` gives 0.

    Only the zero denominator is special-cased. Negative results (for
    instance a share of a negative net worth) keep their sign.
    """
    if whole == 0:
        return ZERO
    return part / whole * HUNDRED


def total_balance(accounts: Iterable[Account]) -> Decimal:
    return sum((a.balance for a in accounts), ZERO)


def total_invested(investments: Iterable[Investment]) -> Decimal:
    return sum((i.total_invested for i in investments), ZERO)


def net_worth(accounts: Iterable[Account], investments: Iterable[Investment]) -> Decimal:
    return total_balance(accounts) + total_invested(investments)


def _monthly_total(
    transactions: Iterable[Transaction],
    type_: TransactionType,
    month: Optional[int],
    year: Optional[int],
    today: Optional[date],
) -> Decimal:
    month, year = _target_month(month, year, today)
    matching = search(transactions, by_type(type_.value), by_month(month, year))
    return sum((t.amount for t in matching), ZERO)


def monthly_income(
    transactions: Iterable[Transaction],
    month: Optional[int] = None,
    year: Optional[int] = None,
    today: Optional[date] = None,
) -> Decimal:
    return _monthly_total(transactions, TransactionType.INCOME, month, year, today)


def monthly_expenses(
    transactions: Iterable[Transaction],
    month: Optional[int] = None,
    year: Optional[int] = None,
    today: Optional[date] = None,
) -> Decimal:
    return _monthly_total(transactions, TransactionType.EXPENSE, month, year, today)


def monthly_balance(
    transactions: Iterable[Transaction],
    month: Optional[int] = None,
    year: Optional[int] = None,
    today: Optional[date] = None,
) -> Decimal:
    """Income minus expenses for the month. Can be negative."""
    return (monthly_income(transactions, month, year, today)
            - monthly_expenses(transactions, month, year, today))


def expenses_by_category(
    transactions: Iterable[Transaction],
    categories: Iterable[ExpenseCategory],
    month: Optional[int] = None,
    year: Optional[int] = None,
    today: Optional[date] = None,
) -> List[Row]:
    """
    One row per category with spending in the month, in category order.

    Rows look like ``{"category_id", "name", "value", "color"}``. Categories
    without spending are left out, and so are expenses whose category is
    unknown (they still count in ``monthly_expenses``).
    """
    month, year = _target_month(month, year, today)
    expenses = tuple(search(transactions, by_type(TransactionType.EXPENSE.value), by_month(month, year)))

    rows = []
    for category in categories:
        value = sum((t.amount for t in expenses if t.category_id == category.id), ZERO)
        if value > 0:
            rows.append({
                "category_id": category.id,
                "name": category.name,
                "value": value,
                "color": category.color,
            })
    return rows


def month_label(month: int, year: int) -> str:
    return date(year, month, 1).strftime("%b %y")


def trailing_months(months: int, today: Optional[date] = None) -> List[Tuple[int, int]]:
    """(month, year) pairs for the last ``months`` calendar months, oldest first."""
    today = today or date.today()
    current = today.year * 12 + today.month - 1
    pairs = []
    for offset in range(months - 1, -1, -1):
        year, month0 = divmod(current - offset, 12)
        pairs.append((month0 + 1, year))
    return pairs


def monthly_series(
    transactions: Iterable[Transaction],
    months: int = SERIES_MONTHS,
    today: Optional[date] = None,
) -> List[Row]:
    """
    Income, expenses and balance for each of the last ``months`` months.

    Each month is a separate scan over ``transactions``; the series ends at
    the current month.
    """
    transactions = tuple(transactions)
    rows = []
    for month, year in trailing_months(months, today):
        income = monthly_income(transactions, month, year)
        expenses = monthly_expenses(transactions, month, year)
        rows.append({
            "month": month_label(month, year),
            "income": income,
            "expenses": expenses,
            "balance": monthly_balance(transactions, month, year),
        })
    return rows


def investments_by_type(
    investments: Iterable[Investment],
    investment_types: Iterable[InvestmentType],
) -> List[Row]:
    """Rows ``{"name", "value", "count"}`` for each type holding a positive amount."""
    investments = tuple(investments)
    rows = []
    for type_ in investment_types:
        matching = [i for i in investments if i.asset_type_id == type_.id]
        value = total_invested(matching)
        if value > 0:
            rows.append({"name": type_.name, "value": value, "count": len(matching)})
    return rows


def investment_share(accounts: Iterable[Account], investments: Iterable[Investment]) -> Decimal:
    investments = tuple(investments)
    return percentage(total_invested(investments), net_worth(accounts, investments))


def cash_flow_shares(
    transactions: Iterable[Transaction],
    month: Optional[int] = None,
    year: Optional[int] = None,
    today: Optional[date] = None,
) -> Dict[str, Decimal]:
    """Income and expenses as percentages of the month's total flow."""
    transactions = tuple(transactions)
    income = monthly_income(transactions, month, year, today)
    expenses = monthly_expenses(transactions, month, year, today)
    flow = income + expenses
    return {
        "income_share": percentage(income, flow),
        "expense_share": percentage(expenses, flow),
    }


def goal_progress(goal: Goal) -> Decimal:
    return percentage(goal.current_amount, goal.target_amount)


def goals_overview(goals: Iterable[Goal], limit: int = 2) -> List[Row]:
    rows = []
    for goal in list(goals)[:max(0, limit)]:
        rows.append({
            "id": goal.id,
            "name": goal.name,
            "priority": goal.priority,
            "current_amount": goal.current_amount,
            "target_amount": goal.target_amount,
            "progress": goal_progress(goal),
        })
    return rows


def net_worth_series(
    accounts: Iterable[Account],
    investments: Iterable[Investment],
    transactions: Iterable[Transaction],
    months: int = SERIES_MONTHS,
    today: Optional[date] = None,
) -> List[Row]:
    # no balance history is stored, so every month carries today's net worth
    current = net_worth(accounts, investments)
    return [{**row, "net_worth": current} for row in monthly_series(transactions, months, today)]


def largest_investment(investments: Iterable[Investment]) -> Maybe[Investment]:
    investments = tuple(investments)
    if not investments:
        return Nothing()
    return Some(max(investments, key=lambda i: i.total_invested))
