from datetime import date
from typing import Any, Callable, Dict, Optional, Sequence

from fintrack import BILLS_LIMIT, SERIES_MONTHS
from fintrack import aggregation as agg
from fintrack.bills import due_status, upcoming_unpaid
from fintrack.domain import Snapshot

Calculator = Callable[..., Dict[str, Any]]


def _run(calculators: Sequence[Calculator], snapshot: Snapshot, params: Dict[str, Any]) -> Dict[str, Any]:
    """Run calculators in order; each sees the params and the results merged so far."""
    report = {**params, "steps": [], "result": {}}
    acc: Dict[str, Any] = {}
    for calc in calculators:
        out = calc(snapshot, acc=acc, **params)
        report["steps"].append({"calculator": getattr(calc, "__name__", str(calc)), "output": out})
        acc.update(out)
    report["result"] = acc
    return report


def calc_balances(snapshot: Snapshot, acc: dict, **_) -> Dict[str, Any]:
    return {
        "total_balance": agg.total_balance(snapshot.accounts),
        "total_invested": agg.total_invested(snapshot.investments),
        "net_worth": agg.net_worth(snapshot.accounts, snapshot.investments),
    }


def calc_cash_flow(snapshot: Snapshot, acc: dict, month=None, year=None, today=None, **_) -> Dict[str, Any]:
    trans = snapshot.transactions
    return {
        "monthly_income": agg.monthly_income(trans, month, year, today),
        "monthly_expenses": agg.monthly_expenses(trans, month, year, today),
        "monthly_balance": agg.monthly_balance(trans, month, year, today),
    }


def calc_shares(snapshot: Snapshot, acc: dict, month=None, year=None, today=None, **_) -> Dict[str, Any]:
    return {
        **agg.cash_flow_shares(snapshot.transactions, month, year, today),
        "investment_share": agg.investment_share(snapshot.accounts, snapshot.investments),
    }


def calc_goals(snapshot: Snapshot, acc: dict, **_) -> Dict[str, Any]:
    return {"goals": agg.goals_overview(snapshot.goals)}


def calc_bills(snapshot: Snapshot, acc: dict, today=None, **_) -> Dict[str, Any]:
    rows = []
    for bill in upcoming_unpaid(snapshot.upcoming_bills, BILLS_LIMIT):
        status = due_status(bill, today)
        rows.append({
            "id": bill.id,
            "name": bill.name,
            "amount": bill.amount,
            "due_date": bill.due_date,
            "status": status.status,
            "label": status.label,
            "urgent": status.urgent,
        })
    return {"upcoming_bills": rows}


def calc_monthly_series(snapshot: Snapshot, acc: dict, months=SERIES_MONTHS, today=None, **_) -> Dict[str, Any]:
    return {"monthly_series": agg.monthly_series(snapshot.transactions, months, today)}


def calc_net_worth_series(snapshot: Snapshot, acc: dict, months=SERIES_MONTHS, today=None, **_) -> Dict[str, Any]:
    return {"net_worth_series": agg.net_worth_series(
        snapshot.accounts, snapshot.investments, snapshot.transactions, months, today)}


def calc_category_breakdown(snapshot: Snapshot, acc: dict, today=None, **_) -> Dict[str, Any]:
    return {"expenses_by_category": agg.expenses_by_category(
        snapshot.transactions, snapshot.categories, today=today)}


def calc_investments(snapshot: Snapshot, acc: dict, **_) -> Dict[str, Any]:
    largest = agg.largest_investment(snapshot.investments)
    return {
        "investments_by_type": agg.investments_by_type(snapshot.investments, snapshot.investment_types),
        "largest_investment": largest.map(lambda i: {"asset_name": i.asset_name, "value": i.total_invested})
                                     .get_or_else(None),
    }


OVERVIEW_CALCULATORS = (calc_balances, calc_cash_flow, calc_shares, calc_goals, calc_bills)
REPORT_CALCULATORS = (calc_monthly_series, calc_net_worth_series, calc_category_breakdown, calc_investments)


class DashboardService:
    """Headline cards for the current (or a given) month."""

    def __init__(self, calculators: Sequence[Calculator] = OVERVIEW_CALCULATORS):
        self.calculators = calculators

    def overview(self, snapshot: Snapshot, month: Optional[int] = None, year: Optional[int] = None,
                 today: Optional[date] = None) -> Dict[str, Any]:
        return _run(self.calculators, snapshot, {"month": month, "year": year, "today": today})


class ReportService:
    """Series and breakdowns over the trailing ``months`` months."""

    def __init__(self, calculators: Sequence[Calculator] = REPORT_CALCULATORS):
        self.calculators = calculators

    def report(self, snapshot: Snapshot, months: int = SERIES_MONTHS,
               today: Optional[date] = None) -> Dict[str, Any]:
        return _run(self.calculators, snapshot, {"months": months, "today": today})
