import asyncio
from datetime import date
from decimal import Decimal

import pytest

from fintrack.data import FinancialData
from fintrack.domain import Snapshot, UserSession
from fintrack.services import DashboardService, ReportService, calc_balances
from fintrack.store import MemoryStore

TODAY = date(2025, 10, 19)


@pytest.fixture
def snapshot():
    data = FinancialData(MemoryStore.from_seed(), clock=lambda: TODAY)
    return asyncio.run(data.sign_in(UserSession("demo")))


def test_overview_of_seed_data(snapshot):
    report = DashboardService().overview(snapshot, today=TODAY)
    result = report["result"]

    assert result["total_balance"] == Decimal("16350.50")
    assert result["total_invested"] == Decimal("5202.00")
    assert result["net_worth"] == Decimal("21552.50")
    assert result["monthly_income"] == 5500
    assert result["monthly_expenses"] == 2070
    assert result["monthly_balance"] == 3430
    assert abs(result["income_share"] + result["expense_share"] - 100) < Decimal("0.000001")
    assert [g["name"] for g in result["goals"]] == ["Emergency fund", "Vacation"]
    assert [b["id"] for b in result["upcoming_bills"]] == ["bill-2", "bill-1"]
    assert result["upcoming_bills"][0]["label"] == "Due tomorrow"


def test_overview_records_each_calculator_step(snapshot):
    report = DashboardService().overview(snapshot, month=9, year=2025, today=TODAY)

    assert [s["calculator"] for s in report["steps"]] == [
        "calc_balances", "calc_cash_flow", "calc_shares", "calc_goals", "calc_bills",
    ]
    assert report["month"] == 9
    assert report["result"]["monthly_expenses"] == Decimal("2215.40")


def test_overview_of_empty_snapshot():
    result = DashboardService().overview(Snapshot.empty(), today=TODAY)["result"]

    assert result["net_worth"] == 0
    assert result["investment_share"] == 0
    assert result["income_share"] == 0
    assert result["goals"] == []
    assert result["upcoming_bills"] == []


def test_custom_calculators_see_previous_results(snapshot):
    def calc_double(snapshot, acc, **_):
        return {"double_net_worth": acc["net_worth"] * 2}

    result = DashboardService([calc_balances, calc_double]).overview(snapshot, today=TODAY)["result"]
    assert result["double_net_worth"] == Decimal("43105.00")


def test_report(snapshot):
    result = ReportService().report(snapshot, months=3, today=TODAY)["result"]

    assert [r["month"] for r in result["monthly_series"]] == ["Aug 25", "Sep 25", "Oct 25"]
    assert result["monthly_series"][1]["income"] == 5500
    assert all(r["net_worth"] == Decimal("21552.50") for r in result["net_worth_series"])
    assert [r["name"] for r in result["expenses_by_category"]] == ["Food", "Housing"]
    assert {r["name"]: r["count"] for r in result["investments_by_type"]} == {"Stocks": 1, "Bonds": 1, "Funds": 1}
    assert result["largest_investment"] == {"asset_name": "Index Fund", "value": Decimal("2850")}


def test_report_of_empty_snapshot():
    result = ReportService().report(Snapshot.empty(), months=2, today=TODAY)["result"]
    assert len(result["monthly_series"]) == 2
    assert result["expenses_by_category"] == []
    assert result["investments_by_type"] == []
    assert result["largest_investment"] is None
