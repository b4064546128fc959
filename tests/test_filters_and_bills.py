from datetime import date
from decimal import Decimal
from itertools import islice

from fintrack.bills import (
    DUE_SOON,
    DUE_TODAY,
    DUE_TOMORROW,
    OVERDUE,
    UPCOMING,
    days_until_due,
    due_status,
    upcoming_unpaid,
)
from fintrack.domain import Transaction, UpcomingBill
from fintrack.filters import by_account, by_category, by_date_range, by_month, by_type, search

TODAY = date(2025, 10, 19)


def make_tx(id, type_, d, account_id="a1", category_id=None):
    return Transaction(id, type_, Decimal(10), "", d, account_id, category_id)


def make_bill(id, due, paid=False):
    return UpcomingBill(id, id, Decimal(10), due, is_paid=paid)


TRANS = (
    make_tx("t1", "income", date(2025, 10, 1)),
    make_tx("t2", "expense", date(2025, 10, 5), "a2", "food"),
    make_tx("t3", "expense", date(2025, 9, 30), "a1", "food"),
)


def test_single_predicates():
    assert [t.id for t in filter(by_type("expense"), TRANS)] == ["t2", "t3"]
    assert [t.id for t in filter(by_account("a2"), TRANS)] == ["t2"]
    assert [t.id for t in filter(by_category("food"), TRANS)] == ["t2", "t3"]
    assert [t.id for t in filter(by_month(10, 2025), TRANS)] == ["t1", "t2"]


def test_date_range_is_inclusive():
    result = filter(by_date_range(date(2025, 9, 30), date(2025, 10, 1)), TRANS)
    assert [t.id for t in result] == ["t1", "t3"]


def test_search_combines_predicates_lazily():
    calls = {"n": 0}

    def counting(t):
        calls["n"] += 1
        return True

    first = list(islice(search(TRANS, counting, by_type("income")), 1))
    assert [t.id for t in first] == ["t1"]
    assert calls["n"] == 1
    assert [t.id for t in search(TRANS, by_type("expense"), by_month(10, 2025))] == ["t2"]


def test_due_status_labels():
    assert due_status(make_bill("b", date(2025, 10, 16)), TODAY) == (OVERDUE, -3, "3 days overdue", True)
    assert due_status(make_bill("b", TODAY), TODAY).status == DUE_TODAY
    assert due_status(make_bill("b", date(2025, 10, 20)), TODAY).label == "Due tomorrow"
    assert due_status(make_bill("b", date(2025, 10, 20)), TODAY).status == DUE_TOMORROW

    soon = due_status(make_bill("b", date(2025, 10, 22)), TODAY)
    assert (soon.status, soon.label, soon.urgent) == (DUE_SOON, "3 days", True)
    assert due_status(make_bill("b", date(2025, 10, 26)), TODAY).urgent is False
    assert due_status(make_bill("b", date(2025, 11, 30)), TODAY).status == UPCOMING


def test_days_until_due():
    assert days_until_due(make_bill("b", date(2025, 11, 1)), TODAY) == 13


def test_upcoming_unpaid_sorted_and_limited():
    bills = (
        make_bill("late", date(2025, 12, 1)),
        make_bill("paid", date(2025, 10, 1), paid=True),
        make_bill("soon", date(2025, 10, 20)),
        make_bill("mid", date(2025, 11, 1)),
    )
    assert [b.id for b in upcoming_unpaid(bills)] == ["soon", "mid", "late"]
    assert [b.id for b in upcoming_unpaid(bills, limit=2)] == ["soon", "mid"]
    assert upcoming_unpaid((), limit=5) == []
