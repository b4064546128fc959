from datetime import date
from typing import Callable, Iterable, Iterator

from fintrack.domain import Transaction

Predicate = Callable[[Transaction], bool]


def by_type(type_: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.type == type_

    return _filter


def by_account(account_id: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.account_id == account_id

    return _filter


def by_category(category_id: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.category_id == category_id

    return _filter


def by_date_range(start: date, end: date) -> Predicate:
    """Inclusive on both ends."""
    def _filter(t: Transaction) -> bool:
        return start <= t.date <= end

    return _filter


def by_month(month: int, year: int) -> Predicate:
    # calendar month of the stored date, not a rolling window
    def _filter(t: Transaction) -> bool:
        return t.date.month == month and t.date.year == year

    return _filter


def search(trans: Iterable[Transaction], *preds: Predicate) -> Iterator[Transaction]:
    for t in trans:
        if all(p(t) for p in preds):
            yield t
