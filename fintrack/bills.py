from datetime import date
from itertools import islice
from typing import Iterable, Iterator, List, NamedTuple, Optional

from fintrack import BILLS_LIMIT
from fintrack.domain import UpcomingBill

OVERDUE = "overdue"
DUE_TODAY = "due_today"
DUE_TOMORROW = "due_tomorrow"
DUE_SOON = "due_soon"
UPCOMING = "upcoming"

URGENT_DAYS = 3
SOON_DAYS = 7


class DueStatus(NamedTuple):
    status: str
    days: int
    label: str
    urgent: bool


def days_until_due(bill: UpcomingBill, today: Optional[date] = None) -> int:
    return (bill.due_date - (today or date.today())).days


def due_status(bill: UpcomingBill, today: Optional[date] = None) -> DueStatus:
    days = days_until_due(bill, today)
    if days < 0:
        return DueStatus(OVERDUE, days, f"{abs(days)} days overdue", True)
    if days == 0:
        return DueStatus(DUE_TODAY, days, "Due today", True)
    if days == 1:
        return DueStatus(DUE_TOMORROW, days, "Due tomorrow", True)
    status = DUE_SOON if days <= SOON_DAYS else UPCOMING
    return DueStatus(status, days, f"{days} days", days <= URGENT_DAYS)


def iter_unpaid(bills: Iterable[UpcomingBill]) -> Iterator[UpcomingBill]:
    for b in sorted(bills, key=lambda b: b.due_date):
        if not b.is_paid:
            yield b


def upcoming_unpaid(bills: Iterable[UpcomingBill], limit: int = BILLS_LIMIT) -> List[UpcomingBill]:
    return list(islice(iter_unpaid(bills), max(0, limit)))
