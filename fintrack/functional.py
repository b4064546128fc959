from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

from fintrack.domain import Account, ExpenseCategory, Goal, UpcomingBill
from fintrack.naming_conventions import TransactionType
from fintrack.transforms import to_decimal

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):
    """Right carries a value, Left carries an error dict ``{"error", "message", ...}``."""

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def failure(code: str, message: str, **details) -> Left:
    return Left({"error": code, "message": message, **details})


def find_by_id(items: Iterable[T], item_id: Optional[str]) -> Maybe[T]:
    for item in items:
        if getattr(item, "id") == item_id:
            return Some(item)
    return Nothing()


def require(items: Iterable[T], item_id: Optional[str], kind: str) -> Either[dict, T]:
    found = find_by_id(items, item_id)
    if found.is_none():
        return failure(
            f"{kind}_not_found",
            f"{kind.replace('_', ' ').capitalize()} with ID {item_id} does not exist",
            **{f"{kind}_id": item_id},
        )
    return Right(found.get_or_else(None))


def parse_number(value: Any) -> Either[dict, Decimal]:
    """Parse user input into a finite Decimal; zero and negatives are allowed."""
    try:
        number = to_decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return failure("invalid_amount", f"Amount must be a number, got {value!r}", amount=value)
    if not number.is_finite():
        return failure("invalid_amount", f"Amount must be a finite number, got {value!r}", amount=value)
    return Right(number)


def parse_amount(value: Any) -> Either[dict, Decimal]:
    return parse_number(value).bind(check_amount)


def check_amount(amount: Decimal) -> Either[dict, Decimal]:
    if not amount.is_finite() or amount <= 0:
        return failure("invalid_amount", f"Amount must be positive, got {amount}", amount=amount)
    return Right(amount)


def check_sufficient_balance(account: Account, amount: Decimal) -> Either[dict, Account]:
    if account.balance < amount:
        return failure(
            "insufficient_balance",
            f"Insufficient balance in {account.name}: {account.balance} < {amount}",
            account_id=account.id,
            balance=account.balance,
            amount=amount,
        )
    return Right(account)


def validate_transaction(
    type_: str,
    amount: Decimal,
    account_id: str,
    category_id: Optional[str],
    accounts: Iterable[Account],
    categories: Iterable[ExpenseCategory],
) -> Either[dict, Account]:
    if type_ not in {t.value for t in TransactionType}:
        return failure("invalid_type", f"Transaction type must be income or expense, got {type_!r}", type=type_)

    result = check_amount(amount).bind(lambda _: require(accounts, account_id, "account"))
    if category_id is not None:
        result = result.bind(
            lambda acc: require(categories, category_id, "category").bind(lambda _: Right(acc))
        )
    return result


def validate_goal_reserve(
    goal_id: str,
    account_id: str,
    amount: Decimal,
    goals: Iterable[Goal],
    accounts: Iterable[Account],
) -> Either[dict, tuple[Goal, Account]]:
    return check_amount(amount).bind(
        lambda _: require(goals, goal_id, "goal")
    ).bind(
        lambda goal: require(accounts, account_id, "account")
        .bind(lambda acc: check_sufficient_balance(acc, amount))
        .bind(lambda acc: Right((goal, acc)))
    )


def validate_bill_payment(
    bill_id: str,
    account_id: str,
    bills: Iterable[UpcomingBill],
    accounts: Iterable[Account],
) -> Either[dict, tuple[UpcomingBill, Account]]:
    def unpaid(bill: UpcomingBill) -> Either[dict, UpcomingBill]:
        if bill.is_paid:
            return failure("bill_already_paid", f"Bill {bill.name} is already paid", bill_id=bill.id)
        return Right(bill)

    return require(bills, bill_id, "bill").bind(unpaid).bind(
        lambda bill: require(accounts, account_id, "account")
        .bind(lambda acc: check_sufficient_balance(acc, bill.amount))
        .bind(lambda acc: Right((bill, acc)))
    )
