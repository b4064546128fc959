from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Account:
    id: str
    name: str
    type: str        # checking / savings / investment / cash
    balance: Decimal
    color: str = "#10B981"


@dataclass(frozen=True)
class Transaction:
    id: str
    type: str        # income / expense
    amount: Decimal  # >= 0, direction comes from type
    description: str
    date: date
    account_id: str
    category_id: Optional[str] = None  # expenses only


@dataclass(frozen=True)
class Goal:
    id: str
    name: str
    target_amount: Decimal
    current_amount: Decimal
    priority: str = "medium"


@dataclass(frozen=True)
class ExpenseCategory:
    id: str
    name: str
    color: str
    is_user_created: bool = False


@dataclass(frozen=True)
class Investment:
    id: str
    asset_name: str
    asset_type_id: str
    quantity: Decimal
    average_price: Decimal
    total_invested: Decimal  # stored, not recomputed on read


@dataclass(frozen=True)
class InvestmentType:
    id: str
    name: str


@dataclass(frozen=True)
class UpcomingBill:
    id: str
    name: str
    amount: Decimal
    due_date: date
    category_id: Optional[str] = None
    is_paid: bool = False


@dataclass(frozen=True)
class Budget:
    id: str
    name: str
    amount: Decimal
    category_id: Optional[str] = None
    period: str = "monthly"


@dataclass(frozen=True)
class BalanceAdjustment:
    id: str
    account_id: str
    old_balance: Decimal
    new_balance: Decimal
    reason: str = "Manual balance adjustment"


@dataclass(frozen=True)
class UserSession:
    user_id: str
    email: Optional[str] = None


@dataclass(frozen=True)
class Snapshot:
    """Everything loaded for one user, replaced wholesale on every refresh."""

    accounts: tuple[Account, ...] = field(default_factory=tuple)
    transactions: tuple[Transaction, ...] = field(default_factory=tuple)
    goals: tuple[Goal, ...] = field(default_factory=tuple)
    categories: tuple[ExpenseCategory, ...] = field(default_factory=tuple)
    investments: tuple[Investment, ...] = field(default_factory=tuple)
    investment_types: tuple[InvestmentType, ...] = field(default_factory=tuple)
    upcoming_bills: tuple[UpcomingBill, ...] = field(default_factory=tuple)
    budgets: tuple[Budget, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> "Snapshot":
        return cls()

    def is_empty(self) -> bool:
        return not any((
            self.accounts, self.transactions, self.goals, self.categories,
            self.investments, self.upcoming_bills, self.budgets,
        ))
