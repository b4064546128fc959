from enum import Enum


class Tables(Enum):
    ACCOUNTS = 'accounts'
    TRANSACTIONS = 'transactions'
    GOALS = 'financial_goals'
    CATEGORIES = 'expense_categories'
    INVESTMENTS = 'investments'
    INVESTMENT_TYPES = 'investment_types'
    BILLS = 'upcoming_bills'
    BUDGETS = 'budgets'
    BALANCE_ADJUSTMENTS = 'account_balance_adjustments'


# tables shared by every user, fetched without an owner filter
SHARED_TABLES = (Tables.INVESTMENT_TYPES,)

OWNER_FIELD = 'user_id'


class TransactionType(Enum):
    INCOME = 'income'
    EXPENSE = 'expense'


class AccountType(Enum):
    CHECKING = 'checking'
    SAVINGS = 'savings'
    INVESTMENT = 'investment'
    CASH = 'cash'

