"""
Session-scoped cache of one user's financial data.

``FinancialData`` loads every collection for the signed-in user with one
concurrent fan-out and keeps the result as an immutable ``Snapshot``. Writes
go straight to the store; after a successful write the snapshot is
invalidated and fetched again in full, never patched in place.
"""
import asyncio
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Awaitable, Callable, Optional
from uuid import uuid4

from fintrack.domain import (
    Account,
    BalanceAdjustment,
    ExpenseCategory,
    Investment,
    Snapshot,
    Transaction,
    UserSession,
)
from fintrack.events import (
    DATA_INVALIDATED,
    DATA_REFRESHED,
    FETCH_FAILED,
    MUTATION_FAILED,
    EventBus,
    register_default_handlers,
)
from fintrack.functional import (
    Either,
    Right,
    failure,
    parse_amount,
    parse_number,
    require,
    validate_bill_payment,
    validate_goal_reserve,
    validate_transaction,
)
from fintrack.naming_conventions import OWNER_FIELD, AccountType, Tables, TransactionType
from fintrack.store import MemoryStore, StoreError
from fintrack.transforms import Row, row_from_record, snapshot_from_rows

logger = logging.getLogger(__name__)

# (table, order_by, descending)
FETCH_PLAN = (
    (Tables.ACCOUNTS, None, False),
    (Tables.TRANSACTIONS, "date", True),
    (Tables.GOALS, None, False),
    (Tables.CATEGORIES, None, False),
    (Tables.INVESTMENTS, None, False),
    (Tables.INVESTMENT_TYPES, None, False),
    (Tables.BILLS, "due_date", False),
    (Tables.BUDGETS, None, False),
)

Validator = Callable[[Snapshot], Either]
Action = Callable[[Any, str], Awaitable[Any]]


def owned_row(record: Any, owner_id: str) -> Row:
    return {**row_from_record(record), OWNER_FIELD: owner_id}


class FinancialData:
    def __init__(self, store: MemoryStore, bus: Optional[EventBus] = None,
                 clock: Callable[[], date] = date.today):
        self.store = store
        self.bus = bus if bus is not None else register_default_handlers(EventBus())
        self.clock = clock
        self.session: Optional[UserSession] = None
        self.snapshot: Snapshot = Snapshot.empty()
        self.loading = False
        # bumped by every fetch and sign-out; only the latest fetch may install its result
        self._generation = 0

    async def sign_in(self, session: UserSession) -> Snapshot:
        self.session = session
        return await self.refresh()

    def sign_out(self) -> None:
        self._generation += 1
        self.session = None
        self.snapshot = Snapshot.empty()
        self.loading = False

    async def refresh(self) -> Snapshot:
        """
        Replace the snapshot with a fresh copy of every collection.

        Without a session the snapshot is emptied. Any failure while fetching
        or parsing is logged and also leaves an empty snapshot. A fetch that
        was overtaken by a sign-out or a newer fetch is discarded.
        """
        if self.session is None:
            self.snapshot = Snapshot.empty()
            return self.snapshot

        owner_id = self.session.user_id
        self._generation += 1
        generation = self._generation
        self.loading = True
        try:
            results = await asyncio.gather(*(
                self.store.select(table, owner_id, order_by=order_by, descending=descending)
                for table, order_by, descending in FETCH_PLAN
            ))
            tables = {table: rows for (table, _, _), rows in zip(FETCH_PLAN, results)}
            snapshot = snapshot_from_rows(tables)
        except Exception as e:
            if generation == self._generation:
                logger.error(f"Error fetching financial data for {owner_id}: {e}")
                self.snapshot = Snapshot.empty()
                self.bus.publish(FETCH_FAILED, {"user_id": owner_id, "message": str(e)})
        else:
            if generation == self._generation:
                self.snapshot = snapshot
                counts = {table.value: len(rows) for table, rows in tables.items()}
                logger.debug(f"Refreshed data for {owner_id}: {counts}")
                self.bus.publish(DATA_REFRESHED, {"user_id": owner_id, "counts": counts})
            else:
                logger.debug(f"Discarded stale data for {owner_id}")
        finally:
            if generation == self._generation:
                self.loading = False
        return self.snapshot

    def _reject(self, operation: str, result: Either) -> Either:
        error = result.get_error()
        logger.warning(f"{operation} rejected: {error['message']}")
        self.bus.publish(MUTATION_FAILED, {"operation": operation, "error": error})
        return result

    async def _invalidate(self, operation: str, owner_id: str) -> None:
        self.bus.publish(DATA_INVALIDATED, {"operation": operation, "user_id": owner_id})
        await self.refresh()

    async def _mutate(self, operation: str, validate: Validator, action: Action) -> Either:
        if self.session is None:
            return self._reject(operation, failure("no_session", "No user logged in"))

        owner_id = self.session.user_id
        checked = validate(self.snapshot)
        if checked.is_left():
            return self._reject(operation, checked)

        try:
            result = await action(checked.get_or_else(None), owner_id)
        except StoreError as e:
            logger.error(f"{operation} failed in store: {e}")
            # earlier writes of a multi-step action may have landed
            await self._invalidate(operation, owner_id)
            return self._reject(operation, failure("store_error", str(e)))

        logger.info(f"{operation} applied for {owner_id}")
        await self._invalidate(operation, owner_id)
        return Right(result)

    async def add_transaction(self, type_: str, amount, description: str, date_: date,
                              account_id: str, category_id: Optional[str] = None) -> Either:
        def validate(snapshot: Snapshot) -> Either:
            return parse_amount(amount).bind(
                lambda value: validate_transaction(type_, value, account_id, category_id,
                                                   snapshot.accounts, snapshot.categories)
                .bind(lambda _: Right(value))
            )

        async def action(value: Decimal, owner_id: str) -> Row:
            record = Transaction(
                id=str(uuid4()),
                type=type_,
                amount=value,
                description=description,
                date=date_,
                account_id=account_id,
                category_id=category_id,
            )
            return await self.store.insert(Tables.TRANSACTIONS, owned_row(record, owner_id))

        return await self._mutate("add_transaction", validate, action)

    async def add_investment(self, asset_name: str, asset_type_id: str, quantity, average_price) -> Either:
        def validate(snapshot: Snapshot) -> Either:
            return parse_amount(quantity).bind(
                lambda qty: parse_amount(average_price).bind(
                    lambda price: require(snapshot.investment_types, asset_type_id, "investment_type")
                    .bind(lambda _: Right((qty, price)))
                )
            )

        async def action(parsed, owner_id: str) -> Row:
            qty, price = parsed
            record = Investment(
                id=str(uuid4()),
                asset_name=asset_name,
                asset_type_id=asset_type_id,
                quantity=qty,
                average_price=price,
                total_invested=qty * price,
            )
            return await self.store.insert(Tables.INVESTMENTS, owned_row(record, owner_id))

        return await self._mutate("add_investment", validate, action)

    async def add_account(self, name: str, type_: str, balance=0, color: str = "#10B981") -> Either:
        def validate(snapshot: Snapshot) -> Either:
            if type_ not in {t.value for t in AccountType}:
                return failure("invalid_type", f"Unknown account type {type_!r}", type=type_)
            return parse_number(balance)

        async def action(opening: Decimal, owner_id: str) -> Row:
            record = Account(id=str(uuid4()), name=name, type=type_, balance=opening, color=color)
            return await self.store.insert(Tables.ACCOUNTS, owned_row(record, owner_id))

        return await self._mutate("add_account", validate, action)

    async def add_category(self, name: str, color: str = "#6B7280") -> Either:
        def validate(snapshot: Snapshot) -> Either:
            if not name.strip():
                return failure("invalid_name", "Category name is required")
            return Right(name.strip())

        async def action(clean_name: str, owner_id: str) -> Row:
            record = ExpenseCategory(id=str(uuid4()), name=clean_name, color=color, is_user_created=True)
            return await self.store.insert(Tables.CATEGORIES, owned_row(record, owner_id))

        return await self._mutate("add_category", validate, action)

    async def update_category(self, category_id: str, name: str, color: str) -> Either:
        def validate(snapshot: Snapshot) -> Either:
            if not name.strip():
                return failure("invalid_name", "Category name is required")
            return require(snapshot.categories, category_id, "category")

        async def action(_category: ExpenseCategory, owner_id: str) -> Row:
            return await self.store.update(Tables.CATEGORIES, category_id,
                                           {"name": name.strip(), "color": color}, owner_id=owner_id)

        return await self._mutate("update_category", validate, action)

    async def delete_category(self, category_id: str) -> Either:
        # transactions keep their category_id and simply stop matching any category
        def validate(snapshot: Snapshot) -> Either:
            return require(snapshot.categories, category_id, "category")

        async def action(category: ExpenseCategory, owner_id: str) -> str:
            await self.store.delete(Tables.CATEGORIES, category_id, owner_id=owner_id)
            return category.id

        return await self._mutate("delete_category", validate, action)

    async def reserve_for_goal(self, goal_id: str, account_id: str, amount) -> Either:
        """Move money from an account into a goal, recorded as an expense."""
        def validate(snapshot: Snapshot) -> Either:
            return parse_amount(amount).bind(
                lambda value: validate_goal_reserve(goal_id, account_id, value, snapshot.goals, snapshot.accounts)
                .bind(lambda found: Right((*found, value)))
            )

        async def action(found, owner_id: str) -> Row:
            goal, account, value = found
            await self.store.update(Tables.ACCOUNTS, account.id,
                                    {"balance": str(account.balance - value)}, owner_id=owner_id)
            await self.store.update(Tables.GOALS, goal.id,
                                    {"current_amount": str(goal.current_amount + value)}, owner_id=owner_id)
            record = Transaction(
                id=str(uuid4()),
                type=TransactionType.EXPENSE.value,
                amount=value,
                description=f"Reserve for goal: {goal.name}",
                date=self.clock(),
                account_id=account.id,
            )
            return await self.store.insert(Tables.TRANSACTIONS, owned_row(record, owner_id))

        return await self._mutate("reserve_for_goal", validate, action)

    async def pay_bill(self, bill_id: str, account_id: str) -> Either:
        def validate(snapshot: Snapshot) -> Either:
            return validate_bill_payment(bill_id, account_id, snapshot.upcoming_bills, snapshot.accounts)

        async def action(found, owner_id: str) -> Row:
            bill, account = found
            await self.store.update(Tables.BILLS, bill.id, {"is_paid": True}, owner_id=owner_id)
            await self.store.update(Tables.ACCOUNTS, account.id,
                                    {"balance": str(account.balance - bill.amount)}, owner_id=owner_id)
            record = Transaction(
                id=str(uuid4()),
                type=TransactionType.EXPENSE.value,
                amount=bill.amount,
                description=f"Payment: {bill.name}",
                date=self.clock(),
                account_id=account.id,
                category_id=bill.category_id,
            )
            return await self.store.insert(Tables.TRANSACTIONS, owned_row(record, owner_id))

        return await self._mutate("pay_bill", validate, action)

    async def adjust_balance(self, account_id: str, new_balance) -> Either:
        def validate(snapshot: Snapshot) -> Either:
            return parse_number(new_balance).bind(
                lambda value: require(snapshot.accounts, account_id, "account")
                .bind(lambda account: Right((account, value)))
            )

        async def action(found, owner_id: str) -> Row:
            account, value = found
            adjustment = BalanceAdjustment(
                id=str(uuid4()),
                account_id=account.id,
                old_balance=account.balance,
                new_balance=value,
            )
            await self.store.insert(Tables.BALANCE_ADJUSTMENTS, owned_row(adjustment, owner_id))
            return await self.store.update(Tables.ACCOUNTS, account.id, {"balance": str(value)},
                                           owner_id=owner_id)

        return await self._mutate("adjust_balance", validate, action)
