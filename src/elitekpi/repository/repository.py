# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Repository

The single writer of deals, expenses and activities. It holds the
authoritative in-memory collections, runs the save gates, keeps the
deal links consistent and writes through a `PersistenceProvider`.

Write path:

1. every mutation works on a staged copy of the collections
2. the touched collections are written with one `save_many` call
3. only after the provider accepted the write does the staged copy become
   the live snapshot

A failed validation or a failed write therefore leaves the snapshot exactly
as it was. `transaction()` widens step 1 to cover several mutations, which
are then committed (or discarded) together.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from pydantic import TypeAdapter, ValidationError

from ..activity import Activity
from ..core.primitives.clock import Clock, IdGenerator, generate_id, resolve_clock
from ..core.primitives.enums import Collection, DealSide, DealStage
from ..core.primitives.model import Model
from ..core.primitives.validation import RecordValidationError
from ..deal import Deal, calculator, lifecycle
from ..expense import AnyExpense, ExpenseBase, validate_expense_for_save
from ..store.base import PersistenceError, PersistenceProvider, Record

logger = logging.getLogger(__name__)

_EXPENSE_ADAPTER = TypeAdapter(AnyExpense)

ENTITY_COLLECTIONS = (Collection.DEALS, Collection.EXPENSES, Collection.ACTIVITIES)


class RecordNotFoundError(KeyError):
    """No record with the given id exists in the collection."""

    def __init__(self, record_type: str, record_id: str) -> None:
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(record_id)

    def __str__(self) -> str:
        return f"{self.record_type} not found: {self.record_id!r}"


class CascadeResult(Model):
    """Ids removed by a cascading deal delete."""

    deal_id: str
    expense_ids: Tuple[str, ...] = ()
    activity_ids: Tuple[str, ...] = ()

    @property
    def removed_count(self) -> int:
        return 1 + len(self.expense_ids) + len(self.activity_ids)


class _Snapshot:
    """Id-keyed collections plus the set of collections changed since the last commit."""

    def __init__(
        self,
        deals: Optional[Dict[str, Deal]] = None,
        expenses: Optional[Dict[str, ExpenseBase]] = None,
        activities: Optional[Dict[str, Activity]] = None,
    ) -> None:
        self.tables: Dict[Collection, Dict[str, Any]] = {
            Collection.DEALS: deals or {},
            Collection.EXPENSES: expenses or {},
            Collection.ACTIVITIES: activities or {},
        }
        self.dirty: Set[Collection] = set()

    @property
    def deals(self) -> Dict[str, Deal]:
        return self.tables[Collection.DEALS]

    @property
    def expenses(self) -> Dict[str, ExpenseBase]:
        return self.tables[Collection.EXPENSES]

    @property
    def activities(self) -> Dict[str, Activity]:
        return self.tables[Collection.ACTIVITIES]

    def copy(self) -> "_Snapshot":
        # Entities are immutable, so copying the id maps is enough
        return _Snapshot(dict(self.deals), dict(self.expenses), dict(self.activities))

    def touch(self, *collections: Collection) -> None:
        self.dirty.update(collections)


class RepositoryTransaction:
    """
    Context manager batching repository mutations into one provider write.

    Mutations made inside the block are staged and become visible through
    the repository's read accessors immediately; they are persisted together
    when the block exits normally and discarded if it raises.
    """

    def __init__(self, repository: "Repository") -> None:
        self._repository = repository

    def __enter__(self) -> "Repository":
        """
        Raises:
            RuntimeError: If a transaction is already in progress
        """
        repo = self._repository
        if repo._pending is not None:
            raise RuntimeError("Nested transactions are not supported")
        repo._pending = repo._state.copy()
        logger.debug("Started repository transaction")
        return repo

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        repo = self._repository
        try:
            if exc_type is None:
                repo._commit(repo._pending)
                logger.debug("Committed repository transaction")
            else:
                logger.warning(
                    f"Rolled back repository transaction due to exception: {exc_type.__name__}"
                )
        finally:
            repo._pending = None


class Repository:
    """
    Authoritative store of deals, expenses and activities.

    Usage Examples:
        repo = Repository(InMemoryStore(), clock=FixedClock())
        deal = repo.create_deal("Jane Smith", "12 Elm Street", side=DealSide.BUYER,
                                expected_commission=9_000)
        repo.set_stage(deal.id, DealStage.UNDER_CONTRACT)

        with repo.transaction():
            repo.create_expense(StandardExpense.create(...))
            repo.create_activity(Activity.create(...))
    """

    def __init__(
        self,
        provider: PersistenceProvider,
        clock: Optional[Clock] = None,
        id_generator: Optional[IdGenerator] = None,
    ) -> None:
        self.provider = provider
        self.clock = resolve_clock(clock)
        self.id_generator = id_generator or generate_id
        self._state = _Snapshot()
        self._pending: Optional[_Snapshot] = None

    # Loading

    def load(self) -> "Repository":
        """
        Replace the snapshot with the provider's current contents.

        Raises:
            PersistenceError: If a collection cannot be read or holds an
                invalid record; the previous snapshot is kept
            RuntimeError: If called inside a transaction
        """
        if self._pending is not None:
            raise RuntimeError("Cannot reload while a transaction is in progress")

        deals = self._parse(Collection.DEALS, Deal.model_validate)
        expenses = self._parse(Collection.EXPENSES, _EXPENSE_ADAPTER.validate_python)
        activities = self._parse(Collection.ACTIVITIES, Activity.model_validate)
        self._state = _Snapshot(deals, expenses, activities)
        logger.debug(
            f"Loaded {len(deals)} deals, {len(expenses)} expenses, {len(activities)} activities"
        )
        return self

    def reload(self) -> "Repository":
        """Alias of `load`, used after switching demo mode or data sources."""
        return self.load()

    def _parse(self, collection: Collection, validate) -> Dict[str, Any]:
        parsed: Dict[str, Any] = {}
        for raw in self.provider.load(collection):
            try:
                record = validate(raw)
            except ValidationError as e:
                raise PersistenceError(
                    f"Invalid record in '{collection.value}': {e}"
                ) from e
            if record.id in parsed:
                raise PersistenceError(
                    f"Duplicate id {record.id!r} in '{collection.value}'"
                )
            parsed[record.id] = record
        return parsed

    # Snapshot access

    @property
    def _view(self) -> _Snapshot:
        return self._pending if self._pending is not None else self._state

    @property
    def in_transaction(self) -> bool:
        return self._pending is not None

    @property
    def deals(self) -> List[Deal]:
        return list(self._view.deals.values())

    @property
    def expenses(self) -> List[ExpenseBase]:
        return list(self._view.expenses.values())

    @property
    def activities(self) -> List[Activity]:
        return list(self._view.activities.values())

    def get_deal(self, deal_id: str) -> Deal:
        return self._get(self._view, Collection.DEALS, deal_id)

    def get_expense(self, expense_id: str) -> ExpenseBase:
        return self._get(self._view, Collection.EXPENSES, expense_id)

    def get_activity(self, activity_id: str) -> Activity:
        return self._get(self._view, Collection.ACTIVITIES, activity_id)

    @staticmethod
    def _get(state: _Snapshot, collection: Collection, record_id: str) -> Any:
        try:
            return state.tables[collection][record_id]
        except KeyError:
            raise RecordNotFoundError(_RECORD_TYPES[collection], record_id) from None

    def expenses_for_deal(self, deal_id: str) -> List[ExpenseBase]:
        return [e for e in self._view.expenses.values() if e.deal_id == deal_id]

    def activities_for_deal(self, deal_id: str) -> List[Activity]:
        return [a for a in self._view.activities.values() if a.deal_id == deal_id]

    def net_commission(self, deal_id: str) -> float:
        """Realized commission of the deal (zero until closed) less its linked expenses."""
        return calculator.net_commission(self.get_deal(deal_id), self._view.expenses.values())

    # Write path

    @contextmanager
    def _writing(self) -> Iterator[_Snapshot]:
        """Yield the snapshot to mutate; commit it afterwards unless batching."""
        if self._pending is not None:
            yield self._pending
            return
        staged = self._state.copy()
        yield staged
        self._commit(staged)

    def _commit(self, staged: _Snapshot) -> None:
        if not staged.dirty:
            self._state = staged
            return

        batch: Dict[str, List[Record]] = {
            collection.value: [
                record.model_dump(mode="json")
                for record in staged.tables[collection].values()
            ]
            for collection in ENTITY_COLLECTIONS
            if collection in staged.dirty
        }
        try:
            self.provider.save_many(batch)
        except PersistenceError as e:
            logger.error(f"Failed to persist {sorted(batch)}: {e}")
            raise
        staged.dirty.clear()
        self._state = staged
        logger.debug(f"Committed {sorted(batch)}")

    def _check_new_id(self, state: _Snapshot, collection: Collection, record_id: str) -> None:
        if record_id in state.tables[collection]:
            raise RecordValidationError(
                _RECORD_TYPES[collection], [f"Duplicate id: {record_id!r}"]
            )

    def _link(self, state: _Snapshot, record):
        """Stamp `deal_side` from the linked deal; unknown deals are tolerated without a side."""
        if record.deal_id is None:
            return record.revise(deal_side=None) if record.deal_side is not None else record
        deal = state.deals.get(record.deal_id)
        if deal is None:
            logger.warning(
                f"{type(record).__name__} {record.id} links to unknown deal {record.deal_id}"
            )
            return record.revise(deal_side=None) if record.deal_side is not None else record
        if record.deal_side == deal.side:
            return record
        return record.revise(deal_side=deal.side)

    # Deals

    def create_deal(
        self,
        name: str,
        property_address: str,
        side: DealSide = DealSide.BUYER,
        stage: DealStage = DealStage.LEAD,
        **fields: Any,
    ) -> Deal:
        """
        Build, validate and persist a new deal.

        Raises:
            RecordValidationError: If the deal fails the save gate
        """
        try:
            deal = Deal.create(
                name=name,
                property_address=property_address,
                side=side,
                stage=stage,
                clock=self.clock,
                id_generator=self.id_generator,
                **fields,
            )
        except ValidationError as e:
            raise RecordValidationError.from_pydantic(lifecycle.RECORD_TYPE, e) from e
        return self.add_deal(deal)

    def add_deal(self, deal: Deal) -> Deal:
        """Persist an already constructed deal under its own id."""
        with self._writing() as state:
            self._check_new_id(state, Collection.DEALS, deal.id)
            deal = lifecycle.prepare_for_save(deal, None, self.clock)
            state.deals[deal.id] = deal
            state.touch(Collection.DEALS)
        logger.debug(f"Created deal {deal.id}")
        return deal

    def update_deal(self, deal: Deal) -> Deal:
        """
        Replace the stored deal with the same id.

        A stage change made by editing `stage` directly gets the same
        bookkeeping as `set_stage`.

        Raises:
            RecordNotFoundError: If no deal has this id
            RecordValidationError: If the deal fails the save gate
        """
        return self._replace_deal(deal)

    def _replace_deal(self, deal: Deal, transitioned: bool = False) -> Deal:
        with self._writing() as state:
            previous = self._get(state, Collection.DEALS, deal.id)
            deal = lifecycle.prepare_for_save(
                deal, previous, self.clock, transitioned=transitioned
            )
            state.deals[deal.id] = deal
            state.touch(Collection.DEALS)
        return deal

    def set_stage(self, deal_id: str, stage: DealStage) -> Deal:
        """Transition a stored deal; setting its current stage changes nothing."""
        current = self.get_deal(deal_id)
        moved = lifecycle.set_stage(current, stage, self.clock)
        if moved is current:
            return current
        return self._replace_deal(moved, transitioned=True)

    def delete_deal(self, deal_id: str) -> CascadeResult:
        """
        Delete a deal together with every expense and activity linked to it.

        All three collections are written in one provider call, so no
        orphan can survive a partial failure.

        Raises:
            RecordNotFoundError: If no deal has this id
        """
        with self._writing() as state:
            self._get(state, Collection.DEALS, deal_id)
            expense_ids = tuple(i for i, e in state.expenses.items() if e.deal_id == deal_id)
            activity_ids = tuple(i for i, a in state.activities.items() if a.deal_id == deal_id)

            del state.deals[deal_id]
            for expense_id in expense_ids:
                del state.expenses[expense_id]
            for activity_id in activity_ids:
                del state.activities[activity_id]
            state.touch(*ENTITY_COLLECTIONS)

        logger.debug(
            f"Deleted deal {deal_id} with {len(expense_ids)} expenses "
            f"and {len(activity_ids)} activities"
        )
        return CascadeResult(
            deal_id=deal_id, expense_ids=expense_ids, activity_ids=activity_ids
        )

    # Expenses

    def create_expense(self, expense: ExpenseBase) -> ExpenseBase:
        """
        Persist a new expense.

        Raises:
            RecordValidationError: On a duplicate id or a failed save gate
        """
        with self._writing() as state:
            self._check_new_id(state, Collection.EXPENSES, expense.id)
            validate_expense_for_save(expense)
            expense = self._link(state, expense)
            state.expenses[expense.id] = expense
            state.touch(Collection.EXPENSES)
        return expense

    def update_expense(self, expense: ExpenseBase) -> ExpenseBase:
        with self._writing() as state:
            self._get(state, Collection.EXPENSES, expense.id)
            validate_expense_for_save(expense)
            expense = self._link(state, expense)
            state.expenses[expense.id] = expense
            state.touch(Collection.EXPENSES)
        return expense

    def delete_expense(self, expense_id: str) -> None:
        with self._writing() as state:
            self._get(state, Collection.EXPENSES, expense_id)
            del state.expenses[expense_id]
            state.touch(Collection.EXPENSES)

    # Activities

    def create_activity(self, activity: Activity) -> Activity:
        with self._writing() as state:
            self._check_new_id(state, Collection.ACTIVITIES, activity.id)
            activity = self._link(state, activity)
            state.activities[activity.id] = activity
            state.touch(Collection.ACTIVITIES)
        return activity

    def update_activity(self, activity: Activity) -> Activity:
        with self._writing() as state:
            self._get(state, Collection.ACTIVITIES, activity.id)
            activity = self._link(state, activity)
            state.activities[activity.id] = activity
            state.touch(Collection.ACTIVITIES)
        return activity

    def delete_activity(self, activity_id: str) -> None:
        with self._writing() as state:
            self._get(state, Collection.ACTIVITIES, activity_id)
            del state.activities[activity_id]
            state.touch(Collection.ACTIVITIES)

    # Batch

    def clear(self) -> None:
        """Remove every deal, expense and activity in one write."""
        with self._writing() as state:
            for collection in ENTITY_COLLECTIONS:
                state.tables[collection].clear()
            state.touch(*ENTITY_COLLECTIONS)
        logger.info("Cleared all deals, expenses and activities")

    def transaction(self) -> RepositoryTransaction:
        """
        Batch several mutations into one atomic provider write.

        Example:
            with repo.transaction():
                repo.delete_deal(old_id)
                repo.create_deal("New client", "5 Oak Court")
        """
        return RepositoryTransaction(self)

    def __len__(self) -> int:
        return len(self._view.deals)

    def __repr__(self) -> str:
        view = self._view
        return (
            f"Repository(deals={len(view.deals)}, expenses={len(view.expenses)}, "
            f"activities={len(view.activities)})"
        )


_RECORD_TYPES = {
    Collection.DEALS: "Deal",
    Collection.EXPENSES: "Expense",
    Collection.ACTIVITIES: "Activity",
}


__all__ = [
    "CascadeResult",
    "RecordNotFoundError",
    "Repository",
    "RepositoryTransaction",
]
