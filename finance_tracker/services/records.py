import uuid
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, Generic, List, Sequence, Type, TypeVar

from fastapi import Depends
from sqlmodel import SQLModel

from ..core.errors import NotFound, ValidationError
from ..core.logging import get_logger
from ..models.common import utcnow
from ..models.expense import Expense
from ..models.goal import Goal
from ..models.income import Income
from ..store import RecordStore, get_store


T = TypeVar("T", bound=SQLModel)


def plain_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class OwnedRecordService(Generic[T]):
    """CRUD for records that belong to exactly one user.

    Every lookup is scoped to ``(id, user_id)``; a record owned by someone
    else is reported exactly like a missing one.
    """

    model: ClassVar[Type[SQLModel]]
    label: ClassVar[str]
    # Fields that may be explicitly cleared with null on update
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset()

    def __init__(self, store: RecordStore, logger):
        self.store = store
        self._logger = logger.bind(component=self.label.lower())

    def default_order(self) -> Sequence[Any]:
        return ()

    def validate(self, record: T, changed: Dict[str, Any]) -> None:
        """Hook for invariants spanning several fields, run before every write."""

    def list(self, user_id: uuid.UUID) -> List[T]:
        return self.store.find_many(
            self.model, self.model.user_id == user_id, order_by=self.default_order()
        )

    def get(self, user_id: uuid.UUID, record_id: uuid.UUID) -> T:
        record = self.store.find_one(
            self.model, self.model.id == record_id, self.model.user_id == user_id
        )
        if record is None:
            raise NotFound(f"{self.label} not found")
        return record

    def create(self, user_id: uuid.UUID, fields: Dict[str, Any]) -> T:
        now = utcnow()
        record = self.model(
            id=uuid.uuid4(),
            user_id=user_id,
            created_at=now,
            updated_at=now,
            **{key: plain_value(value) for key, value in fields.items()},
        )
        self.validate(record, fields)
        record = self.store.create(record)
        self._logger.info("record_created", user_id=str(user_id), record_id=str(record.id))
        return record

    def update(self, user_id: uuid.UUID, record_id: uuid.UUID, changes: Dict[str, Any]) -> T:
        """Apply only the fields present in ``changes``.

        ``0``, ``False`` and ``""`` are real values and get written; ``None``
        is only allowed for nullable fields.
        """
        record = self.get(user_id, record_id)
        if not changes:
            raise ValidationError("No fields to update")

        for key, value in changes.items():
            if value is None and key not in self.nullable_fields:
                raise ValidationError(f"'{key}' cannot be null")
            setattr(record, key, plain_value(value))

        self.validate(record, changes)
        record = self.store.update(record)
        self._logger.info(
            "record_updated",
            user_id=str(user_id),
            record_id=str(record.id),
            fields=sorted(changes),
        )
        return record

    def delete(self, user_id: uuid.UUID, record_id: uuid.UUID) -> None:
        record = self.get(user_id, record_id)
        self.store.delete(record)
        self._logger.info("record_deleted", user_id=str(user_id), record_id=str(record_id))


class _RecurringMixin:
    def validate(self, record, changed):
        # A frequency only makes sense on a recurring record
        if not record.is_recurring:
            record.recurring_frequency = None


class ExpenseService(_RecurringMixin, OwnedRecordService[Expense]):
    model = Expense
    label = "Expense"
    nullable_fields = frozenset({"description", "recurring_frequency"})

    def default_order(self):
        return [Expense.expense_date.desc(), Expense.created_at.desc()]


class IncomeService(_RecurringMixin, OwnedRecordService[Income]):
    model = Income
    label = "Income"
    nullable_fields = frozenset({"description", "recurring_frequency"})

    def default_order(self):
        return [Income.income_date.desc(), Income.created_at.desc()]


class GoalService(OwnedRecordService[Goal]):
    model = Goal
    label = "Goal"
    nullable_fields = frozenset({"description"})

    def default_order(self):
        return [Goal.target_date.asc()]

    def validate(self, record: Goal, changed):
        if "target_date" in changed and record.target_date <= utcnow():
            raise ValidationError("Target date must be in the future")


def get_expense_service(store: RecordStore = Depends(get_store), logger=Depends(get_logger)) -> ExpenseService:
    return ExpenseService(store, logger)


def get_income_service(store: RecordStore = Depends(get_store), logger=Depends(get_logger)) -> IncomeService:
    return IncomeService(store, logger)


def get_goal_service(store: RecordStore = Depends(get_store), logger=Depends(get_logger)) -> GoalService:
    return GoalService(store, logger)
