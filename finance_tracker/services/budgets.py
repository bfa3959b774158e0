import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import Depends

from ..core.errors import ConflictingBudget, ValidationError
from ..core.logging import get_logger
from ..models.budget import Budget
from ..store import RecordStore, get_store
from .records import OwnedRecordService, plain_value


class BudgetService(OwnedRecordService[Budget]):
    model = Budget
    label = "Budget"

    def default_order(self):
        return [Budget.start_date.desc()]

    def validate(self, record: Budget, changed):
        if record.end_date < record.start_date:
            raise ValidationError("End date must be on or after the start date")

    def find_overlapping(
        self,
        user_id: uuid.UUID,
        category: str,
        start_date: datetime,
        end_date: datetime,
    ) -> Optional[Budget]:
        return self.store.find_one(
            Budget,
            Budget.user_id == user_id,
            Budget.category == category,
            Budget.start_date <= end_date,
            Budget.end_date >= start_date,
        )

    def create(self, user_id: uuid.UUID, fields: Dict[str, Any]) -> Budget:
        category = plain_value(fields["category"])
        # Same check for every category, "All Categories" included
        existing = self.find_overlapping(user_id, category, fields["start_date"], fields["end_date"])
        if existing is not None:
            self._logger.info(
                "budget_conflict",
                user_id=str(user_id),
                category=category,
                existing_id=str(existing.id),
            )
            raise ConflictingBudget()
        return super().create(user_id, fields)


def get_budget_service(store: RecordStore = Depends(get_store), logger=Depends(get_logger)) -> BudgetService:
    return BudgetService(store, logger)
