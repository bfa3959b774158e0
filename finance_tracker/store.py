"""
Record store on top of a SQLModel session.

Filters are plain SQLAlchemy column expressions, so equality
(``Expense.user_id == uid``), ranges (``Expense.expense_date >= start``) and
set membership (``Expense.category.in_(...)``) all go through the same
``*filters`` argument.
"""

from typing import Any, Iterable, List, Optional, Type, TypeVar

from fastapi import Depends
from sqlmodel import Session, SQLModel, select

from .core.logging import get_logger
from .database import get_session
from .models.common import utcnow


T = TypeVar("T", bound=SQLModel)


class RecordStore:
    def __init__(self, session: Session, logger):
        self.session = session
        self._logger = logger.bind(component="store")

    def create(self, record: T) -> T:
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return record

    def find_one(self, model: Type[T], *filters: Any) -> Optional[T]:
        return self.session.exec(select(model).where(*filters)).first()

    def find_many(
        self,
        model: Type[T],
        *filters: Any,
        order_by: Iterable[Any] = (),
    ) -> List[T]:
        statement = select(model).where(*filters).order_by(*order_by)
        return list(self.session.exec(statement).all())

    def update(self, record: T) -> T:
        if hasattr(record, "updated_at"):
            record.updated_at = utcnow()
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return record

    def delete(self, record: SQLModel) -> None:
        self.session.delete(record)
        self.session.commit()

    def delete_many(self, model: Type[SQLModel], *filters: Any) -> int:
        records = self.find_many(model, *filters)
        for record in records:
            self.session.delete(record)
        self.session.commit()
        count = len(records)
        self._logger.debug("records_bulk_deleted", table=model.__tablename__, count=count)
        return count


def get_store(
    session: Session = Depends(get_session),
    logger=Depends(get_logger),
) -> RecordStore:
    return RecordStore(session, logger)
