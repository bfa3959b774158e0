import uuid
from decimal import Decimal

from pydantic import NaiveDatetime
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from .common import Category, utcnow


class Budget(SQLModel, table=True):
    __tablename__ = "budgets"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)

    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)

    category: str = Field(default=Category.ALL.value, max_length=50, index=True)

    amount: Decimal = Field(max_digits=12, decimal_places=2)

    # Closed interval; end_date >= start_date
    start_date: NaiveDatetime = Field(sa_type=DateTime, index=True)
    end_date: NaiveDatetime = Field(sa_type=DateTime, index=True)

    created_at: NaiveDatetime = Field(sa_type=DateTime, default_factory=utcnow)
    updated_at: NaiveDatetime = Field(sa_type=DateTime, default_factory=utcnow)
