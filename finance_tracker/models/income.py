import uuid
from decimal import Decimal
from typing import Optional
from pydantic import NaiveDatetime
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from .common import utcnow


class Income(SQLModel, table=True):
    __tablename__ = "incomes"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)

    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)

    amount: Decimal = Field(max_digits=12, decimal_places=2)
    # Free text, e.g. "Salary", "Freelance", "Gift"
    source: str = Field(max_length=100, index=True)
    description: Optional[str] = Field(default=None, max_length=500)
    income_date: NaiveDatetime = Field(sa_type=DateTime, default_factory=utcnow, index=True)

    is_recurring: bool = Field(default=False)
    recurring_frequency: Optional[str] = Field(default=None, max_length=10)

    created_at: NaiveDatetime = Field(sa_type=DateTime, default_factory=utcnow)
    updated_at: NaiveDatetime = Field(sa_type=DateTime, default_factory=utcnow)
