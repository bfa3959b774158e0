import uuid
from decimal import Decimal
from typing import Optional

from pydantic import NaiveDatetime
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from .common import utcnow


class Goal(SQLModel, table=True):
    __tablename__ = "goals"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)

    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)

    name: str = Field(max_length=100)
    target_amount: Decimal = Field(max_digits=12, decimal_places=2)
    saved_amount: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    target_date: NaiveDatetime = Field(sa_type=DateTime, index=True)
    description: Optional[str] = Field(default=None, max_length=500)
    is_completed: bool = Field(default=False)

    created_at: NaiveDatetime = Field(sa_type=DateTime, default_factory=utcnow)
    updated_at: NaiveDatetime = Field(sa_type=DateTime, default_factory=utcnow)
