import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import field_validator
from sqlmodel import SQLModel, Field

from ..core.security import get_current_user
from ..models.common import Frequency, to_naive_utc, utcnow
from ..models.user import User
from ..services.records import IncomeService, get_income_service
from .expenses import strip_text

router = APIRouter(
    prefix="/incomes",
    tags=["incomes"],
)


class IncomeBase(SQLModel):
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    source: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    income_date: datetime = Field(default_factory=utcnow)
    is_recurring: bool = False
    recurring_frequency: Optional[Frequency] = None


class IncomeCreate(IncomeBase):
    @field_validator("source", "description", mode="before")
    @classmethod
    def strip_fields(cls, value):
        return strip_text(value)

    @field_validator("income_date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class IncomeUpdate(SQLModel):
    amount: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    source: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    income_date: Optional[datetime] = None
    is_recurring: Optional[bool] = None
    recurring_frequency: Optional[Frequency] = None

    @field_validator("source", "description", mode="before")
    @classmethod
    def strip_fields(cls, value):
        return strip_text(value)

    @field_validator("income_date")
    @classmethod
    def normalize_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value) if value is not None else None


class IncomeRead(IncomeBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime


@router.post(
    "",
    response_model=IncomeRead,
    status_code=status.HTTP_201_CREATED,
)
def create_income(
    income_in: IncomeCreate,
    incomes: IncomeService = Depends(get_income_service),
    current_user: User = Depends(get_current_user),
):
    return incomes.create(current_user.id, income_in.model_dump())


@router.get(
    "",
    response_model=List[IncomeRead],
)
def list_incomes(
    incomes: IncomeService = Depends(get_income_service),
    current_user: User = Depends(get_current_user),
):
    return incomes.list(current_user.id)


@router.get(
    "/{income_id}",
    response_model=IncomeRead,
)
def get_income(
    income_id: uuid.UUID,
    incomes: IncomeService = Depends(get_income_service),
    current_user: User = Depends(get_current_user),
):
    return incomes.get(current_user.id, income_id)


@router.patch(
    "/{income_id}",
    response_model=IncomeRead,
)
def update_income(
    income_id: uuid.UUID,
    income_in: IncomeUpdate,
    incomes: IncomeService = Depends(get_income_service),
    current_user: User = Depends(get_current_user),
):
    return incomes.update(current_user.id, income_id, income_in.model_dump(exclude_unset=True))


@router.delete(
    "/{income_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_income(
    income_id: uuid.UUID,
    incomes: IncomeService = Depends(get_income_service),
    current_user: User = Depends(get_current_user),
):
    incomes.delete(current_user.id, income_id)
    return
