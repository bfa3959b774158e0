import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import field_validator
from sqlmodel import SQLModel, Field

from ..core.security import get_current_user
from ..models.common import Category, Frequency, to_naive_utc, utcnow
from ..models.user import User
from ..services.records import ExpenseService, get_expense_service

router = APIRouter(
    prefix="/expenses",
    tags=["expenses"],
)

# ─────────────────────────────
#   SCHEMAS (Pydantic/SQLModel)
# ─────────────────────────────


def check_expense_category(value: Optional[Category]) -> Optional[Category]:
    if value is Category.ALL:
        raise ValueError("'All Categories' is only valid for budgets")
    return value


def strip_text(value: Optional[str]) -> Optional[str]:
    return value.strip() if isinstance(value, str) else value


class ExpenseBase(SQLModel):
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    category: Category = Field(default=Category.OTHERS)
    description: Optional[str] = Field(default=None, max_length=200)
    expense_date: datetime = Field(default_factory=utcnow)
    is_recurring: bool = False
    recurring_frequency: Optional[Frequency] = None


class ExpenseCreate(ExpenseBase):
    @field_validator("category")
    @classmethod
    def validate_category(cls, value):
        return check_expense_category(value)

    @field_validator("description", mode="before")
    @classmethod
    def strip_description(cls, value):
        return strip_text(value)

    @field_validator("expense_date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class ExpenseUpdate(SQLModel):
    amount: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    category: Optional[Category] = None
    description: Optional[str] = Field(default=None, max_length=200)
    expense_date: Optional[datetime] = None
    is_recurring: Optional[bool] = None
    recurring_frequency: Optional[Frequency] = None

    @field_validator("category")
    @classmethod
    def validate_category(cls, value):
        return check_expense_category(value)

    @field_validator("description", mode="before")
    @classmethod
    def strip_description(cls, value):
        return strip_text(value)

    @field_validator("expense_date")
    @classmethod
    def normalize_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value) if value is not None else None


class ExpenseRead(ExpenseBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime


# ─────────────────────────────
#   ENDPOINTS
# ─────────────────────────────

@router.post(
    "",
    response_model=ExpenseRead,
    status_code=status.HTTP_201_CREATED,
)
def create_expense(
    expense_in: ExpenseCreate,
    expenses: ExpenseService = Depends(get_expense_service),
    current_user: User = Depends(get_current_user),
):
    """
    Create an expense for the authenticated user.

    - The owner comes from the JWT via get_current_user, never from the body.
    """
    return expenses.create(current_user.id, expense_in.model_dump())


@router.get(
    "",
    response_model=List[ExpenseRead],
)
def list_expenses(
    expenses: ExpenseService = Depends(get_expense_service),
    current_user: User = Depends(get_current_user),
):
    """List the user's expenses, newest first."""
    return expenses.list(current_user.id)


@router.get(
    "/{expense_id}",
    response_model=ExpenseRead,
)
def get_expense(
    expense_id: uuid.UUID,
    expenses: ExpenseService = Depends(get_expense_service),
    current_user: User = Depends(get_current_user),
):
    return expenses.get(current_user.id, expense_id)


@router.patch(
    "/{expense_id}",
    response_model=ExpenseRead,
)
def update_expense(
    expense_id: uuid.UUID,
    expense_in: ExpenseUpdate,
    expenses: ExpenseService = Depends(get_expense_service),
    current_user: User = Depends(get_current_user),
):
    """Partially update an expense; fields left out of the body are kept."""
    return expenses.update(current_user.id, expense_id, expense_in.model_dump(exclude_unset=True))


@router.delete(
    "/{expense_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_expense(
    expense_id: uuid.UUID,
    expenses: ExpenseService = Depends(get_expense_service),
    current_user: User = Depends(get_current_user),
):
    expenses.delete(current_user.id, expense_id)
    return
