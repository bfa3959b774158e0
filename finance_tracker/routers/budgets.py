import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import field_validator, model_validator
from sqlmodel import Field, SQLModel

from ..core.errors import ValidationError
from ..core.security import get_current_user
from ..models.common import Category, to_naive_utc
from ..models.user import User
from ..services.aggregation import inclusive_end, parse_date_range
from ..services.budgets import BudgetService, get_budget_service
from ..services.reports import ReportService, get_report_service
from .reports import BudgetReportOut, to_budget_report_out


router = APIRouter(
    prefix="/budgets",
    tags=["budgets"],
)


class BudgetBase(SQLModel):
    category: Category = Field(default=Category.ALL)
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    start_date: datetime
    end_date: datetime


class BudgetCreate(BudgetBase):
    @field_validator("end_date", mode="before")
    @classmethod
    def cover_whole_last_day(cls, value):
        return inclusive_end(value)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @model_validator(mode="after")
    def check_period(self):
        if self.end_date < self.start_date:
            raise ValueError("End date must be on or after the start date")
        return self


class BudgetUpdate(SQLModel):
    category: Optional[Category] = None
    amount: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("end_date", mode="before")
    @classmethod
    def cover_whole_last_day(cls, value):
        return inclusive_end(value)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value) if value is not None else None


class BudgetRead(BudgetBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime


@router.get(
    "",
    response_model=List[BudgetRead],
    status_code=status.HTTP_200_OK,
)
def list_budgets(
    budgets: BudgetService = Depends(get_budget_service),
    current_user: User = Depends(get_current_user),
):
    return budgets.list(current_user.id)


@router.post(
    "",
    response_model=BudgetRead,
    status_code=status.HTTP_201_CREATED,
)
def create_budget(
    payload: BudgetCreate,
    budgets: BudgetService = Depends(get_budget_service),
    current_user: User = Depends(get_current_user),
):
    """Create a budget; rejected with 409 when it overlaps one of the same category."""
    return budgets.create(current_user.id, payload.model_dump())


@router.get(
    "/status",
    response_model=BudgetReportOut,
    status_code=status.HTTP_200_OK,
)
def budget_status(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    category: Optional[str] = Query(default=None),
    reports: ReportService = Depends(get_report_service),
    current_user: User = Depends(get_current_user),
):
    if not start_date or not end_date:
        raise ValidationError("Please provide start and end dates for budget status.")
    period = parse_date_range(start_date, end_date)
    return to_budget_report_out(reports.budget_report(current_user.id, period, category))


@router.get(
    "/{budget_id}",
    response_model=BudgetRead,
)
def get_budget(
    budget_id: uuid.UUID,
    budgets: BudgetService = Depends(get_budget_service),
    current_user: User = Depends(get_current_user),
):
    return budgets.get(current_user.id, budget_id)


@router.patch(
    "/{budget_id}",
    response_model=BudgetRead,
)
def update_budget(
    budget_id: uuid.UUID,
    payload: BudgetUpdate,
    budgets: BudgetService = Depends(get_budget_service),
    current_user: User = Depends(get_current_user),
):
    return budgets.update(current_user.id, budget_id, payload.model_dump(exclude_unset=True))


@router.delete(
    "/{budget_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_budget(
    budget_id: uuid.UUID,
    budgets: BudgetService = Depends(get_budget_service),
    current_user: User = Depends(get_current_user),
):
    budgets.delete(current_user.id, budget_id)
    return None
