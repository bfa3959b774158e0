import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import field_validator
from sqlmodel import SQLModel, Field

from ..core.security import get_current_user
from ..models.common import to_naive_utc, utcnow
from ..models.user import User
from ..services.records import GoalService, get_goal_service
from .expenses import strip_text


router = APIRouter(
    prefix="/goals",
    tags=["goals"],
)


class GoalBase(SQLModel):
    name: str = Field(min_length=1, max_length=100)
    target_amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    saved_amount: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    target_date: datetime
    description: Optional[str] = Field(default=None, max_length=500)
    is_completed: bool = False


class GoalCreate(GoalBase):
    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_fields(cls, value):
        return strip_text(value)

    @field_validator("target_date")
    @classmethod
    def check_future(cls, value: datetime) -> datetime:
        value = to_naive_utc(value)
        if value <= utcnow():
            raise ValueError("Target date must be in the future")
        return value


class GoalUpdate(SQLModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    target_amount: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    saved_amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    # Future-date rule for updates is enforced by GoalService
    target_date: Optional[datetime] = None
    description: Optional[str] = Field(default=None, max_length=500)
    is_completed: Optional[bool] = None

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_fields(cls, value):
        return strip_text(value)

    @field_validator("target_date")
    @classmethod
    def normalize_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value) if value is not None else None


class GoalRead(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    target_amount: Decimal
    saved_amount: Decimal
    target_date: datetime
    description: Optional[str] = None
    is_completed: bool
    created_at: datetime
    updated_at: datetime


@router.post(
    "",
    response_model=GoalRead,
    status_code=status.HTTP_201_CREATED,
)
def create_goal(
    payload: GoalCreate,
    goals: GoalService = Depends(get_goal_service),
    current_user: User = Depends(get_current_user),
):
    return goals.create(current_user.id, payload.model_dump())


@router.get(
    "",
    response_model=List[GoalRead],
)
def list_goals(
    goals: GoalService = Depends(get_goal_service),
    current_user: User = Depends(get_current_user),
):
    """List goals, nearest target date first."""
    return goals.list(current_user.id)


@router.get(
    "/{goal_id}",
    response_model=GoalRead,
)
def get_goal(
    goal_id: uuid.UUID,
    goals: GoalService = Depends(get_goal_service),
    current_user: User = Depends(get_current_user),
):
    return goals.get(current_user.id, goal_id)


@router.patch(
    "/{goal_id}",
    response_model=GoalRead,
)
def update_goal(
    goal_id: uuid.UUID,
    payload: GoalUpdate,
    goals: GoalService = Depends(get_goal_service),
    current_user: User = Depends(get_current_user),
):
    return goals.update(current_user.id, goal_id, payload.model_dump(exclude_unset=True))


@router.delete(
    "/{goal_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_goal(
    goal_id: uuid.UUID,
    goals: GoalService = Depends(get_goal_service),
    current_user: User = Depends(get_current_user),
):
    goals.delete(current_user.id, goal_id)
    return None
