from typing import Dict, Optional

from fastapi import APIRouter, Depends, status
from pydantic import EmailStr, field_validator
from sqlmodel import SQLModel, Field

from ..core.security import get_current_user
from ..models.user import User
from ..services.accounts import AccountService, get_account_service
from .auth import UserRead, check_currency, check_password, to_user_read


router = APIRouter(
    prefix="/users",
    tags=["users"],
)


class ProfileUpdate(SQLModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6)
    default_currency: Optional[str] = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: Optional[str]) -> Optional[str]:
        return check_password(value) if value is not None else None

    @field_validator("default_currency")
    @classmethod
    def normalize_currency(cls, value: Optional[str]) -> Optional[str]:
        return check_currency(value) if value is not None else None


class AccountDeletedOut(SQLModel):
    detail: str
    removed: Dict[str, int]


@router.get(
    "/me",
    response_model=UserRead,
)
def get_profile(current_user: User = Depends(get_current_user)):
    return to_user_read(current_user)


@router.patch(
    "/me",
    response_model=UserRead,
)
def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
):
    """Update only the profile fields present in the request body."""
    user = accounts.update_profile(current_user, payload.model_dump(exclude_unset=True))
    return to_user_read(user)


@router.delete(
    "/me",
    response_model=AccountDeletedOut,
    status_code=status.HTTP_200_OK,
)
def delete_account(
    current_user: User = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
):
    removed = accounts.delete_account(current_user)
    return AccountDeletedOut(
        detail="User account and associated data removed successfully",
        removed=removed,
    )
