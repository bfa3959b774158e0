import re
import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import EmailStr, field_validator
from sqlmodel import SQLModel, Field

from ..config import settings
from ..core.errors import ValidationError
from ..core.jwt import create_access_token
from ..core.security import get_current_user
from ..models.user import User
from ..services.accounts import AccountService, get_account_service


router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


def check_password(value: str) -> str:
    if any(c.isspace() for c in value):
        raise ValueError("Password must not contain whitespace")
    return value


def check_currency(value: str) -> str:
    value = value.strip().upper()
    if not _CURRENCY_RE.match(value):
        raise ValueError("Currency must be a three-letter code")
    return value


# ─────────────────────────────
#   SCHEMAS
# ─────────────────────────────

class RegisterIn(SQLModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)
    default_currency: Optional[str] = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return check_password(value)

    @field_validator("default_currency")
    @classmethod
    def normalize_currency(cls, value: Optional[str]) -> Optional[str]:
        return check_currency(value) if value is not None else None


class LoginIn(SQLModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserRead(SQLModel):
    id: uuid.UUID
    name: str
    email: str
    default_currency: str
    created_at: datetime
    updated_at: datetime


class TokenOut(SQLModel):
    access_token: str
    token_type: str = "bearer"


class AuthOut(TokenOut):
    user: UserRead


def issue_token(user: User) -> str:
    return create_access_token({"sub": str(user.id), "email": user.email})


def to_user_read(user: User) -> UserRead:
    return UserRead(
        id=user.id,
        name=user.name,
        email=user.email,
        default_currency=user.default_currency,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


# ─────────────────────────────
#   ENDPOINTS
# ─────────────────────────────

@router.post(
    "/register",
    response_model=AuthOut,
    status_code=status.HTTP_201_CREATED,
)
def register_user(
    payload: RegisterIn,
    accounts: AccountService = Depends(get_account_service),
):
    user = accounts.register(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        default_currency=payload.default_currency or settings.default_currency,
    )
    return AuthOut(access_token=issue_token(user), user=to_user_read(user))


@router.post(
    "/login",
    response_model=AuthOut,
    status_code=status.HTTP_200_OK,
)
def login(payload: LoginIn, accounts: AccountService = Depends(get_account_service)):
    user = accounts.authenticate(payload.email, payload.password)
    return AuthOut(access_token=issue_token(user), user=to_user_read(user))


@router.post(
    "/token",
    response_model=TokenOut,
    status_code=status.HTTP_200_OK,
)
def token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    accounts: AccountService = Depends(get_account_service),
):
    # OAuth2PasswordRequestForm carries the email in 'username'
    if not form_data.username or not form_data.password:
        raise ValidationError("Please provide email and password")
    user = accounts.authenticate(form_data.username, form_data.password)
    return TokenOut(access_token=issue_token(user))


@router.get(
    "/me",
    response_model=UserRead,
    status_code=status.HTTP_200_OK,
)
def me(current_user: User = Depends(get_current_user)):
    return to_user_read(current_user)
