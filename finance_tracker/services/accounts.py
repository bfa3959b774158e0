import uuid
from typing import Any, Dict, Optional

from fastapi import Depends

from ..core.errors import EmailAlreadyRegistered, Unauthenticated, ValidationError
from ..core.logging import get_logger
from ..core.security import hash_password, verify_password
from ..models.budget import Budget
from ..models.common import utcnow
from ..models.expense import Expense
from ..models.goal import Goal
from ..models.income import Income
from ..models.user import User
from ..store import RecordStore, get_store
from .email import EmailService, get_email_service


OWNED_KINDS = (Expense, Income, Budget, Goal)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AccountService:
    def __init__(self, store: RecordStore, email: EmailService, logger):
        self.store = store
        self.email = email
        self._logger = logger.bind(component="accounts")

    def find_by_email(self, email: str) -> Optional[User]:
        return self.store.find_one(User, User.email == normalize_email(email))

    def register(self, name: str, email: str, password: str, default_currency: str) -> User:
        email_norm = normalize_email(email)
        if self.find_by_email(email_norm) is not None:
            raise EmailAlreadyRegistered()

        now = utcnow()
        user = self.store.create(
            User(
                id=uuid.uuid4(),
                name=name.strip(),
                email=email_norm,
                hashed_password=hash_password(password),
                default_currency=default_currency,
                created_at=now,
                updated_at=now,
            )
        )
        self._logger.info("user_registered", user_id=str(user.id))
        self.email.send(
            to=user.email,
            subject="Welcome to Finance Tracker",
            message=f"Hi {user.name}, your account is ready.",
        )
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self.find_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            self._logger.info("login_failed")
            raise Unauthenticated("Invalid email or password")
        self._logger.info("login_succeeded", user_id=str(user.id))
        return user

    def update_profile(self, user: User, changes: Dict[str, Any]) -> User:
        """Presence-based profile update; only keys in ``changes`` are touched."""
        if not changes:
            raise ValidationError("No fields to update")
        for key, value in changes.items():
            if value is None:
                raise ValidationError(f"'{key}' cannot be null")

        if "email" in changes:
            email_norm = normalize_email(changes["email"])
            other = self.find_by_email(email_norm)
            if other is not None and other.id != user.id:
                raise EmailAlreadyRegistered("That email is already registered")
            user.email = email_norm
        if "name" in changes:
            user.name = changes["name"].strip()
        if "default_currency" in changes:
            user.default_currency = changes["default_currency"]
        if "password" in changes:
            user.hashed_password = hash_password(changes["password"])

        user = self.store.update(user)
        self._logger.info("profile_updated", user_id=str(user.id), fields=sorted(changes))
        return user

    def delete_account(self, user: User) -> Dict[str, int]:
        """Remove the user and everything they own.

        One bulk delete per record kind, then the user row. Not atomic: a
        failure half way leaves the remaining kinds in place.
        """
        removed = {}
        for kind in OWNED_KINDS:
            removed[kind.__tablename__] = self.store.delete_many(kind, kind.user_id == user.id)
        address, user_id = user.email, str(user.id)
        self.store.delete(user)
        self._logger.info("account_deleted", user_id=user_id, removed=removed)
        self.email.send(
            to=address,
            subject="Your Finance Tracker account was deleted",
            message="Your account and all associated data have been removed.",
        )
        return removed


def get_account_service(
    store: RecordStore = Depends(get_store),
    email: EmailService = Depends(get_email_service),
    logger=Depends(get_logger),
) -> AccountService:
    return AccountService(store, email, logger)
