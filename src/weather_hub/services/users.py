"""User account management."""

from __future__ import annotations

import logging

from pydantic import BaseModel, EmailStr, Field
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from weather_hub.auth.passwords import hash_password, verify_password
from weather_hub.database.models import User
from weather_hub.exceptions import (
    EmailAlreadyExistsError,
    InvalidCredentialsError,
    StorageError,
    UserNotFoundError,
)
from weather_hub.services.base import storage_errors

logger = logging.getLogger(__name__)


class UserRegistration(BaseModel):
    """Registration request."""

    email: EmailStr
    password: str = Field(..., min_length=8)
    country: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class UserProfileUpdate(BaseModel):
    """Partial profile update. Password changes go through update_password."""

    email: EmailStr | None = None
    country: str | None = Field(default=None, min_length=1)
    state: str | None = Field(default=None, min_length=1)
    city: str | None = Field(default=None, min_length=1)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class UserService:
    """Registration, login and profile maintenance."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register_user(self, data: UserRegistration) -> User:
        """Create a new account.

        Raises:
            EmailAlreadyExistsError: If the email is taken
        """
        with storage_errors("register user"):
            if await self._get_by_email(data.email) is not None:
                raise EmailAlreadyExistsError(data.email)

            user = User(
                email=data.email,
                password_hash=hash_password(data.password),
                country=data.country,
                state=data.state,
                city=data.city,
                latitude=data.latitude,
                longitude=data.longitude,
            )
            self.db.add(user)
            try:
                await self.db.commit()
            except IntegrityError as e:
                await self.db.rollback()
                raise EmailAlreadyExistsError(data.email) from e

        logger.info(f"Registered user {user.id} ({user.email})")
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """Check credentials and return the matching user.

        Raises:
            InvalidCredentialsError: If the email is unknown or password wrong
        """
        with storage_errors("authenticate user"):
            user = await self._get_by_email(email)

        if user is None:
            logger.info(f"Login attempt for unknown email {email}")
            raise InvalidCredentialsError("User not found. Please check your credentials.")

        if not verify_password(password, user.password_hash):
            logger.info(f"Wrong password for user {user.id}")
            raise InvalidCredentialsError("Incorrect password. Please check your credentials.")

        return user

    async def get_user(self, user_id: int) -> User:
        """Raises UserNotFoundError if the user does not exist."""
        with storage_errors("load user"):
            user = await self.db.get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def update_profile(self, user_id: int, data: UserProfileUpdate) -> User:
        """Apply the fields set in ``data`` to the user's profile.

        Raises:
            UserNotFoundError: If the user does not exist
            EmailAlreadyExistsError: If the new email belongs to another user
        """
        user = await self.get_user(user_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        with storage_errors("update user"):
            new_email = changes.get("email")
            if new_email is not None and new_email != user.email:
                other = await self._get_by_email(new_email)
                if other is not None and other.id != user_id:
                    raise EmailAlreadyExistsError(new_email)

            for field, value in changes.items():
                setattr(user, field, value)

            try:
                await self.db.commit()
            except IntegrityError as e:
                await self.db.rollback()
                raise EmailAlreadyExistsError(new_email or user.email) from e
            await self.db.refresh(user)

        logger.info(f"Updated profile for user {user_id}: {sorted(changes)}")
        return user

    async def update_password(
        self,
        user_id: int,
        old_password: str,
        new_password: str,
    ) -> None:
        """Replace the password after checking the current one.

        Raises:
            UserNotFoundError: If the user does not exist
            InvalidCredentialsError: If the old password is wrong
        """
        user = await self.get_user(user_id)

        if not verify_password(old_password, user.password_hash):
            raise InvalidCredentialsError(
                "Incorrect old password. Please check your credentials."
            )

        with storage_errors("update password"):
            user.password_hash = hash_password(new_password)
            await self.db.commit()

        logger.info(f"Password changed for user {user_id}")

    async def delete_user(self, user_id: int) -> None:
        """Delete an account.

        Favorites and search history are not removed first; the foreign keys
        restrict the delete while either exists.

        Raises:
            UserNotFoundError: If the user does not exist
            StorageError: If dependent rows block the delete
        """
        user = await self.get_user(user_id)

        with storage_errors("delete user"):
            try:
                await self.db.delete(user)
                await self.db.commit()
            except IntegrityError as e:
                await self.db.rollback()
                logger.warning(f"Delete of user {user_id} blocked by dependent rows")
                raise StorageError(
                    "User still has favorites or search history",
                    context={"user_id": user_id},
                ) from e

        logger.info(f"Deleted user {user_id}")

    async def _get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()
