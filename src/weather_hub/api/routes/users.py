"""User account routes.

Registration, login and logout are public; the /me routes require a session.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, EmailStr, Field

from weather_hub.api.dependencies import get_user_service
from weather_hub.api.schemas import MessageResponse
from weather_hub.auth.dependencies import get_current_user, get_current_user_id
from weather_hub.auth.session import clear_session_cookie, set_session_cookie
from weather_hub.database.models import User
from weather_hub.services.users import UserProfileUpdate, UserRegistration, UserService

router = APIRouter()


class UserResponse(BaseModel):
    """User profile response. Never includes the password hash."""

    id: int
    email: str
    country: str
    state: str
    city: str
    latitude: float
    longitude: float
    created_at: datetime | None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)


class PasswordUpdateRequest(BaseModel):
    old_password: str
    new_password: str = Field(..., min_length=8)


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        country=user.country,
        state=user.state,
        city=user.city,
        latitude=user.latitude,
        longitude=user.longitude,
        created_at=user.created_at,
    )


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_user(
    data: UserRegistration,
    users: UserService = Depends(get_user_service),
) -> MessageResponse:
    """Create an account."""
    await users.register_user(data)
    return MessageResponse(message="User registered successfully.")


@router.post("/login", response_model=MessageResponse)
async def login_user(
    data: LoginRequest,
    response: Response,
    users: UserService = Depends(get_user_service),
) -> MessageResponse:
    """Verify credentials and start a session."""
    user = await users.authenticate(data.email, data.password)
    set_session_cookie(response, user.id)
    return MessageResponse(message="User logged in successfully.")


@router.post("/logout", response_model=MessageResponse)
async def logout_user(response: Response) -> MessageResponse:
    """Clear the session cookie."""
    clear_session_cookie(response)
    return MessageResponse(message="User logged out successfully.")


@router.get("/me", response_model=UserResponse)
async def get_profile(user: User = Depends(get_current_user)) -> UserResponse:
    """Get the current user's profile."""
    return _user_response(user)


@router.patch("/me", response_model=UserResponse)
async def update_profile(
    data: UserProfileUpdate,
    user_id: int = Depends(get_current_user_id),
    users: UserService = Depends(get_user_service),
) -> UserResponse:
    """Update profile fields other than the password."""
    user = await users.update_profile(user_id, data)
    return _user_response(user)


@router.put("/me/password", response_model=MessageResponse)
async def update_password(
    data: PasswordUpdateRequest,
    user_id: int = Depends(get_current_user_id),
    users: UserService = Depends(get_user_service),
) -> MessageResponse:
    """Change the password after verifying the current one."""
    await users.update_password(user_id, data.old_password, data.new_password)
    return MessageResponse(message="User password updated successfully.")


@router.delete("/me", response_model=MessageResponse)
async def delete_profile(
    response: Response,
    user_id: int = Depends(get_current_user_id),
    users: UserService = Depends(get_user_service),
) -> MessageResponse:
    """Delete the current user's account and end the session."""
    await users.delete_user(user_id)
    clear_session_cookie(response)
    return MessageResponse(message="User profile deleted successfully.")
