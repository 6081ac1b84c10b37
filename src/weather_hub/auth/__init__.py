"""Authentication module for the weather hub.

Provides password hashing and cookie-based session management.

## Login Flow

1. Client posts email and password to /api/users/login
2. Password is verified against the stored PBKDF2 hash
3. A signed session token is set as an HTTP-only cookie
4. Protected routes read the cookie and receive the user ID

## Security

- Passwords are never stored in plaintext
- Sessions use signed cookies
- HTTPS required in production
"""

from weather_hub.auth.passwords import hash_password, verify_password
from weather_hub.auth.session import (
    create_session_token,
    verify_session_token,
    Session,
    clear_session_cookie,
    set_session_cookie,
)
from weather_hub.auth.dependencies import (
    get_current_user,
    get_current_user_id,
)

__all__ = [
    "hash_password",
    "verify_password",
    "create_session_token",
    "verify_session_token",
    "Session",
    "set_session_cookie",
    "clear_session_cookie",
    "get_current_user",
    "get_current_user_id",
]
