"""FastAPI dependencies for authentication.

Route handlers receive the authenticated user's ID as an explicit
parameter and pass it into the service layer.

## Usage

```python
from fastapi import Depends
from weather_hub.auth import get_current_user_id

@router.get("/favorites")
async def list_favorites(user_id: int = Depends(get_current_user_id)):
    ...
```
"""

from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from weather_hub.auth.session import Session, verify_session_token
from weather_hub.config import get_settings
from weather_hub.database.connection import get_db_session
from weather_hub.database.models import User

logger = logging.getLogger(__name__)


async def get_session(request: Request) -> Session | None:
    """Extract and verify session data from the session cookie.

    Returns None if no session or invalid session.
    """
    token = request.cookies.get(get_settings().session_cookie_name)
    if not token:
        return None

    return verify_session_token(token)


async def get_current_user_id(
    session: Session | None = Depends(get_session),
) -> int:
    """Get the authenticated user's ID without a database lookup.

    Raises 401 if not authenticated.
    """
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    return session.user_id


async def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """Get the authenticated user's row.

    Raises 401 if the session points at a user that no longer exists.
    """
    user = await db.get(User, user_id)
    if user is None:
        logger.warning(f"Session for non-existent user: {user_id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    return user
