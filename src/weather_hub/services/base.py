"""Shared helpers for service classes."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from weather_hub.exceptions import StorageError, WeatherHubError

logger = logging.getLogger(__name__)

# Attempts for a find-then-insert sequence that loses a unique-constraint race
INSERT_OR_FETCH_ATTEMPTS = 3


def insert_or_fetch_retrying() -> AsyncRetrying:
    """Retry policy for find-then-insert blocks.

    A concurrent writer can insert the same key between our lookup and our
    insert. The storage unique constraint rejects the second insert with an
    ``IntegrityError``; the block is re-run so the lookup finds the winner.

    Usage:
    ```python
    async for attempt in insert_or_fetch_retrying():
        with attempt:
            row = await find()
            if row is None:
                async with db.begin_nested():
                    db.add(new_row)
    ```
    """
    return AsyncRetrying(
        stop=stop_after_attempt(INSERT_OR_FETCH_ATTEMPTS),
        retry=retry_if_exception_type(IntegrityError),
        reraise=True,
    )


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Wrap SQLAlchemy failures raised inside the block in ``StorageError``.

    Application errors pass through untouched.
    """
    try:
        yield
    except WeatherHubError:
        raise
    except SQLAlchemyError as e:
        logger.error(f"Storage failure while trying to {action}: {e}")
        raise StorageError(
            f"Failed to {action}",
            context={"detail": str(e)},
        ) from e
