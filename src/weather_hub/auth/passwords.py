"""Password hashing.

Passwords are hashed with PBKDF2-HMAC-SHA256 and a random per-password salt.

## Stored Format

```
pbkdf2_sha256$<iterations>$<salt, urlsafe base64>$<hash, urlsafe base64>
```

The iteration count is stored with each hash so it can be raised later
without invalidating existing passwords.

## Usage

```python
from weather_hub.auth.passwords import hash_password, verify_password

stored = hash_password("correct horse battery staple")
verify_password("correct horse battery staple", stored)  # True
```
"""

from __future__ import annotations

import base64
import hmac
import logging
import secrets

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from weather_hub.config import get_settings

logger = logging.getLogger(__name__)

ALGORITHM = "pbkdf2_sha256"
SALT_BYTES = 16
KEY_LENGTH = 32


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))


def hash_password(password: str, iterations: int | None = None) -> str:
    """Hash a password for storage.

    Args:
        password: Plaintext password
        iterations: PBKDF2 iterations (defaults to PASSWORD_HASH_ITERATIONS)

    Returns:
        Encoded hash string
    """
    if iterations is None:
        iterations = get_settings().password_hash_iterations

    salt = secrets.token_bytes(SALT_BYTES)
    digest = _derive(password, salt, iterations)
    return "$".join(
        [
            ALGORITHM,
            str(iterations),
            base64.urlsafe_b64encode(salt).decode("ascii"),
            base64.urlsafe_b64encode(digest).decode("ascii"),
        ]
    )


def verify_password(password: str, encoded: str) -> bool:
    """Check a password against a stored hash.

    Returns False for malformed hashes instead of raising.
    """
    try:
        algorithm, iterations, salt_b64, digest_b64 = encoded.split("$")
        if algorithm != ALGORITHM:
            return False
        salt = base64.urlsafe_b64decode(salt_b64)
        expected = base64.urlsafe_b64decode(digest_b64)
        rounds = int(iterations)
    except (ValueError, TypeError):
        logger.warning("Stored password hash is malformed")
        return False

    actual = _derive(password, salt, rounds)
    # Constant-time comparison
    return hmac.compare_digest(actual, expected)
