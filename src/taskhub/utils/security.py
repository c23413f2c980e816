"""Password hashing helpers.

Passwords are hashed with Werkzeug's salted ``scrypt``/``pbkdf2`` scheme; the
stored string embeds method and salt so verification needs nothing else.
"""

from werkzeug.security import check_password_hash, generate_password_hash


def hash_password(password: str) -> str:
    """Return a salted one-way hash of *password*.

    Example:
        ```python
        stored = hash_password("s3cret!")
        verify_password(stored, "s3cret!")  # True
        ```
    """
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    """Return True if *password* matches the stored *password_hash*."""
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


__all__ = [
    "hash_password",
    "verify_password",
]
