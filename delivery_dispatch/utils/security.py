"""Password hashing."""

from functools import lru_cache

from passlib.context import CryptContext

from delivery_dispatch.config import get_settings


@lru_cache()
def get_password_context() -> CryptContext:
    """Get the cached passlib context for the configured schemes."""
    return CryptContext(schemes=get_settings().password_schemes, deprecated="auto")


def hash_password(plain: str) -> str:
    return get_password_context().hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """Check a plain-text password against a stored hash; unknown hash formats never match."""
    try:
        return get_password_context().verify(plain, hashed)
    except ValueError:
        return False
