"""Authentication utilities: password hashing, session tokens and the auth cookie."""

from datetime import UTC, datetime, timedelta

from fastapi import Response
from jose import JWTError, jwt
from passlib.context import CryptContext

from kreede.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_session_token(subject: str, email: str, name: str) -> str:
    """Sign a session token carrying the admin's id, email and name."""
    expire = datetime.now(UTC) + timedelta(days=settings.jwt_expires_days)
    payload = {"sub": subject, "email": email, "name": name, "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT. Raises JWTError on failure."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise


# ---------------------------------------------------------------------------
# Cookie transport
# ---------------------------------------------------------------------------


def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.jwt_expires_days * 24 * 60 * 60,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.auth_cookie_name, path="/", httponly=True)
