"""FastAPI dependencies for injection into route handlers."""

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyCookie
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kreede.core.auth import decode_token
from kreede.core.config import settings
from kreede.core.database import get_db
from kreede.models.admin import Admin

cookie_scheme = APIKeyCookie(name=settings.auth_cookie_name, auto_error=False)


async def get_current_admin(
    token: str | None = Depends(cookie_scheme),
    db: AsyncSession = Depends(get_db),
) -> Admin:
    """Extract and validate the signed-in admin from the auth cookie."""
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    try:
        payload = decode_token(token)
        admin_id = int(payload["sub"])
    except (JWTError, KeyError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    result = await db.execute(select(Admin).where(Admin.id == admin_id))
    admin = result.scalar_one_or_none()
    if admin is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin not found")

    return admin
