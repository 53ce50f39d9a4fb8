"""Authentication routes: admin signup, signin, signout and current session."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kreede.core.auth import (
    clear_auth_cookie,
    create_session_token,
    decode_token,
    hash_password,
    set_auth_cookie,
    verify_password,
)
from kreede.core.database import get_db
from kreede.core.dependencies import cookie_scheme
from kreede.models.admin import Admin
from kreede.schemas import AdminOut, OkResponse, SessionOut, SigninRequest, SignupRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _start_session(response: Response, admin: Admin) -> None:
    token = create_session_token(str(admin.id), admin.email, admin.name)
    set_auth_cookie(response, token)


@router.post(
    "/signup", response_model=OkResponse, response_model_exclude_none=True, status_code=status.HTTP_201_CREATED
)
async def signup(body: SignupRequest, response: Response, db: AsyncSession = Depends(get_db)):
    email = body.email.lower()
    existing = await db.execute(select(Admin).where(Admin.email == email))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    admin = Admin(name=body.name.strip(), email=email, hashed_password=hash_password(body.password))
    db.add(admin)
    await db.flush()

    _start_session(response, admin)
    logger.info("Admin account created for %s", email)
    return OkResponse()


@router.post("/signin", response_model=OkResponse, response_model_exclude_none=True)
async def signin(body: SigninRequest, response: Response, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Admin).where(Admin.email == body.email.lower()))
    admin = result.scalar_one_or_none()

    if not admin or not verify_password(body.password, admin.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    _start_session(response, admin)
    return OkResponse()


@router.post("/signout", response_model=OkResponse, response_model_exclude_none=True)
async def signout(response: Response):
    clear_auth_cookie(response)
    return OkResponse()


@router.get("/me", response_model=SessionOut)
async def me(token: str | None = Depends(cookie_scheme)):
    """Report the session carried by the cookie. The token alone is trusted here."""
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        payload = decode_token(token)
        admin = AdminOut(id=int(payload["sub"]), email=payload["email"], name=payload["name"])
    except (JWTError, KeyError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from None
    return SessionOut(authenticated=True, admin=admin)
