"""User account routes: list/search, export, create and edit."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from kreede.core.database import get_db
from kreede.core.dependencies import get_current_admin
from kreede.models.member import Membership, User
from kreede.schemas import UserCreate, UserOut, UserUpdate, UserUpdated
from kreede.services.export import USER_FILTERS, XLSX_MEDIA_TYPE, users_workbook, xlsx_headers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(get_current_admin)])


def _conflict(field: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"A user with this {field} already exists.")


@router.get("", response_model=list[UserOut])
async def list_users(q: str = Query(""), db: AsyncSession = Depends(get_db)):
    stmt = select(User).order_by(User.created_at.desc(), User.id.desc())
    q = q.strip()
    if q:
        stmt = stmt.where(
            or_(
                User.name.icontains(q, autoescape=True),
                User.email.icontains(q, autoescape=True),
                User.phone.icontains(q, autoescape=True),
                User.user_id.icontains(q, autoescape=True),
            )
        )
    result = await db.execute(stmt)
    return result.scalars().all()


@router.get("/export")
async def export_users(
    q: str = Query("", description="Case-insensitive match on name"),
    membership_filter: str = Query("all", alias="filter", description="all, members or nonmembers"),
    db: AsyncSession = Depends(get_db),
):
    membership_filter = membership_filter.strip().lower() or "all"
    if membership_filter not in USER_FILTERS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid filter")

    stmt = select(User).order_by(User.created_at.desc(), User.id.desc())
    q = q.strip()
    if q:
        stmt = stmt.where(User.name.icontains(q, autoescape=True))
    users = (await db.execute(stmt)).scalars().all()

    memberships = []
    if users:
        user_ids = sorted({u.user_id for u in users})
        emails = sorted({u.email.lower() for u in users if u.email})
        names = sorted({u.name.strip() for u in users if u.name and u.name.strip()})
        result = await db.execute(
            select(Membership)
            .where(
                or_(
                    Membership.user_id.in_(user_ids),
                    Membership.user_email.in_(emails),
                    Membership.user_name.in_(names),
                )
            )
            .order_by(Membership.created_at.desc(), Membership.id.desc())
        )
        memberships = result.scalars().all()

    return Response(
        content=users_workbook(users, memberships, membership_filter),
        media_type=XLSX_MEDIA_TYPE,
        headers=xlsx_headers("users.xlsx"),
    )


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate, db: AsyncSession = Depends(get_db)):
    email = body.email.lower()
    result = await db.execute(select(User).where(or_(User.user_id == body.user_id, User.email == email)))
    existing = result.scalars().first()
    if existing:
        raise _conflict("username (user_id)" if existing.user_id == body.user_id else "email")

    user = User(
        user_id=body.user_id,
        name=body.name,
        email=email,
        phone=body.phone,
        dob=body.dob.isoformat() if body.dob else None,
    )
    db.add(user)
    await db.flush()
    return user


@router.patch("/{user_pk}", response_model=UserUpdated)
async def update_user(user_pk: int, body: UserUpdate, db: AsyncSession = Depends(get_db)):
    changes = body.model_dump(exclude_none=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update.")

    user = await db.get(User, user_pk)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")

    if body.user_id:
        clash = await db.execute(select(User.id).where(User.user_id == body.user_id, User.id != user_pk))
        if clash.first():
            raise _conflict("username (user_id)")
        user.user_id = body.user_id
    if body.email:
        email = body.email.lower()
        clash = await db.execute(select(User.id).where(User.email == email, User.id != user_pk))
        if clash.first():
            raise _conflict("email")
        user.email = email
    if body.name:
        user.name = body.name
    if body.phone:
        user.phone = body.phone
    if body.dob is not None:
        user.dob = body.dob.isoformat() if body.dob else None

    await db.flush()
    await db.refresh(user)
    logger.info("User %s updated: %s", user_pk, ", ".join(sorted(changes)))
    return UserUpdated(user=UserOut.model_validate(user))
