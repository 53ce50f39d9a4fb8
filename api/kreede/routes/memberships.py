"""Membership routes: search, list, export, create and mark-paid."""

import logging
import time
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy import String, cast, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from kreede.core.config import settings
from kreede.core.database import get_db
from kreede.core.dependencies import get_current_admin
from kreede.models.member import PLAN_DEFAULTS, Membership, MembershipStatus, PlanId, User
from kreede.schemas import (
    MemberSearchOut,
    MembershipAction,
    MembershipCreate,
    MembershipCreated,
    MembershipOut,
    OkResponse,
)
from kreede.services.export import XLSX_MEDIA_TYPE, memberships_workbook, xlsx_headers
from kreede.services.member_search import search_members

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/memberships", tags=["memberships"], dependencies=[Depends(get_current_admin)])


@router.get("/search", response_model=MemberSearchOut)
async def search(q: str = Query(""), db: AsyncSession = Depends(get_db)):
    """Find paid members by name or email, enriched with their user profile."""
    result = await search_members(db, q)
    if result.failed:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Server error", "members": []},
        )
    return MemberSearchOut.model_validate(result, from_attributes=True)


@router.get("", response_model=list[MembershipOut])
async def list_memberships(q: str = Query(""), db: AsyncSession = Depends(get_db)):
    stmt = select(Membership).order_by(Membership.created_at.desc(), Membership.id.desc())
    q = q.strip()
    if q:
        stmt = stmt.where(
            or_(
                Membership.user_email.icontains(q, autoescape=True),
                Membership.user_name.icontains(q, autoescape=True),
                Membership.user_id.icontains(q, autoescape=True),
                cast(Membership.plan_id, String).icontains(q, autoescape=True),
            )
        )
    result = await db.execute(stmt)
    return result.scalars().all()


@router.get("/export")
async def export_memberships(
    q: str = Query(""),
    plan: str = Query("all", description="1M, 3M, 6M or all"),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(Membership).order_by(Membership.created_at.desc(), Membership.id.desc())
    q = q.strip()
    if q:
        stmt = stmt.where(
            or_(
                Membership.user_name.icontains(q, autoescape=True),
                Membership.user_email.icontains(q, autoescape=True),
            )
        )
    plan = plan.strip().upper()
    if plan and plan != "ALL":
        try:
            stmt = stmt.where(Membership.plan_id == PlanId(plan))
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid plan") from None

    memberships = (await db.execute(stmt)).scalars().all()

    user_ids = {m.user_id for m in memberships if m.user_id}
    phones: dict[str, str] = {}
    if user_ids:
        result = await db.execute(select(User.user_id, User.phone).where(User.user_id.in_(sorted(user_ids))))
        phones = {user_id: phone or "" for user_id, phone in result.all()}

    return Response(
        content=memberships_workbook(memberships, phones),
        media_type=XLSX_MEDIA_TYPE,
        headers=xlsx_headers("memberships.xlsx"),
    )


@router.post("", response_model=MembershipCreated, status_code=status.HTTP_201_CREATED)
async def create_membership(body: MembershipCreate, db: AsyncSession = Depends(get_db)):
    email = body.user_email.lower()
    user_id = (body.user_id or "").strip()

    conditions = [User.email == email]
    if user_id:
        conditions.append(User.user_id == user_id)
    result = await db.execute(select(User).where(or_(*conditions)))
    user = result.scalars().first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found. Please create the user first.",
        )

    duration_months, plan_name, games = PLAN_DEFAULTS[body.plan_id]
    membership = Membership(
        order_id=f"mem_{int(time.time() * 1000)}_{uuid.uuid4().hex[:12]}",
        amount=body.amount,
        currency=settings.currency,
        plan_id=body.plan_id,
        plan_name=plan_name,
        duration_months=duration_months,
        games=games,
        games_used=0,
        status=MembershipStatus.PAID if body.paid_now else MembershipStatus.PENDING,
        user_id=user.user_id,
        user_email=email,
        user_name=body.user_name.strip(),
    )
    db.add(membership)
    await db.flush()

    logger.info("Membership %s (%s) created for %s", membership.id, membership.status, email)
    return MembershipCreated(membership_id=membership.id, status=membership.status)


@router.patch("/{membership_id}", response_model=OkResponse, response_model_exclude_none=True)
async def update_membership(membership_id: int, body: MembershipAction, db: AsyncSession = Depends(get_db)):
    if body.action.strip().lower() != "markpaid":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unsupported action")

    result = await db.execute(select(Membership).where(Membership.id == membership_id))
    membership = result.scalar_one_or_none()
    if membership is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Membership not found")

    membership.status = MembershipStatus.PAID
    return OkResponse()
