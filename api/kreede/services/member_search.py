"""Membership search for the admin console.

Finds PAID memberships whose name or email contains the query, then enriches
each hit with the canonical user profile matched by email. User fields win
over the copies stored on the membership. Results are deduplicated by email,
keeping the most recent membership for each person.

A failing database never breaks the search box: the error is logged and an
empty, failed result is returned instead.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from kreede.core.config import settings
from kreede.models.member import Membership, MembershipStatus, User

logger = logging.getLogger(__name__)


@dataclass
class MemberRow:
    id: int
    user_id: str | None
    name: str | None
    email: str
    phone: str | None


@dataclass
class MemberSearchResult:
    members: list[MemberRow] = field(default_factory=list)
    failed: bool = False


def _clean(value: object) -> str | None:
    """Trimmed string, or None when blank."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _email_key(value: object) -> str | None:
    email = _clean(value)
    return email.lower() if email else None


def merge_members(memberships: Iterable[Membership], users: Iterable[User]) -> list[MemberRow]:
    """Merge membership hits with user profiles and dedupe by email.

    memberships must already be in result order (newest first); the first
    row seen for an email is the one kept.
    """
    users_by_email: dict[str, User] = {}
    for user in users:
        key = _email_key(user.email)
        if key:
            users_by_email[key] = user

    rows: list[MemberRow] = []
    seen: set[str] = set()
    for m in memberships:
        key = _email_key(m.user_email)
        user = users_by_email.get(key) if key else None

        email = _email_key(user.email) if user else None
        email = email or key
        # Rows without any email cannot be deduplicated or contacted
        if not email or email in seen:
            continue
        seen.add(email)

        rows.append(
            MemberRow(
                id=user.id if user else m.id,
                user_id=(_clean(user.user_id) if user else None) or _clean(m.user_id),
                name=(_clean(user.name) if user else None) or _clean(m.user_name),
                email=email,
                phone=_clean(user.phone) if user else None,
            )
        )
    return rows


async def _fetch_paid_memberships(db: AsyncSession, query: str) -> list[Membership]:
    result = await db.execute(
        select(Membership)
        .where(
            Membership.status == MembershipStatus.PAID,
            or_(
                Membership.user_name.icontains(query, autoescape=True),
                Membership.user_email.icontains(query, autoescape=True),
            ),
        )
        .order_by(Membership.created_at.desc(), Membership.id.desc())
        .limit(settings.member_search_limit)
    )
    return list(result.scalars().all())


async def _fetch_users_by_email(db: AsyncSession, emails: set[str]) -> list[User]:
    if not emails:
        return []
    result = await db.execute(select(User).where(func.lower(User.email).in_(sorted(emails))))
    return list(result.scalars().all())


async def search_members(db: AsyncSession, query: str | None) -> MemberSearchResult:
    """Search paid members by name or email (case-insensitive substring)."""
    q = _clean(query)
    if not q:
        return MemberSearchResult()

    try:
        memberships = await _fetch_paid_memberships(db, q)
        if not memberships:
            return MemberSearchResult()

        emails = {key for key in (_email_key(m.user_email) for m in memberships) if key}
        users = await _fetch_users_by_email(db, emails)
    except SQLAlchemyError:
        logger.exception("Membership search failed for query %r", q)
        return MemberSearchResult(failed=True)

    return MemberSearchResult(members=merge_members(memberships, users))
