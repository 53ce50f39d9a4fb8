"""Membership game credits.

Each paid membership grants a fixed number of games. Court bookings made on
a membership consume games from the member's most recent PAID membership.
games_used never exceeds games.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kreede.models.member import Membership, MembershipStatus

logger = logging.getLogger(__name__)


async def _latest_paid_membership(db: AsyncSession, user_id: str) -> Membership | None:
    result = await db.execute(
        select(Membership)
        .where(Membership.user_id == user_id, Membership.status == MembershipStatus.PAID)
        .order_by(Membership.created_at.desc(), Membership.id.desc())
        .limit(1)
        .with_for_update()
    )
    return result.scalar_one_or_none()


async def use_games(db: AsyncSession, user_id: str | None, count: int = 1) -> Membership | None:
    """Consume count games. Returns the membership charged, or None if the user has none."""
    if not user_id:
        return None
    membership = await _latest_paid_membership(db, user_id)
    if membership is None:
        logger.info("No paid membership for %s; %s games not recorded", user_id, count)
        return None

    membership.games_used = min(membership.games, membership.games_used + max(1, count))
    await db.flush()
    return membership
