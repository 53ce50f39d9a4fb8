"""User and membership models.

User = a person with an account at the facility (canonical name/email/phone).
Membership = a paid (or pending) plan that grants a number of court games.
The two are linked loosely: by the external user_id reference and by email.
"""

import enum
from decimal import Decimal
from typing import NamedTuple

from sqlalchemy import Enum, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from kreede.models.base import Base, TimestampMixin


class MembershipStatus(enum.StrEnum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"


class PlanId(enum.StrEnum):
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"


class PlanTerms(NamedTuple):
    duration_months: int
    plan_name: str
    games: int


PLAN_DEFAULTS = {
    PlanId.ONE_MONTH: PlanTerms(1, "1 month", 30),
    PlanId.THREE_MONTHS: PlanTerms(3, "3 months", 90),
    PlanId.SIX_MONTHS: PlanTerms(6, "6 months", 180),
}


class User(TimestampMixin, Base):
    """A person with an account. Authoritative source for name, email and phone."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)  # username
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(254), unique=True, index=True)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    dob: Mapped[str | None] = mapped_column(String(10))  # YYYY-MM-DD

    def __repr__(self) -> str:
        return f"<User {self.user_id}>"


class Membership(TimestampMixin, Base):
    __tablename__ = "memberships"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="INR", nullable=False)

    plan_id: Mapped[PlanId] = mapped_column(
        Enum(PlanId, name="plan_id", values_callable=lambda e: [x.value for x in e]),
        nullable=False,
    )
    plan_name: Mapped[str] = mapped_column(String(50), nullable=False)
    duration_months: Mapped[int] = mapped_column(nullable=False)
    games: Mapped[int] = mapped_column(nullable=False)
    games_used: Mapped[int] = mapped_column(default=0, nullable=False)

    status: Mapped[MembershipStatus] = mapped_column(
        Enum(MembershipStatus, name="membership_status", values_callable=lambda e: [x.value for x in e]),
        default=MembershipStatus.PENDING,
        nullable=False,
        index=True,
    )

    # Denormalised identity, copied from the user at purchase time
    user_id: Mapped[str | None] = mapped_column(String(100), index=True)
    user_email: Mapped[str] = mapped_column(String(254), nullable=False, index=True)
    user_name: Mapped[str | None] = mapped_column(String(200))

    __table_args__ = (Index("ix_memberships_user_status_created", "user_id", "status", "created_at"),)

    def __repr__(self) -> str:
        return f"<Membership {self.plan_id} {self.status} {self.user_email}>"
