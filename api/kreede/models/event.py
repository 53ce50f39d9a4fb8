"""Event and event-registration models.

An Event is an announcement with a date range and an optional entry fee.
A Registration records one person's place at an event. The event title and
fee are snapshotted onto the registration when it is created.
"""

import enum
from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, Enum, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from kreede.models.base import Base, JSONType, TimestampMixin


class RegistrantType(enum.StrEnum):
    MEMBER = "member"
    USER = "user"
    GUEST = "guest"


class RefundStatus(enum.StrEnum):
    # Cash is settled at the desk; gateway refund states are not tracked
    NO_REFUND_REQUIRED = "NO_REFUND_REQUIRED"


class Event(TimestampMixin, Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)

    start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[str | None] = mapped_column(String(5))  # HH:MM
    end_time: Mapped[str | None] = mapped_column(String(5))  # HH:MM

    # None or 0 = free
    entry_fee: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    link: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    created_by: Mapped[str | None] = mapped_column(String(100))

    def __repr__(self) -> str:
        return f"<Event {self.title} {self.start_date}>"


class Registration(TimestampMixin, Base):
    __tablename__ = "registrations"

    id: Mapped[int] = mapped_column(primary_key=True)
    # Plain reference, not a foreign key: registrations outlive deleted events
    event_id: Mapped[int] = mapped_column(nullable=False, index=True)
    event_title: Mapped[str] = mapped_column(String(200), default="", nullable=False)

    registrant_type: Mapped[RegistrantType] = mapped_column(
        Enum(RegistrantType, name="registrant_type", values_callable=lambda e: [x.value for x in e]),
        nullable=False,
    )

    # Identified registrants (member / user)
    user_id: Mapped[str | None] = mapped_column(String(100), index=True)
    user_name: Mapped[str | None] = mapped_column(String(200))
    user_email: Mapped[str | None] = mapped_column(String(254), index=True)

    # Guests
    guest_id: Mapped[str | None] = mapped_column(String(100), index=True)
    guest_name: Mapped[str | None] = mapped_column(String(200))
    guest_phone: Mapped[str | None] = mapped_column(String(20))

    # Payment
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="INR", nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="PAID", nullable=False)
    admin_paid: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    payment_ref: Mapped[str | None] = mapped_column(String(20))

    def __repr__(self) -> str:
        return f"<Registration event={self.event_id} {self.registrant_type}>"


class EventRefund(TimestampMixin, Base):
    """Ledger row written when an admin cancels a registration."""

    __tablename__ = "event_refunds"

    id: Mapped[int] = mapped_column(primary_key=True)
    registration_id: Mapped[int | None] = mapped_column(index=True)
    event_id: Mapped[int | None] = mapped_column(index=True)
    event_title: Mapped[str | None] = mapped_column(String(200))

    user_id: Mapped[str | None] = mapped_column(String(100), index=True)
    user_email: Mapped[str | None] = mapped_column(String(254), index=True)
    user_name: Mapped[str | None] = mapped_column(String(200))

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="INR", nullable=False)

    status: Mapped[RefundStatus] = mapped_column(
        Enum(RefundStatus, name="refund_status", values_callable=lambda e: [x.value for x in e]),
        default=RefundStatus.NO_REFUND_REQUIRED,
        nullable=False,
        index=True,
    )
    reason: Mapped[str | None] = mapped_column(Text)
    meta: Mapped[dict | None] = mapped_column(JSONType, default=dict)

    def __repr__(self) -> str:
        return f"<EventRefund registration={self.registration_id} {self.amount}>"
