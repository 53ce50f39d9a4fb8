"""Court booking models.

A booking reserves one or more court slots on a single date. Registered
users' bookings and guest bookings live in separate tables but share the
slot shape: a JSON list of {"court_id", "start", "end"} objects, with
start/end as "HH:MM" strings.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from kreede.models.base import Base, JSONType, TimestampMixin


class BookingPaymentRef:
    MEMBERSHIP = "MEMBERSHIP"
    CASH = "CASH"
    PAID_CASH = "PAID.CASH"
    UNPAID_CASH = "UNPAID.CASH"


class Booking(TimestampMixin, Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[str | None] = mapped_column(String(100), unique=True)

    user_id: Mapped[str | None] = mapped_column(String(100), index=True)
    user_name: Mapped[str | None] = mapped_column(String(200))
    user_email: Mapped[str | None] = mapped_column(String(254), index=True)

    booking_date: Mapped[date] = mapped_column("date", Date, nullable=False, index=True)
    slots: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="INR", nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="PAID", nullable=False)
    payment_ref: Mapped[str | None] = mapped_column(String(20))
    admin_paid: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Booking {self.booking_date} slots={len(self.slots or [])} user={self.user_email}>"


class GuestBooking(TimestampMixin, Base):
    __tablename__ = "guest_bookings"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[str | None] = mapped_column(String(100), unique=True)

    user_name: Mapped[str | None] = mapped_column(String(200))
    phone_number: Mapped[str | None] = mapped_column(String(20), index=True)

    booking_date: Mapped[date] = mapped_column("date", Date, nullable=False, index=True)
    slots: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="INR", nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="PAID", nullable=False)
    payment_ref: Mapped[str] = mapped_column(String(20), nullable=False)
    admin_paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<GuestBooking {self.booking_date} slots={len(self.slots or [])} guest={self.user_name}>"
