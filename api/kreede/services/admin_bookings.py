"""Admin-entered court bookings.

Members and account holders go into the bookings table, walk-in guests into
guest_bookings. Members play on their membership (free, one game per slot);
everyone else pays the per-slot price in cash.
"""

import logging
import time
import uuid
from datetime import date

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from kreede.core.config import settings
from kreede.models.booking import Booking, GuestBooking
from kreede.schemas import GuestRegistrant, MemberRegistrant, Registrant, SlotIn
from kreede.services.errors import NotFoundError, ValidationError
from kreede.services.membership_games import use_games
from kreede.services.pricing import booking_terms, guest_booking_ref

logger = logging.getLogger(__name__)


def generate_order_id() -> str:
    return f"admin_{int(time.time() * 1000)}_{uuid.uuid4().hex[:12]}"


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    text = value.strip()
    return text or None


async def create_admin_booking(
    db: AsyncSession,
    registrant: Registrant,
    booking_date: date | None,
    slots: list[SlotIn],
    mark_paid: bool = False,
) -> Booking | GuestBooking:
    if not slots:
        raise ValidationError("No slots selected")
    if booking_date is None:
        raise ValidationError("Missing date")

    is_member = isinstance(registrant, MemberRegistrant)
    terms = booking_terms(len(slots), settings.slot_price, is_member, mark_paid)
    slot_data = [s.model_dump() for s in slots]

    if isinstance(registrant, GuestRegistrant):
        name, phone = _clean(registrant.name), _clean(registrant.phone)
        if not name or not phone:
            raise ValidationError("Guest name and phone are required")
        booking = GuestBooking(
            order_id=generate_order_id(),
            user_name=name,
            phone_number=phone,
            booking_date=booking_date,
            slots=slot_data,
            amount=terms.amount,
            currency=settings.currency,
            status=terms.status,
            payment_ref=guest_booking_ref(terms.admin_paid),
            admin_paid=terms.admin_paid,
        )
    else:
        email = _clean(registrant.user_email)
        if not email:
            raise ValidationError("User email is required")
        booking = Booking(
            order_id=generate_order_id(),
            user_id=_clean(registrant.user_id),
            user_name=_clean(registrant.user_name) or "—",
            user_email=email.lower(),
            booking_date=booking_date,
            slots=slot_data,
            amount=terms.amount,
            currency=settings.currency,
            status=terms.status,
            payment_ref=terms.payment_ref,
            admin_paid=terms.admin_paid,
        )

    db.add(booking)
    await db.flush()

    if is_member:
        await use_games(db, _clean(registrant.user_id), len(slots))

    logger.info("Admin booking %s on %s: %s slots, %s", booking.order_id, booking_date, len(slots), booking.payment_ref)
    return booking


async def mark_booking_paid(db: AsyncSession, booking_id: int) -> bool:
    """Flag cash as collected. Returns True if it was already paid."""
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFoundError("Booking not found")

    if booking.admin_paid:
        return True

    booking.admin_paid = True
    await db.flush()
    return False


async def list_bookings(db: AsyncSession, query: str | None = None, booking_date: date | None = None) -> list[Booking]:
    """Registered-user bookings, newest first, optionally filtered by name/email and date."""
    stmt = select(Booking).order_by(Booking.created_at.desc(), Booking.id.desc())
    q = _clean(query)
    if q:
        stmt = stmt.where(
            or_(
                Booking.user_name.icontains(q, autoescape=True),
                Booking.user_email.icontains(q, autoescape=True),
            )
        )
    if booking_date is not None:
        stmt = stmt.where(Booking.booking_date == booking_date)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def mark_guest_booking_paid(db: AsyncSession, booking_id: int) -> bool:
    """Guest variant of mark_booking_paid; also moves the reference to PAID.CASH."""
    result = await db.execute(select(GuestBooking).where(GuestBooking.id == booking_id))
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFoundError("Guest booking not found")

    if booking.admin_paid:
        return True

    booking.admin_paid = True
    booking.payment_ref = guest_booking_ref(True)
    await db.flush()
    return False


async def clear_bookings(db: AsyncSession, query: str | None = None, booking_date: date | None = None) -> tuple[int, int]:
    """Delete bookings and guest bookings matching the list filters.

    Guests are matched by name only. Membership games are not restored.
    Returns (bookings deleted, guest bookings deleted).
    """
    q = _clean(query)
    registered = delete(Booking)
    guests = delete(GuestBooking)
    if q:
        registered = registered.where(
            or_(
                Booking.user_name.icontains(q, autoescape=True),
                Booking.user_email.icontains(q, autoescape=True),
            )
        )
        guests = guests.where(GuestBooking.user_name.icontains(q, autoescape=True))
    if booking_date is not None:
        registered = registered.where(Booking.booking_date == booking_date)
        guests = guests.where(GuestBooking.booking_date == booking_date)

    no_sync = {"synchronize_session": False}
    deleted = (await db.execute(registered, execution_options=no_sync)).rowcount or 0
    deleted_guests = (await db.execute(guests, execution_options=no_sync)).rowcount or 0
    logger.info("Cleared %s bookings and %s guest bookings (q=%r, date=%s)", deleted, deleted_guests, q, booking_date)
    return deleted, deleted_guests
