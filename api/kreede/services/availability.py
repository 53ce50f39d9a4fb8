"""Court availability for a date.

Collects the busy intervals of every court from registered-user bookings and
guest bookings. Intervals are returned in read order (registered bookings
first), without sorting or merging overlaps; the console draws them as-is.
"""

import math
from collections.abc import Iterable
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kreede.models.booking import Booking, GuestBooking
from kreede.services.errors import ValidationError


def parse_court_id(value: object) -> int | None:
    """Court id as an int, or None when it is not a finite whole number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if not math.isfinite(number) or not number.is_integer():
        return None
    return int(number)


def aggregate_slots(slot_lists: Iterable[list | None]) -> dict[int, list[dict]]:
    """Group slots by court id, keeping input order and duplicates."""
    availability: dict[int, list[dict]] = {}
    for slots in slot_lists:
        if not isinstance(slots, list):
            continue
        for slot in slots:
            if not isinstance(slot, dict):
                continue
            court_id = parse_court_id(slot.get("court_id"))
            if court_id is None:
                continue
            availability.setdefault(court_id, []).append({"start": slot.get("start"), "end": slot.get("end")})
    return availability


def parse_booking_date(value: str | None) -> date | None:
    """Parse a YYYY-MM-DD query value. Blank means no date."""
    text = (value or "").strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise ValidationError("date must be YYYY-MM-DD") from None


async def get_availability(db: AsyncSession, query_date: str | None) -> dict[int, list[dict]]:
    booking_date = parse_booking_date(query_date)
    if booking_date is None:
        return {}

    registered = await db.execute(
        select(Booking.slots).where(Booking.booking_date == booking_date).order_by(Booking.id)
    )
    guests = await db.execute(
        select(GuestBooking.slots).where(GuestBooking.booking_date == booking_date).order_by(GuestBooking.id)
    )
    return aggregate_slots([*registered.scalars().all(), *guests.scalars().all()])
