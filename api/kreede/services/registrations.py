"""Event registration service.

Admins register members, account holders and walk-in guests for events from
the console. The registrant kind decides which identity fields are stored:
members and users are identified by email, guests by name and phone plus a
generated guest id. Fee and payment flags come from services.pricing.
"""

import logging
import time
import uuid
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from kreede.core.config import settings
from kreede.models.event import Event, EventRefund, RefundStatus, RegistrantType, Registration
from kreede.schemas import GuestRegistrant, Registrant
from kreede.services.errors import NotFoundError, ValidationError
from kreede.services.pricing import registration_terms

logger = logging.getLogger(__name__)

CANCEL_REASON = "Admin cancel registration"


def generate_guest_id() -> str:
    """Millisecond timestamp for ordering plus a random suffix for uniqueness."""
    return f"guest_{int(time.time() * 1000)}_{uuid.uuid4().hex[:12]}"


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    text = value.strip()
    return text or None


def _validate_registrant(registrant: Registrant) -> None:
    if isinstance(registrant, GuestRegistrant):
        if not _clean(registrant.name) or not _clean(registrant.phone):
            raise ValidationError("Guest name and phone are required")
    elif not _clean(registrant.user_email):
        raise ValidationError("User email is required")


async def register(
    db: AsyncSession,
    event_id: int | None,
    registrant: Registrant,
    mark_paid: bool = False,
    event_title: str | None = None,
) -> Registration:
    """Create one registration for an event, snapshotting its title and fee.

    Raises ValidationError for missing input and NotFoundError for an unknown
    event. Nothing is written unless every check passes.
    """
    if event_id is None:
        raise ValidationError("Missing event id")

    result = await db.execute(select(Event).where(Event.id == event_id))
    event = result.scalar_one_or_none()
    if event is None:
        raise NotFoundError("Event not found")

    _validate_registrant(registrant)

    terms = registration_terms(event.entry_fee, mark_paid)

    registration = Registration(
        event_id=event.id,
        event_title=_clean(event_title) or event.title or "",
        registrant_type=RegistrantType(registrant.type),
        amount=terms.amount,
        currency=settings.currency,
        status=terms.status,
        admin_paid=terms.admin_paid,
        payment_ref=terms.payment_ref,
    )

    if isinstance(registrant, GuestRegistrant):
        registration.guest_id = generate_guest_id()
        registration.guest_name = _clean(registrant.name)
        registration.guest_phone = _clean(registrant.phone)
    else:
        registration.user_id = _clean(registrant.user_id)
        registration.user_name = _clean(registrant.user_name) or "—"
        registration.user_email = _clean(registrant.user_email).lower()

    db.add(registration)
    await db.flush()

    logger.info(
        "Registered %s for event %s (ref=%s, admin_paid=%s)",
        registrant.type,
        event.id,
        terms.payment_ref,
        terms.admin_paid,
    )
    return registration


async def list_registrations(db: AsyncSession, event_id: int | None = None) -> list[Registration]:
    stmt = select(Registration).order_by(Registration.created_at.desc(), Registration.id.desc())
    if event_id is not None:
        stmt = stmt.where(Registration.event_id == event_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def mark_registration_paid(db: AsyncSession, registration_id: int) -> bool:
    """Flag cash as collected. Returns True if it was already paid."""
    result = await db.execute(select(Registration).where(Registration.id == registration_id))
    registration = result.scalar_one_or_none()
    if registration is None:
        raise NotFoundError("Registration not found")

    if registration.admin_paid:
        return True

    registration.admin_paid = True
    await db.flush()
    return False


def _snapshot(registration: Registration) -> dict:
    return {
        "id": registration.id,
        "event_id": registration.event_id,
        "event_title": registration.event_title,
        "registrant_type": str(registration.registrant_type),
        "user_id": registration.user_id,
        "user_name": registration.user_name,
        "user_email": registration.user_email,
        "guest_id": registration.guest_id,
        "guest_name": registration.guest_name,
        "guest_phone": registration.guest_phone,
        "amount": str(registration.amount),
        "currency": registration.currency,
        "admin_paid": registration.admin_paid,
        "payment_ref": registration.payment_ref,
    }


async def cancel_registration(db: AsyncSession, registration_id: int) -> EventRefund:
    """Delete a registration, recording what was removed in the refund ledger."""
    result = await db.execute(select(Registration).where(Registration.id == registration_id))
    registration = result.scalar_one_or_none()
    if registration is None:
        raise NotFoundError("Registration not found")

    refund = EventRefund(
        registration_id=registration.id,
        event_id=registration.event_id,
        event_title=registration.event_title or "Event",
        user_id=registration.user_id,
        user_email=registration.user_email,
        user_name=registration.user_name or registration.guest_name,
        amount=max(Decimal(0), Decimal(registration.amount or 0)),
        currency=registration.currency or settings.currency,
        status=RefundStatus.NO_REFUND_REQUIRED,
        reason=CANCEL_REASON,
        meta={"original": _snapshot(registration)},
    )
    db.add(refund)
    await db.delete(registration)
    await db.flush()

    logger.info("Cancelled registration %s for event %s", registration_id, refund.event_id)
    return refund


async def clear_registrations(db: AsyncSession, event_id: int) -> int:
    """Delete every registration for an event. Returns the number removed."""
    result = await db.execute(delete(Registration).where(Registration.event_id == event_id))
    logger.info("Cleared %s registrations for event %s", result.rowcount, event_id)
    return result.rowcount or 0
