"""Fee and payment-term derivation for admin-entered registrations and bookings.

Events charge their entry fee (none or zero means free). Court slots are free
for members and charged per slot for everyone else. Admin-entered records are
always stored with status "PAID"; the admin_paid flag is what tells the console
whether cash has actually been collected.
"""

from dataclasses import dataclass
from decimal import Decimal

from kreede.models.booking import BookingPaymentRef

# Stored on every admin-entered record regardless of admin_paid
ADMIN_ENTRY_STATUS = "PAID"

REF_FREE = "FREE"
REF_CASH = "CASH"


@dataclass(frozen=True)
class PaymentTerms:
    amount: Decimal
    admin_paid: bool
    payment_ref: str
    status: str = ADMIN_ENTRY_STATUS


def event_fee(entry_fee: Decimal | int | float | None) -> Decimal:
    """Entry fee as a non-negative Decimal. None counts as free."""
    fee = Decimal(str(entry_fee or 0))
    return max(Decimal(0), fee)


def registration_terms(entry_fee: Decimal | int | float | None, mark_paid: bool) -> PaymentTerms:
    """Derive what a registration owes and whether it counts as paid.

    Free events are always paid (mark_paid is ignored) with reference "FREE".
    Paid events are collected in cash: admin_paid follows mark_paid.
    """
    fee = event_fee(entry_fee)
    if fee <= 0:
        return PaymentTerms(amount=fee, admin_paid=True, payment_ref=REF_FREE)
    return PaymentTerms(amount=fee, admin_paid=bool(mark_paid), payment_ref=REF_CASH)


def booking_terms(slot_count: int, slot_price: int, is_member: bool, mark_paid: bool) -> PaymentTerms:
    """Derive the charge for an admin court booking.

    Members play on their membership: no charge, always paid. Everyone else
    pays slot_price per slot in cash.
    """
    if is_member:
        return PaymentTerms(amount=Decimal(0), admin_paid=True, payment_ref=BookingPaymentRef.MEMBERSHIP)
    return PaymentTerms(
        amount=Decimal(slot_count * slot_price),
        admin_paid=bool(mark_paid),
        payment_ref=BookingPaymentRef.CASH,
    )


def guest_booking_ref(admin_paid: bool) -> str:
    """Guest bookings encode the cash state in their payment reference."""
    return BookingPaymentRef.PAID_CASH if admin_paid else BookingPaymentRef.UNPAID_CASH
