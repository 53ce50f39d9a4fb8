"""All models imported here so Base.metadata sees every table."""

from kreede.models.admin import Admin
from kreede.models.base import Base
from kreede.models.booking import Booking, BookingPaymentRef, GuestBooking
from kreede.models.event import Event, EventRefund, RefundStatus, RegistrantType, Registration
from kreede.models.member import Membership, MembershipStatus, PlanId, User

__all__ = [
    "Base",
    "Admin",
    "User",
    "Membership",
    "MembershipStatus",
    "PlanId",
    "Event",
    "Registration",
    "RegistrantType",
    "EventRefund",
    "RefundStatus",
    "Booking",
    "BookingPaymentRef",
    "GuestBooking",
]
