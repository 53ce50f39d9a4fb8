"""Pydantic schemas for API serialisation."""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, field_validator

from kreede.models.member import MembershipStatus, PlanId

HHMM = r"^\d{2}:\d{2}$"


class OkResponse(BaseModel):
    ok: bool = True
    already: bool | None = None


# --- Auth ---


class SignupRequest(BaseModel):
    name: str = Field(min_length=2, max_length=60)
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)


class SigninRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)


class AdminOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


class SessionOut(BaseModel):
    authenticated: bool
    admin: AdminOut | None = None


# --- Users ---


class UserCreate(BaseModel):
    user_id: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    phone: str = Field(pattern=r"^[0-9+\-\s]{7,15}$")
    dob: date | None = None

    @field_validator("user_id", "name", "phone", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    name: str
    email: str | None
    phone: str
    dob: str | None
    created_at: datetime


class UserUpdate(BaseModel):
    """Partial edit. Omitted fields are left alone; dob "" clears the date of birth."""

    user_id: str | None = Field(default=None, max_length=100)
    name: str | None = Field(default=None, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, pattern=r"^[0-9+\-\s]{7,15}$")
    dob: date | Literal[""] | None = None

    @field_validator("user_id", "name", "phone", mode="before")
    @classmethod
    def _strip(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("email", mode="before")
    @classmethod
    def _blank_email(cls, v):
        return None if isinstance(v, str) and not v.strip() else v

    @field_validator("dob", mode="before")
    @classmethod
    def _strip_dob(cls, v):
        return v.strip() if isinstance(v, str) else v


class UserUpdated(BaseModel):
    ok: bool = True
    user: UserOut


# --- Memberships ---


class MembershipCreate(BaseModel):
    user_email: EmailStr
    user_name: str = Field(min_length=1, max_length=200)
    user_id: str | None = None
    plan_id: PlanId = PlanId.ONE_MONTH
    amount: Decimal = Field(default=Decimal(0), ge=0)
    paid_now: bool = False

    @field_validator("plan_id", mode="before")
    @classmethod
    def _upper_plan(cls, v):
        return v.strip().upper() if isinstance(v, str) else v


class MembershipAction(BaseModel):
    action: str = ""


class MembershipOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_id: str
    amount: float
    currency: str
    plan_id: PlanId
    plan_name: str
    duration_months: int
    games: int
    games_used: int
    status: MembershipStatus
    user_id: str | None
    user_email: str
    user_name: str | None
    created_at: datetime


class MembershipCreated(BaseModel):
    ok: bool = True
    membership_id: int
    status: MembershipStatus


class MemberRowOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str | None
    name: str | None
    email: str
    phone: str | None


class MemberSearchOut(BaseModel):
    members: list[MemberRowOut]


# --- Events ---


class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    start_date: date
    end_date: date
    start_time: str | None = Field(default=None, pattern=HHMM)
    end_time: str | None = Field(default=None, pattern=HHMM)
    entry_fee: Decimal | None = Field(default=None, ge=0)
    link: HttpUrl
    description: str | None = None
    tags: list[str] = []
    created_by: str | None = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("start_time", "end_time", "entry_fee", mode="before")
    @classmethod
    def _blank_is_none(cls, v):
        return None if v == "" else v

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return [str(t).strip() for t in v if str(t).strip()]


class EventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    start_date: date
    end_date: date
    start_time: str | None
    end_time: str | None
    entry_fee: float | None
    link: str
    description: str | None
    tags: list[str]
    created_at: datetime


class EventCreated(BaseModel):
    ok: bool = True
    id: int


# --- Registrants ---
# One variant per registrant kind, each carrying only its own fields. Fields
# are optional here so the service can answer with its own short messages.


class IdentifiedRegistrant(BaseModel):
    user_id: str | None = None
    user_name: str | None = None
    user_email: str | None = None


class MemberRegistrant(IdentifiedRegistrant):
    type: Literal["member"]


class UserRegistrant(IdentifiedRegistrant):
    type: Literal["user"]


class GuestRegistrant(BaseModel):
    type: Literal["guest"]
    name: str | None = None
    phone: str | None = None


Registrant = Annotated[MemberRegistrant | UserRegistrant | GuestRegistrant, Field(discriminator="type")]


# --- Registrations ---


class AdminRegistrationCreate(BaseModel):
    event_id: int | None = None
    event_title: str | None = None
    mark_paid: bool = False
    registrant: Registrant


class RegistrationCreated(BaseModel):
    ok: bool = True
    id: int
    guest_id: str | None = None


class RegistrationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    event_title: str
    registrant_type: str
    user_id: str | None
    user_name: str | None
    user_email: str | None
    guest_id: str | None
    guest_name: str | None
    guest_phone: str | None
    amount: float
    currency: str
    status: str
    admin_paid: bool
    payment_ref: str | None
    created_at: datetime


class ClearedOut(BaseModel):
    ok: bool = True
    deleted: int


class CancelledOut(BaseModel):
    ok: bool = True
    deleted_id: int


# --- Bookings ---


class SlotIn(BaseModel):
    court_id: int
    start: str = Field(pattern=HHMM)
    end: str = Field(pattern=HHMM)


class AdminBookingCreate(BaseModel):
    booking_date: date | None = None
    slots: list[SlotIn] = []
    mark_paid: bool = False
    registrant: Registrant


class BookingCreated(BaseModel):
    ok: bool = True
    id: int
    # Guest bookings live in their own table; their ids overlap with regular ones
    kind: Literal["booking", "guest"]
    order_id: str | None


class BookingsCleared(BaseModel):
    ok: bool = True
    deleted_bookings: int
    deleted_guest_bookings: int


class IntervalOut(BaseModel):
    start: str | None
    end: str | None


class AvailabilityOut(BaseModel):
    availability: dict[int, list[IntervalOut]]
