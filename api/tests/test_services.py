"""Service tests: pricing terms, member merge, availability parsing, export rows."""

import re
from datetime import date, datetime
from decimal import Decimal
from io import BytesIO
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from openpyxl import load_workbook
from sqlalchemy.exc import OperationalError

from kreede.models.booking import BookingPaymentRef
from kreede.models.event import RefundStatus, Registration
from kreede.models.member import PLAN_DEFAULTS, MembershipStatus, PlanId
from kreede.services.availability import aggregate_slots, parse_booking_date, parse_court_id
from kreede.services.errors import ValidationError
from kreede.services.export import (
    BOOKING_COLUMNS,
    add_months,
    booking_rows,
    bookings_workbook,
    match_memberships,
    membership_rows,
    user_rows,
)
from kreede.services.member_search import merge_members, search_members
from kreede.services.pricing import booking_terms, event_fee, guest_booking_ref, registration_terms
from kreede.services.registrations import generate_guest_id


def _membership(id, email, name=None, user_id=None):
    return SimpleNamespace(id=id, user_email=email, user_name=name, user_id=user_id)


def _user(id, email, name=None, user_id=None, phone=None):
    return SimpleNamespace(id=id, email=email, name=name, user_id=user_id, phone=phone)


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------


def test_event_fee_none_is_free():
    assert event_fee(None) == Decimal(0)


def test_event_fee_negative_clamped():
    assert event_fee(Decimal("-50")) == Decimal(0)


def test_registration_terms_free_event_ignores_mark_paid():
    terms = registration_terms(0, mark_paid=False)
    assert terms.amount == 0
    assert terms.admin_paid is True
    assert terms.payment_ref == "FREE"
    assert terms.status == "PAID"


def test_registration_terms_paid_event_follows_mark_paid():
    unpaid = registration_terms(Decimal("300"), mark_paid=False)
    paid = registration_terms(Decimal("300"), mark_paid=True)

    assert unpaid.amount == Decimal("300")
    assert unpaid.admin_paid is False
    assert unpaid.payment_ref == "CASH"
    # Status stays PAID even when cash is outstanding
    assert unpaid.status == "PAID"
    assert paid.admin_paid is True


def test_booking_terms_member_is_free():
    terms = booking_terms(3, 500, is_member=True, mark_paid=False)
    assert terms.amount == 0
    assert terms.admin_paid is True
    assert terms.payment_ref == BookingPaymentRef.MEMBERSHIP


def test_booking_terms_non_member_pays_per_slot():
    terms = booking_terms(3, 500, is_member=False, mark_paid=False)
    assert terms.amount == Decimal(1500)
    assert terms.admin_paid is False
    assert terms.payment_ref == BookingPaymentRef.CASH


def test_guest_booking_ref():
    assert guest_booking_ref(True) == "PAID.CASH"
    assert guest_booking_ref(False) == "UNPAID.CASH"


def test_guest_id_format():
    first, second = generate_guest_id(), generate_guest_id()
    assert re.fullmatch(r"guest_\d+_[0-9a-f]{12}", first)
    assert first != second


# ---------------------------------------------------------------------------
# Member search merge
# ---------------------------------------------------------------------------


def test_merge_user_fields_override_membership():
    rows = merge_members(
        [_membership(10, "Asha@Example.com", name="Asha", user_id="old-id")],
        [_user(3, "asha@example.com", name="Asha Rao", user_id="asha", phone="9876543210")],
    )

    assert len(rows) == 1
    row = rows[0]
    assert row.id == 3
    assert row.user_id == "asha"
    assert row.name == "Asha Rao"
    assert row.email == "asha@example.com"
    assert row.phone == "9876543210"


def test_merge_without_user_falls_back_to_membership():
    rows = merge_members([_membership(10, "ravi@example.com", name="Ravi", user_id="ravi")], [])

    assert rows[0].id == 10
    assert rows[0].name == "Ravi"
    assert rows[0].user_id == "ravi"
    assert rows[0].phone is None


def test_merge_blank_user_field_does_not_hide_membership_value():
    rows = merge_members(
        [_membership(10, "ravi@example.com", name="Ravi")],
        [_user(4, "ravi@example.com", name="  ", user_id="ravi")],
    )
    assert rows[0].name == "Ravi"


def test_merge_dedupes_by_email_keeping_first():
    rows = merge_members(
        [
            _membership(12, "ravi@example.com", name="Ravi newest"),
            _membership(11, "RAVI@example.com", name="Ravi older"),
            _membership(10, "meera@example.com", name="Meera"),
        ],
        [],
    )

    assert [r.email for r in rows] == ["ravi@example.com", "meera@example.com"]
    assert rows[0].name == "Ravi newest"


def test_merge_skips_rows_without_email():
    rows = merge_members([_membership(1, None, name="Nobody"), _membership(2, "  ", name="Blank")], [])
    assert rows == []


async def test_search_blank_query_skips_database():
    db = AsyncMock()
    result = await search_members(db, "   ")

    assert result.members == []
    assert result.failed is False
    db.execute.assert_not_called()


async def test_search_database_error_reports_failure():
    db = AsyncMock()
    db.execute.side_effect = OperationalError("SELECT", {}, Exception("connection refused"))

    result = await search_members(db, "asha")

    assert result.failed is True
    assert result.members == []


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "value,expected",
    [(1, 1), ("2", 2), (" 3 ", 3), (4.0, 4), ("abc", None), (None, None), (True, None), (1.5, None), ("nan", None)],
)
def test_parse_court_id(value, expected):
    assert parse_court_id(value) == expected


def test_aggregate_keeps_order_and_duplicates():
    availability = aggregate_slots(
        [
            [{"court_id": 1, "start": "06:00", "end": "07:00"}],
            [{"court_id": "1", "start": "06:00", "end": "07:00"}, {"court_id": 2, "start": "08:00", "end": "09:00"}],
        ]
    )

    assert availability == {
        1: [{"start": "06:00", "end": "07:00"}, {"start": "06:00", "end": "07:00"}],
        2: [{"start": "08:00", "end": "09:00"}],
    }


def test_aggregate_drops_bad_court_ids_and_malformed_slots():
    availability = aggregate_slots(
        [
            [{"court_id": "abc", "start": "06:00", "end": "07:00"}, "not-a-slot"],
            None,
            {"court_id": 1},
            [{"court_id": 3, "start": "10:00", "end": "11:00"}],
        ]
    )
    assert availability == {3: [{"start": "10:00", "end": "11:00"}]}


def test_parse_booking_date():
    assert parse_booking_date("2026-11-07") == date(2026, 11, 7)
    assert parse_booking_date("") is None
    assert parse_booking_date(None) is None


def test_parse_booking_date_rejects_garbage():
    with pytest.raises(ValidationError, match="YYYY-MM-DD"):
        parse_booking_date("07/11/2026")


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def _booking(slots, name="Asha", email="asha@example.com"):
    return SimpleNamespace(
        user_name=name,
        user_email=email,
        booking_date=date(2026, 11, 7),
        amount=Decimal("1000"),
        currency="INR",
        slots=slots,
    )


def test_booking_rows_one_per_slot():
    rows = booking_rows(
        [
            _booking(
                [{"court_id": 1, "start": "06:00", "end": "07:00"}, {"court_id": 2, "start": "07:00", "end": "08:00"}]
            )
        ]
    )

    assert rows == [
        ["Asha", "asha@example.com", "2026-11-07", 1000.0, "INR", 1, "06:00", "07:00"],
        ["Asha", "asha@example.com", "2026-11-07", 1000.0, "INR", 2, "07:00", "08:00"],
    ]


def test_booking_rows_without_slots_still_listed():
    rows = booking_rows([_booking([], name=None)])
    assert rows == [["", "asha@example.com", "2026-11-07", 1000.0, "INR", "", "", ""]]


def test_bookings_workbook_has_header_and_rows():
    data = bookings_workbook([_booking([{"court_id": 1, "start": "06:00", "end": "07:00"}])])

    sheet = load_workbook(BytesIO(data)).active
    assert sheet.title == "Bookings"
    assert [c.value for c in sheet[1]] == [header for header, _ in BOOKING_COLUMNS]
    assert sheet[1][0].font.bold
    assert [c.value for c in sheet[2]] == ["Asha", "asha@example.com", "2026-11-07", 1000, "INR", 1, "06:00", "07:00"]


def _plan(id, plan_id=PlanId.ONE_MONTH, user_id=None, email="", name=None, **extra):
    return SimpleNamespace(
        id=id,
        plan_id=plan_id,
        plan_name=PLAN_DEFAULTS[plan_id].plan_name,
        status=MembershipStatus.PAID,
        user_id=user_id,
        user_email=email,
        user_name=name,
        **extra,
    )


def test_add_months_clamps_to_month_end():
    assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
    assert add_months(date(2028, 1, 31), 1) == date(2028, 2, 29)
    assert add_months(date(2026, 11, 15), 3) == date(2027, 2, 15)
    assert add_months(date(2026, 8, 31), 6) == date(2027, 2, 28)


def test_match_memberships_prefers_user_id_then_email_then_name():
    users = [
        _user(1, "asha@example.com", name="Asha Rao", user_id="asha"),
        _user(2, "Ravi@Example.com", name="Ravi", user_id="ravi"),
        _user(3, None, name=" Meera ", user_id="meera"),
        _user(4, "nobody@example.com", name="Nobody", user_id="nobody"),
    ]
    # Newest first
    memberships = [
        _plan(10, email="asha@example.com"),
        _plan(11, user_id="asha", plan_id=PlanId.SIX_MONTHS),
        _plan(12, email=" ravi@example.com "),
        _plan(13, name="Meera"),
        _plan(14, user_id="asha"),
    ]

    matched = match_memberships(users, memberships)

    assert {uid: m.id for uid, m in matched.items()} == {1: 11, 2: 12, 3: 13}


def test_user_rows_membership_filter():
    users = [
        _user(1, "asha@example.com", name="Asha Rao", user_id="asha", phone="9876543210"),
        _user(2, "meera@example.com", name="Meera", user_id="meera"),
    ]
    for u in users:
        u.dob = None
    memberships = [_plan(10, plan_id=PlanId.THREE_MONTHS, user_id="asha")]

    assert user_rows(users, memberships) == [
        ["Asha Rao", "asha@example.com", "9876543210", "", "3M", "3 months", "PAID"],
        ["Meera", "meera@example.com", "", "", "No membership", "", ""],
    ]
    assert [r[0] for r in user_rows(users, memberships, "members")] == ["Asha Rao"]
    assert [r[0] for r in user_rows(users, memberships, "nonmembers")] == ["Meera"]


def test_membership_rows_period_and_amount():
    m = _plan(
        10,
        plan_id=PlanId.SIX_MONTHS,
        user_id="asha",
        email="asha@example.com",
        name="Asha",
        amount=Decimal("7500"),
        currency="INR",
        duration_months=6,
        created_at=datetime(2026, 8, 31, 9, 30),
    )
    walk_in = _plan(11, email="x@example.com", amount=None, currency="INR", duration_months=1, created_at=None)

    assert membership_rows([m, walk_in], {"asha": "9876543210"}) == [
        ["Asha", "asha@example.com", "9876543210", "6M", "INR 7500.00", "31-08-2026", "28-02-2027"],
        ["", "x@example.com", "", "1M", "", "", ""],
    ]


def test_plan_defaults_cover_every_plan():
    assert set(PLAN_DEFAULTS) == set(PlanId)
    assert PLAN_DEFAULTS[PlanId.THREE_MONTHS] == (3, "3 months", 90)


def test_registration_carries_no_gateway_order_id():
    assert "order_id" not in Registration.__table__.columns
    assert list(RefundStatus) == [RefundStatus.NO_REFUND_REQUIRED]
