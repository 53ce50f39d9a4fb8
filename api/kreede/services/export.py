"""Spreadsheet exports: court bookings, users and memberships."""

import calendar
from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font

from kreede.models.booking import Booking
from kreede.models.member import Membership, User

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# (header, width)
BOOKING_COLUMNS = [
    ("User Name", 26),
    ("User Email", 30),
    ("Date", 14),
    ("Amount", 12),
    ("Currency", 10),
    ("Court ID", 10),
    ("Start", 10),
    ("End", 10),
]

USER_COLUMNS = [
    ("Name", 26),
    ("Email", 30),
    ("Phone", 16),
    ("DOB", 14),
    ("Membership", 22),
    ("Plan Name", 18),
    ("Status", 12),
]

MEMBERSHIP_COLUMNS = [
    ("User Name", 26),
    ("User Email", 30),
    ("Phone Number", 20),
    ("Plan ID", 10),
    ("Amount Paid", 16),
    ("Start Date", 14),
    ("End Date", 14),
]

USER_FILTERS = ("all", "members", "nonmembers")


def booking_rows(bookings: Iterable[Booking]) -> list[list]:
    """One row per slot; a booking without slots still gets one row with blank slot cells."""
    rows = []
    for b in bookings:
        base = [
            b.user_name or "",
            b.user_email or "",
            b.booking_date.isoformat() if b.booking_date else "",
            float(b.amount) if b.amount is not None else "",
            b.currency or "",
        ]
        slots = b.slots or []
        if not slots:
            rows.append([*base, "", "", ""])
            continue
        for slot in slots:
            court_id = slot.get("court_id")
            rows.append([*base, "" if court_id is None else court_id, slot.get("start") or "", slot.get("end") or ""])
    return rows


def match_memberships(users: Iterable[User], memberships: Iterable[Membership]) -> dict[int, Membership]:
    """Latest membership per user, matched by user_id, then email, then name.

    memberships must be newest first.
    """
    by_user_id: dict[str, Membership] = {}
    by_email: dict[str, Membership] = {}
    by_name: dict[str, Membership] = {}
    for m in memberships:
        if m.user_id:
            by_user_id.setdefault(m.user_id, m)
        if m.user_email and m.user_email.strip():
            by_email.setdefault(m.user_email.strip().lower(), m)
        if m.user_name and m.user_name.strip():
            by_name.setdefault(m.user_name.strip(), m)

    matched = {}
    for u in users:
        m = (
            by_user_id.get(u.user_id)
            or by_email.get((u.email or "").strip().lower())
            or by_name.get((u.name or "").strip())
        )
        if m is not None:
            matched[u.id] = m
    return matched


def user_rows(users: Iterable[User], memberships: Iterable[Membership], membership_filter: str = "all") -> list[list]:
    users = list(users)
    matched = match_memberships(users, memberships)

    rows = []
    for u in users:
        m = matched.get(u.id)
        if membership_filter == "members" and m is None:
            continue
        if membership_filter == "nonmembers" and m is not None:
            continue
        rows.append(
            [
                u.name or "",
                u.email or "",
                u.phone or "",
                u.dob or "",
                str(m.plan_id) if m else "No membership",
                m.plan_name if m else "",
                str(m.status) if m else "",
            ]
        )
    return rows


def add_months(start: date, months: int) -> date:
    """Same day n months later, clamped to the end of a shorter month."""
    month_index = start.month - 1 + months
    year, month = start.year + month_index // 12, month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _dmy(value: date | None) -> str:
    return value.strftime("%d-%m-%Y") if value else ""


def membership_rows(memberships: Iterable[Membership], phones: dict[str, str]) -> list[list]:
    """phones maps User.user_id to phone number."""
    rows = []
    for m in memberships:
        start = m.created_at.date() if m.created_at else None
        end = add_months(start, m.duration_months) if start and m.duration_months is not None else None
        amount = f"{m.currency or ''} {Decimal(m.amount):.2f}".strip() if m.amount is not None else ""
        rows.append(
            [
                m.user_name or "",
                m.user_email or "",
                phones.get(m.user_id or "", ""),
                str(m.plan_id) if m.plan_id else "",
                amount,
                _dmy(start),
                _dmy(end),
            ]
        )
    return rows


def build_workbook(title: str, columns: list[tuple[str, int]], rows: Iterable[list]) -> bytes:
    wb = Workbook()
    sheet = wb.active
    sheet.title = title

    sheet.append([header for header, _ in columns])
    for idx, (_, width) in enumerate(columns, start=1):
        sheet.column_dimensions[sheet.cell(row=1, column=idx).column_letter].width = width
    for cell in sheet[1]:
        cell.font = Font(bold=True)

    for row in rows:
        sheet.append(row)

    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


def bookings_workbook(bookings: Iterable[Booking]) -> bytes:
    return build_workbook("Bookings", BOOKING_COLUMNS, booking_rows(bookings))


def users_workbook(users: Iterable[User], memberships: Iterable[Membership], membership_filter: str = "all") -> bytes:
    return build_workbook("Users", USER_COLUMNS, user_rows(users, memberships, membership_filter))


def memberships_workbook(memberships: Iterable[Membership], phones: dict[str, str]) -> bytes:
    return build_workbook("Memberships", MEMBERSHIP_COLUMNS, membership_rows(memberships, phones))


def xlsx_headers(filename: str) -> dict[str, str]:
    return {
        "Content-Disposition": f'attachment; filename="{filename}"',
        "Cache-Control": "no-store",
    }
