"""Court booking routes: availability, export, admin entry, mark-paid and bulk clear."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from kreede.core.database import get_db
from kreede.core.dependencies import get_current_admin
from kreede.models.booking import GuestBooking
from kreede.schemas import AdminBookingCreate, AvailabilityOut, BookingCreated, BookingsCleared, OkResponse
from kreede.services.admin_bookings import (
    clear_bookings,
    create_admin_booking,
    list_bookings,
    mark_booking_paid,
    mark_guest_booking_paid,
)
from kreede.services.availability import get_availability, parse_booking_date
from kreede.services.errors import NotFoundError, ValidationError
from kreede.services.export import XLSX_MEDIA_TYPE, bookings_workbook, xlsx_headers

router = APIRouter(prefix="/bookings", tags=["bookings"], dependencies=[Depends(get_current_admin)])


def _parse_date(value: str):
    try:
        return parse_booking_date(value)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from None


@router.get("/availability", response_model=AvailabilityOut)
async def availability(
    query_date: str = Query("", alias="date", description="Date in YYYY-MM-DD format"),
    db: AsyncSession = Depends(get_db),
):
    """Busy intervals per court for a date, from member and guest bookings."""
    try:
        return AvailabilityOut(availability=await get_availability(db, query_date))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from None


@router.get("/export")
async def export_bookings(
    q: str = Query(""),
    query_date: str = Query("", alias="date"),
    db: AsyncSession = Depends(get_db),
):
    bookings = await list_bookings(db, q, _parse_date(query_date))
    return Response(
        content=bookings_workbook(bookings),
        media_type=XLSX_MEDIA_TYPE,
        headers=xlsx_headers("bookings.xlsx"),
    )


@router.post("/clear", response_model=BookingsCleared)
async def clear(
    q: str = Query(""),
    query_date: str = Query("", alias="date"),
    db: AsyncSession = Depends(get_db),
):
    """Delete every booking and guest booking matching the list filters (all of them when none are given)."""
    deleted, deleted_guests = await clear_bookings(db, q, _parse_date(query_date))
    return BookingsCleared(deleted_bookings=deleted, deleted_guest_bookings=deleted_guests)


@router.post("/admin", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
async def create_booking(body: AdminBookingCreate, db: AsyncSession = Depends(get_db)):
    try:
        booking = await create_admin_booking(
            db,
            registrant=body.registrant,
            booking_date=body.booking_date,
            slots=body.slots,
            mark_paid=body.mark_paid,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from None

    kind = "guest" if isinstance(booking, GuestBooking) else "booking"
    return BookingCreated(id=booking.id, kind=kind, order_id=booking.order_id)


@router.patch("/guest/{booking_id}/mark-paid", response_model=OkResponse, response_model_exclude_none=True)
async def mark_guest_paid(booking_id: int, db: AsyncSession = Depends(get_db)):
    try:
        already = await mark_guest_booking_paid(db, booking_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from None
    return OkResponse(already=already or None)


@router.patch("/{booking_id}/mark-paid", response_model=OkResponse, response_model_exclude_none=True)
async def mark_paid(booking_id: int, db: AsyncSession = Depends(get_db)):
    try:
        already = await mark_booking_paid(db, booking_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from None
    return OkResponse(already=already or None)
