"""Event registration routes: admin entry, listing, mark-paid, cancel and clear."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from kreede.core.database import get_db
from kreede.core.dependencies import get_current_admin
from kreede.schemas import (
    AdminRegistrationCreate,
    CancelledOut,
    ClearedOut,
    OkResponse,
    RegistrationCreated,
    RegistrationOut,
)
from kreede.services.errors import NotFoundError, ValidationError
from kreede.services.registrations import (
    cancel_registration,
    clear_registrations,
    list_registrations,
    mark_registration_paid,
    register,
)

router = APIRouter(prefix="/registrations", tags=["registrations"], dependencies=[Depends(get_current_admin)])


@router.post("/admin", response_model=RegistrationCreated, status_code=status.HTTP_201_CREATED)
async def create_admin_registration(body: AdminRegistrationCreate, db: AsyncSession = Depends(get_db)):
    try:
        registration = await register(
            db,
            event_id=body.event_id,
            registrant=body.registrant,
            mark_paid=body.mark_paid,
            event_title=body.event_title,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from None
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from None

    return RegistrationCreated(id=registration.id, guest_id=registration.guest_id)


@router.get("", response_model=list[RegistrationOut])
async def list_all(event_id: int | None = Query(None), db: AsyncSession = Depends(get_db)):
    return await list_registrations(db, event_id)


@router.delete("/clear", response_model=ClearedOut)
async def clear(event_id: str = Query(""), db: AsyncSession = Depends(get_db)):
    event_id = event_id.strip()
    if not event_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing event id")
    if not event_id.isdigit():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid event id")

    deleted = await clear_registrations(db, int(event_id))
    return ClearedOut(deleted=deleted)


@router.patch("/{registration_id}/mark-paid", response_model=OkResponse, response_model_exclude_none=True)
async def mark_paid(registration_id: int, db: AsyncSession = Depends(get_db)):
    try:
        already = await mark_registration_paid(db, registration_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from None
    return OkResponse(already=already or None)


@router.delete("/{registration_id}", response_model=CancelledOut)
async def cancel(registration_id: int, db: AsyncSession = Depends(get_db)):
    try:
        await cancel_registration(db, registration_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from None
    return CancelledOut(deleted_id=registration_id)
