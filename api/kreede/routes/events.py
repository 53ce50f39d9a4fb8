"""Event routes: create, list and delete events and announcements."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from kreede.core.database import get_db
from kreede.core.dependencies import get_current_admin
from kreede.models.event import Event
from kreede.schemas import EventCreate, EventCreated, EventOut, OkResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"], dependencies=[Depends(get_current_admin)])


@router.post("", response_model=EventCreated, status_code=status.HTTP_201_CREATED)
async def create_event(body: EventCreate, db: AsyncSession = Depends(get_db)):
    event = Event(
        title=body.title,
        start_date=body.start_date,
        end_date=body.end_date,
        start_time=body.start_time,
        end_time=body.end_time,
        entry_fee=body.entry_fee,
        link=str(body.link),
        description=body.description or None,
        tags=body.tags,
        created_by=body.created_by,
    )
    db.add(event)
    await db.flush()

    logger.info("Event %s created: %s", event.id, event.title)
    return EventCreated(id=event.id)


@router.get("", response_model=list[EventOut])
async def list_events(
    q: str = Query(""),
    start: date | None = Query(None, description="Only events starting on this date (YYYY-MM-DD)"),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(Event).order_by(Event.start_date.desc(), Event.created_at.desc())
    q = q.strip()
    if q:
        stmt = stmt.where(
            or_(
                Event.title.icontains(q, autoescape=True),
                Event.description.icontains(q, autoescape=True),
            )
        )
    if start is not None:
        stmt = stmt.where(Event.start_date == start)
    result = await db.execute(stmt)
    return result.scalars().all()


@router.delete("/{event_id}", response_model=OkResponse, response_model_exclude_none=True)
async def delete_event(event_id: int, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Event).where(Event.id == event_id))
    event = result.scalar_one_or_none()
    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")

    await db.delete(event)
    logger.info("Event %s deleted", event_id)
    return OkResponse()
