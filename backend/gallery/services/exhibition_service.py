"""
Exhibition booking engine.

Invariant: at any location, exhibitions whose status is scheduled or active
never share a day. Completed exhibitions are exempt and may overlap anything.

Every mutation follows the same shape inside serialized_write():
  1. (updates) lock the row and apply the optimistic concurrency guard
  2. lock the location(s) and artwork the write touches
  3. validate fields and references
  4. count live exhibitions at the location whose dates overlap
  5. write, bump updated_at, commit

Nothing is cached between calls: every check re-reads storage.
"""

import calendar
from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gallery.core.exceptions import (
    ConflictError,
    GalleryError,
    NotFoundError,
    ReferenceNotFoundError,
    StaleWriteError,
    ValidationError,
)
from gallery.core.logging import get_logger
from gallery.core.metrics import record_availability, record_exhibition_write
from gallery.db.base import utcnow
from gallery.models.artwork import Artwork
from gallery.models.exhibition import Exhibition, LIVE_STATUSES, STATUS_VALUES
from gallery.models.location import Location
from gallery.schemas.exhibition import ExhibitionCreate, ExhibitionUpdate
from gallery.schemas.location import AvailabilityResponse
from gallery.services.concurrency import check_version, load_for_update, next_version
from gallery.services.interfaces.write_lock import LockNamespace
from gallery.services.overlap import Interval, overlap_clause
from gallery.services.serialized_write import acquire_locks, serialized_read, serialized_write

logger = get_logger(__name__)


def _outcome(exc: GalleryError) -> str:
    if isinstance(exc, ConflictError):
        return "conflict"
    if isinstance(exc, StaleWriteError):
        return "stale"
    if isinstance(exc, ValidationError):
        return "invalid"
    if isinstance(exc, NotFoundError):
        return "not_found"
    return "error"


def validate_dates(start_date: date, end_date: date) -> Interval:
    if start_date >= end_date:
        raise ValidationError(
            "Start date must be before end date",
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
        )
    return Interval(start_date, end_date)


def validate_status(status: str) -> str:
    if status not in STATUS_VALUES:
        raise ValidationError(
            f"Status must be one of: {', '.join(STATUS_VALUES)}", status=status
        )
    return status


def clean_notes(notes: Optional[str]) -> Optional[str]:
    if notes is None:
        return None
    return notes.strip() or None


async def _exists(db: AsyncSession, model, entity_id: int) -> bool:
    result = await db.execute(select(model.id).where(model.id == entity_id))
    return result.scalar_one_or_none() is not None


async def ensure_references(
    db: AsyncSession, artwork_id: Optional[int], location_id: Optional[int]
) -> None:
    # Null only on completed exhibitions whose artwork or location was deleted
    for entity, entity_id in (("artwork", artwork_id), ("location", location_id)):
        if entity_id is None:
            raise ValidationError(f"Exhibition has no {entity}; {entity}_id is required")
    if not await _exists(db, Artwork, artwork_id):
        raise ReferenceNotFoundError("artwork", artwork_id)
    if not await _exists(db, Location, location_id):
        raise ReferenceNotFoundError("location", location_id)


async def count_conflicts(
    db: AsyncSession,
    location_id: int,
    interval: Interval,
    exclude_id: Optional[int] = None,
) -> int:
    """Live exhibitions at the location sharing at least one day with `interval`."""
    query = (
        select(func.count())
        .select_from(Exhibition)
        .where(
            Exhibition.location_id == location_id,
            Exhibition.status.in_(LIVE_STATUSES),
            overlap_clause(Exhibition.start_date, Exhibition.end_date, interval),
        )
    )
    if exclude_id is not None:
        query = query.where(Exhibition.id != exclude_id)
    return (await db.execute(query)).scalar_one()


async def _load(db: AsyncSession, exhibition_id: int) -> Exhibition:
    """Exhibition with artwork and location, refreshed from the database."""
    result = await db.execute(
        select(Exhibition)
        .where(Exhibition.id == exhibition_id)
        .execution_options(populate_existing=True)
    )
    exhibition = result.scalar_one_or_none()
    if exhibition is None:
        raise NotFoundError("exhibition", exhibition_id)
    return exhibition


async def create_exhibition(
    sessions: async_sessionmaker[AsyncSession],
    data: ExhibitionCreate,
) -> Exhibition:
    """
    Book an artwork into a location for a date range.

    Raises:
        ValidationError: bad dates/status, or artwork/location does not exist
        ConflictError: a scheduled or active exhibition there overlaps
    """

    async def work(db: AsyncSession) -> Exhibition:
        await ensure_references(db, data.artwork_id, data.location_id)

        conflicts = await count_conflicts(db, data.location_id, interval)
        if conflicts:
            logger.info("exhibition_conflict", location_id=data.location_id, conflict_count=conflicts)
            raise ConflictError(data.location_id, conflicts)

        now = utcnow()
        exhibition = Exhibition(
            artwork_id=data.artwork_id,
            location_id=data.location_id,
            start_date=data.start_date,
            end_date=data.end_date,
            status=data.status,
            notes=clean_notes(data.notes),
            created_at=now,
            updated_at=now,
        )
        db.add(exhibition)
        await db.flush()
        return await _load(db, exhibition.id)

    try:
        validate_status(data.status)
        interval = validate_dates(data.start_date, data.end_date)
        exhibition = await serialized_write(
            sessions,
            "create_exhibition",
            work,
            lock_keys=[
                (LockNamespace.LOCATION, data.location_id),
                (LockNamespace.ARTWORK, data.artwork_id),
            ],
        )
    except GalleryError as exc:
        record_exhibition_write("create", _outcome(exc))
        logger.warning(
            "exhibition_create_rejected",
            reason=exc.code,
            location_id=data.location_id,
            artwork_id=data.artwork_id,
            start_date=data.start_date.isoformat(),
            end_date=data.end_date.isoformat(),
        )
        raise

    record_exhibition_write("create", "success")
    logger.info(
        "exhibition_created",
        exhibition_id=exhibition.id,
        location_id=exhibition.location_id,
        artwork_id=exhibition.artwork_id,
        start_date=exhibition.start_date.isoformat(),
        end_date=exhibition.end_date.isoformat(),
        status=exhibition.status,
    )
    return exhibition


async def get_exhibition(
    sessions: async_sessionmaker[AsyncSession],
    exhibition_id: int,
) -> Exhibition:
    """Get a single exhibition with its artwork and location."""

    async def work(db: AsyncSession) -> Exhibition:
        return await _load(db, exhibition_id)

    return await serialized_read(sessions, "get_exhibition", work)


async def list_exhibitions(
    sessions: async_sessionmaker[AsyncSession],
    status: Optional[str] = None,
    current: bool = False,
    on_date: Optional[date] = None,
) -> list[Exhibition]:
    """
    List exhibitions, newest start date first.

    With `current`, only exhibitions whose date range contains today
    (or `on_date`), ordered by location. This is a date comparison only;
    the stored status is neither consulted nor changed.
    """
    query = select(Exhibition)

    if status is not None:
        query = query.where(Exhibition.status == validate_status(status))

    if current:
        today = on_date or date.today()
        query = query.where(
            Exhibition.start_date <= today,
            Exhibition.end_date >= today,
        ).order_by(Exhibition.location_id.asc(), Exhibition.id.asc())
    else:
        query = query.order_by(
            Exhibition.start_date.desc(),
            Exhibition.created_at.desc(),
            Exhibition.id.desc(),
        )

    async def work(db: AsyncSession) -> list[Exhibition]:
        result = await db.execute(query)
        return list(result.scalars().all())

    return await serialized_read(sessions, "list_exhibitions", work)


def _merged(changes: dict, field: str, current):
    value = changes.get(field)
    return current if value is None else value


async def update_exhibition(
    sessions: async_sessionmaker[AsyncSession],
    exhibition_id: int,
    data: ExhibitionUpdate,
) -> Exhibition:
    """
    Apply a partial update.

    Order matters: the stale check runs before field validation, and the
    overlap check runs last against the (possibly new) location, ignoring
    this exhibition's own stored range.

    Raises:
        NotFoundError, StaleWriteError, ValidationError, ConflictError
    """
    changes = data.model_dump(exclude_unset=True, exclude={"updated_at"})
    expected_version = data.updated_at

    async def work(db: AsyncSession) -> Exhibition:
        exhibition = await load_for_update(db, Exhibition, exhibition_id, "exhibition")
        check_version("exhibition", exhibition_id, exhibition.updated_at, expected_version)

        artwork_id = _merged(changes, "artwork_id", exhibition.artwork_id)
        location_id = _merged(changes, "location_id", exhibition.location_id)
        start_date = _merged(changes, "start_date", exhibition.start_date)
        end_date = _merged(changes, "end_date", exhibition.end_date)
        status = _merged(changes, "status", exhibition.status)
        notes = clean_notes(changes["notes"]) if "notes" in changes else exhibition.notes

        await acquire_locks(db, [
            (namespace, key)
            for namespace, key in (
                (LockNamespace.LOCATION, exhibition.location_id),
                (LockNamespace.LOCATION, location_id),
                (LockNamespace.ARTWORK, artwork_id),
            )
            if key is not None
        ])

        validate_status(status)
        interval = validate_dates(start_date, end_date)
        await ensure_references(db, artwork_id, location_id)

        conflicts = await count_conflicts(db, location_id, interval, exclude_id=exhibition_id)
        if conflicts:
            logger.info(
                "exhibition_conflict",
                location_id=location_id,
                exhibition_id=exhibition_id,
                conflict_count=conflicts,
            )
            raise ConflictError(location_id, conflicts)

        exhibition.artwork_id = artwork_id
        exhibition.location_id = location_id
        exhibition.start_date = start_date
        exhibition.end_date = end_date
        exhibition.status = status
        exhibition.notes = notes
        exhibition.updated_at = next_version(exhibition.updated_at)
        await db.flush()
        return await _load(db, exhibition_id)

    try:
        exhibition = await serialized_write(sessions, "update_exhibition", work)
    except GalleryError as exc:
        record_exhibition_write("update", _outcome(exc))
        logger.warning("exhibition_update_rejected", exhibition_id=exhibition_id, reason=exc.code)
        raise

    record_exhibition_write("update", "success")
    logger.info(
        "exhibition_updated",
        exhibition_id=exhibition_id,
        fields=sorted(changes),
        location_id=exhibition.location_id,
        status=exhibition.status,
    )
    return exhibition


async def delete_exhibition(
    sessions: async_sessionmaker[AsyncSession],
    exhibition_id: int,
) -> None:
    """Remove an exhibition. Artworks and locations are left untouched."""

    async def work(db: AsyncSession) -> None:
        exhibition = await load_for_update(db, Exhibition, exhibition_id, "exhibition")
        await db.delete(exhibition)

    try:
        await serialized_write(sessions, "delete_exhibition", work)
    except GalleryError as exc:
        record_exhibition_write("delete", _outcome(exc))
        raise

    record_exhibition_write("delete", "success")
    logger.info("exhibition_deleted", exhibition_id=exhibition_id)


async def check_availability(
    sessions: async_sessionmaker[AsyncSession],
    location_id: int,
    start_date: date,
    end_date: date,
    exclude_id: Optional[int] = None,
) -> AvailabilityResponse:
    """
    Would a booking of this range at this location pass the overlap check?

    `exclude_id` leaves one exhibition out of the count, so an edit form can
    check the new range without tripping over the exhibition being edited.
    The answer can go stale the moment it is returned; create/update
    re-check under lock.
    """
    interval = validate_dates(start_date, end_date)

    async def work(db: AsyncSession) -> int:
        if not await _exists(db, Location, location_id):
            raise ReferenceNotFoundError("location", location_id)
        return await count_conflicts(db, location_id, interval, exclude_id=exclude_id)

    conflicts = await serialized_read(sessions, "check_availability", work)

    record_availability(conflicts == 0)
    return AvailabilityResponse(
        location_id=location_id,
        available=conflicts == 0,
        conflict_count=conflicts,
    )


async def location_schedule(
    sessions: async_sessionmaker[AsyncSession],
    location_id: int,
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> list[Exhibition]:
    """
    All exhibitions at a location in start-date order, any status.
    With year and month, only those whose range touches that month.
    """
    query = (
        select(Exhibition)
        .where(Exhibition.location_id == location_id)
        .order_by(Exhibition.start_date.asc(), Exhibition.id.asc())
    )

    if (year is None) != (month is None):
        raise ValidationError("Year and month must be given together")
    if year is not None:
        if not 1 <= year <= 9999:
            raise ValidationError("Year must be between 1 and 9999", year=year)
        if not 1 <= month <= 12:
            raise ValidationError("Month must be between 1 and 12", month=month)
        last_day = calendar.monthrange(year, month)[1]
        window = Interval(date(year, month, 1), date(year, month, last_day))
        query = query.where(overlap_clause(Exhibition.start_date, Exhibition.end_date, window))

    async def work(db: AsyncSession) -> list[Exhibition]:
        if not await _exists(db, Location, location_id):
            raise NotFoundError("location", location_id)
        result = await db.execute(query)
        return list(result.scalars().all())

    return await serialized_read(sessions, "location_schedule", work)
