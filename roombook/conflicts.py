"""
Booking conflict detection.

Two bookings for the same room conflict when both are not rejected and their
half-open intervals ``[start, end)`` overlap. Bookings that merely touch
(one ends exactly when the other starts) do not conflict.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Query, Session

from . import models


def overlaps(start1, end1, start2, end2) -> bool:
    """
    Check if two time intervals overlap.

    Returns True if the interval [start1, end1) overlaps with [start2, end2).
    """
    return start1 < end2 and start2 < end1


def conflicting_bookings(
    db: Session,
    room_id: int,
    start_time: datetime,
    end_time: datetime,
    exclude_booking_id: Optional[int] = None,
) -> Query:
    """Query for the non-rejected bookings on ``room_id`` that overlap the range."""
    query = db.query(models.Booking).filter(
        models.Booking.room_id == room_id,
        models.Booking.status != models.BookingStatus.rejected,
        models.Booking.start_time < end_time,
        models.Booking.end_time > start_time,
    )
    if exclude_booking_id is not None:
        query = query.filter(models.Booking.id != exclude_booking_id)
    return query


def has_conflict(
    db: Session,
    room_id: int,
    start_time: datetime,
    end_time: datetime,
    exclude_booking_id: Optional[int] = None,
) -> bool:
    """
    Return True if another live booking already holds part of the range.

    ``exclude_booking_id`` is the booking being edited, so an update never
    collides with its own previous slot. Read-only; storage errors propagate.
    """
    count = conflicting_bookings(
        db, room_id, start_time, end_time, exclude_booking_id
    ).count()
    return count > 0


def lock_room(db: Session, room_id: int) -> models.Room | None:
    """
    Load a room and hold a row lock on it until the transaction ends.

    Booking writers lock the room first, so a conflict check and the write
    that follows it cannot interleave with another writer for the same room.
    Engines without row locks (SQLite) ignore FOR UPDATE and rely on the
    engine-level write lock instead.
    """
    return (
        db.query(models.Room)
        .filter(models.Room.id == room_id)
        .with_for_update()
        .first()
    )


def is_inverted_range(start_time: datetime, end_time: datetime) -> bool:
    return start_time >= end_time
