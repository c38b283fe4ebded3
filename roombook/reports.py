"""
Booking statistics for the admin dashboard.

Periods are bucketed by the booking's ``created_at`` in UTC: today, the week
starting on the most recent Sunday, the current month and the current year.
"""
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, contains_eager

from . import models


def period_starts(today: date) -> dict[str, date]:
    # Sunday-based weeks: date.weekday() has Monday == 0
    days_since_sunday = (today.weekday() + 1) % 7
    return {
        "today": today,
        "week": today - timedelta(days=days_since_sunday),
        "month": today.replace(day=1),
        "year": today.replace(month=1, day=1),
    }


def count_created_since(db: Session, since: date, until: Optional[date] = None) -> int:
    query = db.query(func.count(models.Booking.id)).filter(
        models.Booking.created_at >= datetime.combine(since, time.min)
    )
    if until is not None:
        query = query.filter(models.Booking.created_at < datetime.combine(until, time.min))
    return query.scalar() or 0


def counts_by_room(db: Session) -> list[dict]:
    # outer join keeps rooms that have never been booked
    rows = (
        db.query(models.Room.name, func.count(models.Booking.id))
        .outerjoin(models.Booking, models.Booking.room_id == models.Room.id)
        .group_by(models.Room.id, models.Room.name)
        .order_by(models.Room.id)
        .all()
    )
    return [{"name": name, "count": count} for name, count in rows]


def counts_by_status(db: Session) -> list[dict]:
    rows = (
        db.query(models.Booking.status, func.count(models.Booking.id))
        .group_by(models.Booking.status)
        .all()
    )
    return [{"status": status, "count": count} for status, count in rows]


def booking_history(db: Session) -> list[models.Booking]:
    return (
        db.query(models.Booking)
        .join(models.Booking.room)
        .options(contains_eager(models.Booking.room))
        .order_by(models.Booking.created_at.desc(), models.Booking.id.desc())
        .all()
    )


def build_report(db: Session, today: Optional[date] = None) -> dict:
    today = today or datetime.utcnow().date()
    starts = period_starts(today)
    return {
        "today": {"count": count_created_since(db, starts["today"], today + timedelta(days=1))},
        "week": {"count": count_created_since(db, starts["week"])},
        "month": {"count": count_created_since(db, starts["month"])},
        "year": {"count": count_created_since(db, starts["year"])},
        "by_room": counts_by_room(db),
        "by_status": counts_by_status(db),
        "history": booking_history(db),
    }
