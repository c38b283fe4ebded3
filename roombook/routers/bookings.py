import logging
from datetime import datetime, timedelta
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pybreaker import CircuitBreakerError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, contains_eager

from .. import schemas, models
from ..circuit_breaker import commit_booking
from ..config import Settings, get_settings
from ..conflicts import has_conflict, is_inverted_range, lock_room
from ..database import begin_write
from ..deps import get_db, admin_only

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])

CONFLICT_DETAIL = "Room is already booked for this time slot."


def _bookings_with_room(db: Session):
    return (
        db.query(models.Booking)
        .join(models.Booking.room)
        .options(contains_eager(models.Booking.room))
    )


def _check_time_range(booking_in: schemas.BookingBase, settings: Settings) -> None:
    if settings.reject_inverted_ranges and is_inverted_range(
        booking_in.start_time, booking_in.end_time
    ):
        raise HTTPException(status_code=400, detail="start_time must be before end_time")


def _lock_room_or_404(db: Session, room_id: int) -> models.Room:
    room = lock_room(db, room_id)
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")
    return room


def _save(db: Session) -> None:
    """Commit the pending booking write through the circuit breaker."""
    try:
        commit_booking(db)
    except CircuitBreakerError:
        db.rollback()
        raise HTTPException(
            status_code=503,
            detail="Booking service temporarily unavailable. Please try again later.",
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to store booking")
        raise HTTPException(status_code=500, detail="Failed to store booking")


@router.get("", response_model=List[schemas.BookingOut])
def list_bookings(db: Session = Depends(get_db)):
    """List every booking with its room name, most recently created first."""
    return (
        _bookings_with_room(db)
        .order_by(models.Booking.created_at.desc(), models.Booking.id.desc())
        .all()
    )


@router.get("/active", response_model=List[schemas.BookingOut])
def list_active_bookings(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Approved bookings for the lobby display.

    Returns bookings that are running now or start within the next
    ``ACTIVE_WINDOW_DAYS`` days, earliest first.
    """
    now = datetime.utcnow()
    horizon = now + timedelta(days=settings.active_window_days)
    return (
        _bookings_with_room(db)
        .filter(
            models.Booking.status == models.BookingStatus.approved,
            models.Booking.end_time >= now,
            models.Booking.start_time <= horizon,
        )
        .order_by(models.Booking.start_time.asc(), models.Booking.id.asc())
        .all()
    )


@router.get("/{booking_id}", response_model=schemas.BookingOut)
def get_booking(booking_id: int, db: Session = Depends(get_db)):
    booking = db.query(models.Booking).filter(models.Booking.id == booking_id).first()
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


@router.post("", response_model=schemas.BookingCreated)
def create_booking(
    booking_in: schemas.BookingCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Request a booking. New bookings always start as ``pending``.

    The room lock, the conflict check and the insert share one transaction,
    so two overlapping requests cannot both get through.

    Raises
    ------
    HTTPException
        - 400 if a required field is missing.
        - 404 if the room does not exist.
        - 409 if a non-rejected booking on the room overlaps the range.
    """
    _check_time_range(booking_in, settings)
    begin_write(db)
    _lock_room_or_404(db, booking_in.room_id)

    if has_conflict(db, booking_in.room_id, booking_in.start_time, booking_in.end_time):
        raise HTTPException(status_code=409, detail=CONFLICT_DETAIL)

    booking = models.Booking(**booking_in.model_dump(), status=models.BookingStatus.pending)
    db.add(booking)
    _save(db)
    db.refresh(booking)
    logger.info("Booking %s created for room %s", booking.id, booking.room_id)
    return {"id": booking.id, "status": booking.status}


@router.put("/{booking_id}", response_model=schemas.Success)
def update_booking(
    booking_id: int,
    booking_update: schemas.BookingUpdate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _: models.User | None = Depends(admin_only),
):
    """
    Replace every field of a booking.

    The booking's own slot is ignored by the conflict check, so moving it
    within (or onto) its current range always works. ``status`` is kept
    when omitted.

    Raises
    ------
    HTTPException
        - 404 if the booking or the target room does not exist.
        - 409 if the new range overlaps another non-rejected booking.
    """
    begin_write(db)
    booking = db.query(models.Booking).filter(models.Booking.id == booking_id).first()
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")

    _check_time_range(booking_update, settings)
    _lock_room_or_404(db, booking_update.room_id)

    if has_conflict(
        db,
        booking_update.room_id,
        booking_update.start_time,
        booking_update.end_time,
        exclude_booking_id=booking_id,
    ):
        raise HTTPException(status_code=409, detail=CONFLICT_DETAIL)

    data = booking_update.model_dump(exclude={"status"})
    for field, value in data.items():
        setattr(booking, field, value)
    if booking_update.status is not None:
        booking.status = booking_update.status

    _save(db)
    logger.info("Booking %s updated", booking_id)
    return {"success": True}


@router.patch("/{booking_id}/status", response_model=schemas.Success)
def update_booking_status(
    booking_id: int,
    payload: schemas.BookingStatusUpdate,
    db: Session = Depends(get_db),
    _: models.User | None = Depends(admin_only),
):
    """
    Approve, reject or reset a booking.

    Any transition between pending, approved and rejected is allowed.
    Reopening a rejected booking re-runs the conflict check, since its slot
    may have been taken in the meantime.

    Raises
    ------
    HTTPException
        - 400 if the status is not one of approved, rejected, pending.
        - 404 if the booking does not exist.
        - 409 if reopening would overlap another non-rejected booking.
    """
    try:
        new_status = models.BookingStatus(payload.status)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid status")

    begin_write(db)
    booking = db.query(models.Booking).filter(models.Booking.id == booking_id).first()
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")

    reopening = (
        booking.status == models.BookingStatus.rejected
        and new_status != models.BookingStatus.rejected
    )
    if reopening:
        lock_room(db, booking.room_id)
        if has_conflict(
            db,
            booking.room_id,
            booking.start_time,
            booking.end_time,
            exclude_booking_id=booking.id,
        ):
            raise HTTPException(status_code=409, detail=CONFLICT_DETAIL)

    previous = booking.status
    booking.status = new_status
    _save(db)
    logger.info("Booking %s status %s -> %s", booking_id, previous.value, new_status.value)
    return {"success": True}
