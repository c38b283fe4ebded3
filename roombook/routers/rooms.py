import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from .. import schemas, models
from ..deps import get_db, admin_only

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.get("", response_model=List[schemas.RoomOut])
def list_rooms(db: Session = Depends(get_db)):
    """List all meeting rooms."""
    return db.query(models.Room).order_by(models.Room.id).all()


@router.post("", response_model=schemas.Created)
def create_room(
    room_in: schemas.RoomCreate,
    db: Session = Depends(get_db),
    _: models.User | None = Depends(admin_only),
):
    """
    Create a new meeting room.

    Raises
    ------
    HTTPException
        - 400 if name or capacity is missing, or capacity is not positive.
    """
    room = models.Room(**room_in.model_dump())
    db.add(room)
    db.commit()
    db.refresh(room)
    logger.info("Room %s created", room.id)
    return {"id": room.id}


@router.get("/{room_id}", response_model=schemas.RoomOut)
def get_room(room_id: int, db: Session = Depends(get_db)):
    """
    Retrieve a single meeting room by its ID.

    Raises a 404 error if the room does not exist.
    """
    room = db.query(models.Room).filter(models.Room.id == room_id).first()
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")
    return room


@router.put("/{room_id}", response_model=schemas.Success)
def update_room(
    room_id: int,
    room_update: schemas.RoomUpdate,
    db: Session = Depends(get_db),
    _: models.User | None = Depends(admin_only),
):
    """
    Replace the details of an existing room. *(Admin)*

    Raises a 404 error if the room is not found.
    """
    room = db.query(models.Room).filter(models.Room.id == room_id).first()
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")
    for field, value in room_update.model_dump().items():
        setattr(room, field, value)
    db.commit()
    return {"success": True}


@router.delete("/{room_id}", response_model=schemas.Success)
def delete_room(
    room_id: int,
    db: Session = Depends(get_db),
    _: models.User | None = Depends(admin_only),
):
    """
    Delete a meeting room. *(Admin)*

    A room that is referenced by any booking, whatever its status, cannot be
    deleted.

    Raises
    ------
    HTTPException
        - 400 if bookings reference the room.
        - 404 if the room does not exist.
    """
    room = db.query(models.Room).filter(models.Room.id == room_id).first()
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")

    booking_count = (
        db.query(models.Booking).filter(models.Booking.room_id == room_id).count()
    )
    if booking_count > 0:
        raise HTTPException(status_code=400, detail="Cannot delete room with existing bookings")

    db.delete(room)
    db.commit()
    logger.info("Room %s deleted", room_id)
    return {"success": True}
