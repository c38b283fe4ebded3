import enum
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .database import Base


class UserRole(str, enum.Enum):
    super_admin = "super_admin"
    admin = "admin"
    user = "user"
    viewer = "viewer"


class BookingStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class AdType(str, enum.Enum):
    image = "image"
    video = "video"


# Usernames that can never be deleted, whatever role they currently hold.
PROTECTED_USERNAMES = frozenset({"admin", "superadmin"})

RUNNING_TEXT_KEY = "running_text"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(Enum(UserRole, native_enum=False, length=20), nullable=False, default=UserRole.user)


class Room(Base):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    capacity = Column(Integer, nullable=False)
    description = Column(Text, nullable=False, default="")
    image_url = Column(String, nullable=False, default="")
    equipment = Column(Text, nullable=False, default="")

    bookings = relationship("Booking", back_populates="room")


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    user_name = Column(String, nullable=False)
    title = Column(String, nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    attendees = Column(Integer, nullable=False, default=0)
    applicant = Column(String, nullable=False, default="")
    contact = Column(String, nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    status = Column(
        Enum(BookingStatus, native_enum=False, length=20),
        nullable=False,
        default=BookingStatus.pending,
    )
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    room = relationship("Room", back_populates="bookings")

    @property
    def room_name(self) -> str | None:
        return self.room.name if self.room is not None else None


class Ad(Base):
    __tablename__ = "ads"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(Enum(AdType, native_enum=False, length=10), nullable=False)
    url = Column(String, nullable=False)
    duration = Column(Integer, nullable=False, default=10)  # seconds
    active = Column(Boolean, nullable=False, default=True)


class Setting(Base):
    __tablename__ = "settings"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=True)
