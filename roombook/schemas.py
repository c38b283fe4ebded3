from datetime import datetime, timezone
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .models import AdType, BookingStatus, UserRole


def _to_naive_utc(value: datetime) -> datetime:
    # Timestamps are stored naive in UTC so string-sorted SQLite columns compare correctly.
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# ----- Common responses -----
class Created(BaseModel):
    id: int


class Success(BaseModel):
    success: bool = True


# ----- Auth -----
class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    id: int
    username: str
    role: UserRole
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    username: Optional[str] = None
    role: Optional[str] = None


# ----- Users -----
class UserCreate(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    role: UserRole


class UserOut(BaseModel):
    id: int
    username: str
    role: UserRole

    model_config = ConfigDict(from_attributes=True)


# ----- Rooms -----
class RoomBase(BaseModel):
    name: str = Field(min_length=1)
    capacity: int = Field(gt=0)
    description: str = ""
    image_url: str = ""
    equipment: str = ""


class RoomCreate(RoomBase):
    pass


class RoomUpdate(RoomBase):
    pass


class RoomOut(RoomBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


# ----- Bookings -----
class BookingBase(BaseModel):
    room_id: int = Field(gt=0)
    user_name: str = Field(min_length=1)
    title: str = Field(min_length=1)
    start_time: datetime
    end_time: datetime
    attendees: int = Field(default=0, ge=0)
    applicant: str = ""
    # older clients send the contact number as "whatsapp"
    contact: str = Field(default="", validation_alias=AliasChoices("contact", "whatsapp"))
    description: str = ""

    # optional fields: null or blank falls back to the default
    @field_validator("attendees", mode="before")
    @classmethod
    def default_attendees(cls, value):
        if value is None or value == "":
            return 0
        return value

    @field_validator("applicant", "contact", "description", mode="before")
    @classmethod
    def default_text(cls, value):
        return "" if value is None else value

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        return _to_naive_utc(value)


class BookingCreate(BookingBase):
    pass


class BookingUpdate(BookingBase):
    status: Optional[BookingStatus] = None


class BookingStatusUpdate(BaseModel):
    # validated in the route so unknown values map to "Invalid status"
    status: Optional[str] = None


class BookingCreated(BaseModel):
    id: int
    status: BookingStatus = BookingStatus.pending


class BookingOut(BaseModel):
    id: int
    room_id: int
    room_name: Optional[str] = None
    user_name: str
    title: str
    start_time: datetime
    end_time: datetime
    attendees: int
    applicant: str
    contact: str
    description: str
    status: BookingStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ----- Ads -----
class AdCreate(BaseModel):
    type: AdType
    url: str = Field(min_length=1)
    duration: int = Field(default=10, gt=0)


class AdOut(BaseModel):
    id: int
    type: AdType
    url: str
    duration: int
    active: bool

    model_config = ConfigDict(from_attributes=True)


# ----- Settings -----
class RunningText(BaseModel):
    text: str


# ----- Reports -----
class PeriodCount(BaseModel):
    count: int


class RoomCount(BaseModel):
    name: str
    count: int


class StatusCount(BaseModel):
    status: BookingStatus
    count: int


class ReportOut(BaseModel):
    today: PeriodCount
    week: PeriodCount
    month: PeriodCount
    year: PeriodCount
    by_room: List[RoomCount]
    by_status: List[StatusCount]
    history: List[BookingOut]


# ----- Uploads -----
class UploadOut(BaseModel):
    url: str
