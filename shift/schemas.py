import datetime as dt
from typing import Literal, Optional
from pydantic import BaseModel, Field, ConfigDict, model_validator

from user.models import VolunteerType
from .models import MAX_REQUIRED_VOLUNTEERS, ShiftStatus, ShiftType, Unit

# 24h "HH:MM"; zero padding makes string order equal time order
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class RegistrationSchema(BaseModel):
    user_id: int
    volunteer_type: VolunteerType
    arrival_time: str
    leaving_time: str
    note: Optional[str] = None
    approved: bool = False
    waitlist: bool = False

    model_config = ConfigDict(from_attributes=True)


class WaitlistEntrySchema(BaseModel):
    user_id: int
    volunteer_type: VolunteerType
    registered_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class ShiftSchema(BaseModel):
    id: int
    date: dt.date
    shift_type: ShiftType
    unit: Unit
    required_volunteers: int
    status: ShiftStatus
    registered_volunteers: list[RegistrationSchema] = []
    waitlist_volunteers: list[WaitlistEntrySchema] = []
    shift_note: Optional[str] = None
    shared_note: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    version: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class ShiftCreate(BaseModel):
    date: dt.date
    shift_type: ShiftType
    unit: Unit
    required_volunteers: int = Field(..., ge=0, le=MAX_REQUIRED_VOLUNTEERS)
    status: ShiftStatus = ShiftStatus.open
    shift_note: Optional[str] = None
    shared_note: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


# Patch type: only the fields listed here can change through update_shift
class ShiftUpdate(BaseModel):
    date: Optional[dt.date] = None
    shift_type: Optional[ShiftType] = None
    unit: Optional[Unit] = None
    required_volunteers: Optional[int] = Field(None, ge=0, le=MAX_REQUIRED_VOLUNTEERS)
    status: Optional[ShiftStatus] = None
    shift_note: Optional[str] = None
    shared_note: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class RegisterPayload(BaseModel):
    volunteer_type: VolunteerType
    arrival_time: str = Field(..., pattern=TIME_PATTERN, examples=["08:00"])
    leaving_time: str = Field(..., pattern=TIME_PATTERN, examples=["14:00"])
    note: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def leaving_after_arrival(self):
        if self.arrival_time >= self.leaving_time:
            raise ValueError("leaving_time must be after arrival_time")
        return self


class RegistrationUpdate(BaseModel):
    arrival_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    leaving_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    note: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class StatusCounts(BaseModel):
    approved: int
    total: int
    required: int
    waitlisted: int


class StatusIndicatorSchema(BaseModel):
    color: Literal["gray", "green", "orange", "blue"]
    pending_icon: bool
    counts: StatusCounts
    status: ShiftStatus
