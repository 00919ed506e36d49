from __future__ import annotations
import datetime as dt
from enum import Enum
from sqlalchemy import (
    Boolean, Date, DateTime, Enum as SAEnum, ForeignKey, Index, Integer, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from core.database import Base
from user.models import VolunteerType

MAX_REQUIRED_VOLUNTEERS = 15


class ShiftStatus(str, Enum):
    open = "open"
    published = "published"
    locked = "locked"


class ShiftType(str, Enum):
    morning = "morning"                    # 06:30-15:00
    afternoon = "afternoon"                # 14:30-22:00
    night = "night"                        # 21:30-07:00
    extended_morning = "extended_morning"  # 06:30-19:00
    extended_night = "extended_night"      # 18:30-07:00


class Unit(str, Enum):
    patrol = "patrol"
    traffic = "traffic"
    investigations = "investigations"
    community = "community"
    operations = "operations"


class Shift(Base):
    __tablename__ = "shifts"

    id: Mapped[int] = mapped_column(primary_key=True)

    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    shift_type: Mapped[ShiftType] = mapped_column(SAEnum(ShiftType, name="shift_type"), nullable=False)
    unit: Mapped[Unit] = mapped_column(SAEnum(Unit, name="unit"), nullable=False)
    required_volunteers: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[ShiftStatus] = mapped_column(
        SAEnum(ShiftStatus, name="shift_status"), nullable=False, default=ShiftStatus.open
    )
    shift_note: Mapped[str | None] = mapped_column(Text(), nullable=True)   # officers only
    shared_note: Mapped[str | None] = mapped_column(Text(), nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
    # optimistic concurrency: a stale UPDATE raises StaleDataError
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # relationships
    registered_volunteers: Mapped[list[ShiftRegistration]] = relationship(
        back_populates="shift",
        cascade="all, delete-orphan",
        order_by="ShiftRegistration.id",
    )
    waitlist_volunteers: Mapped[list[ShiftWaitlistEntry]] = relationship(
        back_populates="shift",
        cascade="all, delete-orphan",
        order_by="[ShiftWaitlistEntry.registered_at, ShiftWaitlistEntry.id]",
    )

    __mapper_args__ = {"version_id_col": version}


class ShiftRegistration(Base):
    __tablename__ = "shift_registrations"
    __table_args__ = (UniqueConstraint("shift_id", "user_id", name="uq_registration_shift_user"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    shift_id: Mapped[int] = mapped_column(ForeignKey("shifts.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    volunteer_type: Mapped[VolunteerType] = mapped_column(
        SAEnum(VolunteerType, name="volunteer_type"), nullable=False
    )
    arrival_time: Mapped[str] = mapped_column(String(5), nullable=False)   # "HH:MM"
    leaving_time: Mapped[str] = mapped_column(String(5), nullable=False)
    note: Mapped[str | None] = mapped_column(Text(), nullable=True)
    approved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    waitlist: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    shift: Mapped[Shift] = relationship(back_populates="registered_volunteers")


class ShiftWaitlistEntry(Base):
    __tablename__ = "shift_waitlist_entries"
    __table_args__ = (UniqueConstraint("shift_id", "user_id", name="uq_waitlist_shift_user"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    shift_id: Mapped[int] = mapped_column(ForeignKey("shifts.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    volunteer_type: Mapped[VolunteerType] = mapped_column(
        SAEnum(VolunteerType, name="volunteer_type"), nullable=False
    )
    registered_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    shift: Mapped[Shift] = relationship(back_populates="waitlist_volunteers")


# listing is always by date
Index("ix_shifts_date", Shift.date)
Index("ix_shifts_unit_date", Shift.unit, Shift.date)
