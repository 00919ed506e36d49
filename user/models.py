from __future__ import annotations
from enum import Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Boolean, DateTime, Enum as SAEnum, text
from core.database import Base
from datetime import datetime


class UserRole(str, Enum):
    volunteer = "volunteer"
    officer = "officer"


class Gender(str, Enum):
    male = "male"
    female = "female"


class VolunteerType(str, Enum):
    stage_a = "stage_a"
    stage_b = "stage_b"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    full_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    phone: Mapped[str] = mapped_column(String(15), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(SAEnum(UserRole, name="user_role"), nullable=False)
    service_number: Mapped[str] = mapped_column(String(9), unique=True, nullable=False)
    gender: Mapped[Gender] = mapped_column(SAEnum(Gender, name="gender"), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, server_default=text("true"), default=True, nullable=False)

    # volunteers only
    volunteer_type: Mapped[VolunteerType | None] = mapped_column(
        SAEnum(VolunteerType, name="volunteer_type"), nullable=True
    )
    has_driver_license: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
