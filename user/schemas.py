from typing import Optional
from pydantic import BaseModel, EmailStr, ConfigDict, Field, model_validator

from user.models import UserRole, Gender, VolunteerType


class UserSchema(BaseModel):
    id: int
    full_name: str
    email: EmailStr
    phone: str
    role: UserRole
    service_number: str
    gender: Gender
    volunteer_type: Optional[VolunteerType] = None
    has_driver_license: Optional[bool] = None
    is_active: bool = True
    model_config = ConfigDict(from_attributes=True)


class UserCreate(BaseModel):
    full_name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    phone: str = Field(..., pattern=r"^05\d{8}$")
    password: str = Field(..., min_length=6, max_length=1000)
    role: UserRole = UserRole.volunteer
    service_number: str = Field(..., min_length=6, max_length=9)
    gender: Gender
    volunteer_type: Optional[VolunteerType] = None
    has_driver_license: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def volunteer_fields_required(self):
        if self.role == UserRole.volunteer and (self.volunteer_type is None or self.has_driver_license is None):
            raise ValueError("volunteer_type and has_driver_license are required for volunteers")
        return self


class LoginPayload(BaseModel):
    email: EmailStr
    password: str


class TokenSchema(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserUpdate(BaseModel):
    """Self-service profile patch. Role and password are not editable here."""
    full_name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, pattern=r"^05\d{8}$")
    service_number: Optional[str] = Field(None, min_length=6, max_length=9)
    gender: Optional[Gender] = None
    volunteer_type: Optional[VolunteerType] = None
    has_driver_license: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=1000)
