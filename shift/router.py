from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from core.database import get_db
from core.exceptions import NotFoundError
from auth.services.auth_service import get_current_active_user
from authz.deps import require_officer, require_volunteer_or_officer
from user.models import User, UserRole
from .models import ShiftStatus, ShiftType, Unit
from .schemas import (
    ShiftSchema,
    ShiftCreate,
    ShiftUpdate,
    RegisterPayload,
    RegistrationUpdate,
    StatusIndicatorSchema,
)
from shift import service

shift_router = APIRouter(prefix="/shifts", tags=["Shifts"])


def _present(shift, user: User) -> ShiftSchema:
    # shift_note is for officers only
    out = ShiftSchema.model_validate(shift)
    if user.role != UserRole.officer:
        out = out.model_copy(update={"shift_note": None})
    return out


@shift_router.get("", response_model=list[ShiftSchema])
def list_shifts(
    unit: Optional[Unit] = None,
    shift_type: Optional[ShiftType] = Query(None, alias="shiftType"),
    status: Optional[ShiftStatus] = None,
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_active_user),
):
    rows = service.get_shifts(
        db,
        unit=unit,
        shift_type=shift_type,
        status=status,
        date_from=date_from,
        date_to=date_to,
    )
    return [_present(r, user) for r in rows]


@shift_router.get("/{shift_id}", response_model=ShiftSchema)
def get_shift(shift_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_active_user)):
    obj = service.get_shift(db, shift_id)
    if not obj:
        raise NotFoundError("Shift not found")
    return _present(obj, user)


@shift_router.post("", response_model=ShiftSchema, status_code=status.HTTP_201_CREATED)
def create_shift(payload: ShiftCreate, db: Session = Depends(get_db), user: User = Depends(require_officer)):
    return _present(service.create_shift(db, payload), user)


@shift_router.put("/{shift_id}", response_model=ShiftSchema)
def update_shift(shift_id: int, payload: ShiftUpdate, db: Session = Depends(get_db), user: User = Depends(require_officer)):
    return _present(service.update_shift(db, shift_id, payload), user)


@shift_router.delete("/{shift_id}")
def delete_shift(shift_id: int, db: Session = Depends(get_db), _officer: User = Depends(require_officer)):
    service.delete_shift(db, shift_id)
    return {"message": "Shift deleted"}


# ---- volunteer actions ----

@shift_router.post("/{shift_id}/register", response_model=ShiftSchema)
def register(
    shift_id: int,
    payload: RegisterPayload,
    db: Session = Depends(get_db),
    user: User = Depends(require_volunteer_or_officer),
):
    shift = service.register(
        db,
        shift_id,
        user.id,
        volunteer_type=payload.volunteer_type,
        arrival_time=payload.arrival_time,
        leaving_time=payload.leaving_time,
        note=payload.note,
    )
    return _present(shift, user)


@shift_router.post("/{shift_id}/unregister", response_model=ShiftSchema)
def unregister(shift_id: int, db: Session = Depends(get_db), user: User = Depends(require_volunteer_or_officer)):
    return _present(service.unregister(db, shift_id, user.id), user)


# Fix the time window after a waitlist promotion
@shift_router.put("/{shift_id}/registration", response_model=ShiftSchema)
def update_my_registration(
    shift_id: int,
    payload: RegistrationUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_volunteer_or_officer),
):
    return _present(service.update_registration(db, shift_id, user.id, payload), user)


# ---- officer actions ----

@shift_router.post("/{shift_id}/approve/{volunteer_id}", response_model=ShiftSchema)
def approve(
    shift_id: int,
    volunteer_id: int,
    approve: bool = Query(True),
    db: Session = Depends(get_db),
    user: User = Depends(require_officer),
):
    return _present(service.approve(db, shift_id, volunteer_id, approve), user)


@shift_router.get("/{shift_id}/status-indicator", response_model=StatusIndicatorSchema)
def status_indicator(shift_id: int, db: Session = Depends(get_db), _officer: User = Depends(require_officer)):
    return service.status_indicator(db, shift_id)
