# shift/service.py
"""Shift scheduling engine.

Every function takes the SQLAlchemy session as its first argument and works on
one Shift at a time: load, mutate in memory, commit once at the end. Any failure
rolls the session back so a half-applied transition is never persisted.

Concurrent writers are detected through ``Shift.version`` (SQLAlchemy
``version_id_col``); the losing transaction surfaces as ``ConflictError``.
"""
from __future__ import annotations
import logging
import re
from datetime import date, datetime, timezone
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from core.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from user.models import VolunteerType
from .models import (
    MAX_REQUIRED_VOLUNTEERS,
    Shift,
    ShiftRegistration,
    ShiftStatus,
    ShiftType,
    ShiftWaitlistEntry,
    Unit,
)
from .schemas import TIME_PATTERN, RegistrationUpdate, ShiftCreate, ShiftUpdate

logger = logging.getLogger(__name__)

REGISTRABLE_STATUSES = (ShiftStatus.open, ShiftStatus.published)
PLACEHOLDER_TIME = "00:00"

_time_re = re.compile(TIME_PATTERN)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _commit(db: Session, shift: Shift) -> Shift:
    # Bumping updated_at forces an UPDATE on the shift row even when only child
    # rows changed, so the version check always runs.
    shift_id = shift.id
    shift.updated_at = _utcnow()
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning("Concurrent modification of shift %s rejected", shift_id)
        raise ConflictError("Shift was modified concurrently, please retry")
    db.refresh(shift)
    return shift


def _load(db: Session, shift_id: int) -> Shift:
    shift = db.get(Shift, shift_id)
    if shift is None:
        raise NotFoundError("Shift not found")
    return shift


def validate_time_window(arrival_time: str, leaving_time: str) -> None:
    if not isinstance(arrival_time, str) or not isinstance(leaving_time, str):
        raise ValidationError("arrival_time/leaving_time must be HH:MM")
    if not _time_re.match(arrival_time) or not _time_re.match(leaving_time):
        raise ValidationError("arrival_time/leaving_time must be HH:MM")
    if arrival_time >= leaving_time:
        raise ValidationError("leaving_time must be after arrival_time")


def _validate_capacity(value: Any) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError("required_volunteers must be an integer")
    if value < 0:
        raise ValidationError("required_volunteers must be >= 0")
    if value > MAX_REQUIRED_VOLUNTEERS:
        raise ValidationError("Too many volunteers for one shift!")


def _fifo_key(entry: ShiftWaitlistEntry) -> datetime:
    ts = entry.registered_at
    # some drivers (SQLite) hand back naive UTC
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


def _find_registration(shift: Shift, user_id: int) -> Optional[ShiftRegistration]:
    return next((r for r in shift.registered_volunteers if r.user_id == user_id), None)


# ---- reads ----

def get_shift(db: Session, shift_id: int) -> Shift | None:
    return db.get(Shift, shift_id)


def get_shifts(
    db: Session,
    *,
    unit: Optional[Unit] = None,
    shift_type: Optional[ShiftType] = None,
    status: Optional[ShiftStatus] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> list[Shift]:
    stmt = select(Shift)
    if unit is not None:
        stmt = stmt.where(Shift.unit == unit)
    if shift_type is not None:
        stmt = stmt.where(Shift.shift_type == shift_type)
    if status is not None:
        stmt = stmt.where(Shift.status == status)
    if date_from is not None:
        stmt = stmt.where(Shift.date >= date_from)
    if date_to is not None:
        stmt = stmt.where(Shift.date <= date_to)
    stmt = stmt.order_by(Shift.date, Shift.id)
    return list(db.scalars(stmt))


# ---- officer CRUD ----

def create_shift(db: Session, shift: ShiftCreate) -> Shift:
    for field in ("date", "shift_type", "unit", "required_volunteers"):
        if getattr(shift, field, None) is None:
            raise ValidationError(f"Missing {field}.")
    _validate_capacity(shift.required_volunteers)

    row = Shift(
        date=shift.date,
        shift_type=shift.shift_type,
        unit=shift.unit,
        required_volunteers=shift.required_volunteers,
        status=getattr(shift, "status", None) or ShiftStatus.open,
        shift_note=getattr(shift, "shift_note", None),
        shared_note=getattr(shift, "shared_note", None),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Created shift %s (%s, %s, %s)", row.id, row.date, row.unit.value, row.shift_type.value)
    return row


def apply_shift_patch(shift: Shift, patch: ShiftUpdate) -> Shift:
    """Merge the fields set on ``patch`` into ``shift``. Pure, no I/O."""
    data = patch.model_dump(exclude_unset=True)
    for k, v in data.items():
        if v is None and k in ("date", "shift_type", "unit", "required_volunteers", "status"):
            raise ValidationError(f"{k} cannot be null")
        if k == "required_volunteers":
            _validate_capacity(v)
        setattr(shift, k, v)
    return shift


def update_shift(db: Session, shift_id: int, patch: ShiftUpdate) -> Shift:
    row = _load(db, shift_id)
    try:
        apply_shift_patch(row, patch)
    except ValidationError:
        db.rollback()
        raise
    # lowering capacity never evicts anyone already on the main list
    return _commit(db, row)


def delete_shift(db: Session, shift_id: int) -> None:
    row = _load(db, shift_id)
    db.delete(row)
    db.commit()
    logger.info("Deleted shift %s", shift_id)


# ---- volunteer actions ----

def register(
    db: Session,
    shift_id: int,
    user_id: int,
    volunteer_type: VolunteerType,
    arrival_time: str,
    leaving_time: str,
    note: Optional[str] = None,
) -> Shift:
    """Add the user to the main list, or to the waitlist when it is full."""
    shift = _load(db, shift_id)

    if shift.status == ShiftStatus.locked:
        raise InvalidStateError("Shift is locked")
    if shift.status not in REGISTRABLE_STATUSES:
        raise InvalidStateError("Shift not open for registration")

    validate_time_window(arrival_time, leaving_time)

    in_main = any(r.user_id == user_id for r in shift.registered_volunteers)
    in_wait = any(w.user_id == user_id for w in shift.waitlist_volunteers)
    if in_main or in_wait:
        logger.warning("User %s already on shift %s", user_id, shift_id)
        raise ConflictError("Already registered (or waitlisted)")

    main_count = sum(1 for r in shift.registered_volunteers if not r.waitlist)

    if main_count < shift.required_volunteers:
        shift.registered_volunteers.append(
            ShiftRegistration(
                user_id=user_id,
                volunteer_type=volunteer_type,
                arrival_time=arrival_time,
                leaving_time=leaving_time,
                note=note,
                approved=False,
                waitlist=False,
            )
        )
        logger.info("User %s registered to shift %s", user_id, shift_id)
    else:
        shift.waitlist_volunteers.append(
            ShiftWaitlistEntry(
                user_id=user_id,
                volunteer_type=volunteer_type,
                registered_at=_utcnow(),
            )
        )
        logger.info("Shift %s is full, user %s waitlisted", shift_id, user_id)

    return _commit(db, shift)


def unregister(db: Session, shift_id: int, user_id: int) -> Shift:
    """Remove the user from the shift; a freed main-list seat goes to the
    earliest waitlisted volunteer.

    The promoted volunteer gets placeholder "00:00" times which must be fixed
    through ``update_registration``. At most one promotion happens per call.
    """
    shift = _load(db, shift_id)

    before_main = len(shift.registered_volunteers)
    before_wait = len(shift.waitlist_volunteers)

    for rec in [r for r in shift.registered_volunteers if r.user_id == user_id]:
        shift.registered_volunteers.remove(rec)
    main_shrunk = len(shift.registered_volunteers) < before_main

    if main_shrunk and shift.waitlist_volunteers:
        # min() keeps the first of equal keys, so ties go by insertion order
        promoted = min(shift.waitlist_volunteers, key=_fifo_key)
        shift.waitlist_volunteers.remove(promoted)
        shift.registered_volunteers.append(
            ShiftRegistration(
                user_id=promoted.user_id,
                volunteer_type=promoted.volunteer_type,
                arrival_time=PLACEHOLDER_TIME,
                leaving_time=PLACEHOLDER_TIME,
                note=None,
                approved=False,
                waitlist=False,
            )
        )
        logger.info("Promoted user %s from waitlist on shift %s", promoted.user_id, shift_id)

    for entry in [w for w in shift.waitlist_volunteers if w.user_id == user_id]:
        shift.waitlist_volunteers.remove(entry)

    if (
        len(shift.registered_volunteers) == before_main
        and len(shift.waitlist_volunteers) == before_wait
    ):
        raise InvalidStateError("User was not registered or waitlisted")

    logger.info("User %s unregistered from shift %s", user_id, shift_id)
    return _commit(db, shift)


def update_registration(db: Session, shift_id: int, user_id: int, patch: RegistrationUpdate) -> Shift:
    """Edit the time window or note of the user's own main-list registration."""
    shift = _load(db, shift_id)
    rec = _find_registration(shift, user_id)
    if rec is None:
        raise NotFoundError("Volunteer not found in main registrations")

    data = patch.model_dump(exclude_unset=True)
    arrival = data.get("arrival_time") or rec.arrival_time
    leaving = data.get("leaving_time") or rec.leaving_time
    validate_time_window(arrival, leaving)

    rec.arrival_time = arrival
    rec.leaving_time = leaving
    if "note" in data:
        rec.note = data["note"]
    return _commit(db, shift)


# ---- officer actions ----

def approve(db: Session, shift_id: int, volunteer_id: int, approve: bool) -> Shift:
    """Approve or revoke a main-list volunteer. Capacity is not re-checked."""
    shift = _load(db, shift_id)
    rec = _find_registration(shift, volunteer_id)
    if rec is None:
        raise NotFoundError("Volunteer not found in main registrations")

    rec.approved = approve
    logger.info("%s volunteer %s on shift %s", "Approved" if approve else "Revoked", volunteer_id, shift_id)
    return _commit(db, shift)


def compute_status_indicator(shift: Shift) -> dict:
    total = len(shift.registered_volunteers)
    approved = sum(1 for r in shift.registered_volunteers if r.approved)
    has_pending = any(not r.approved for r in shift.registered_volunteers)
    waitlisted = len(shift.waitlist_volunteers)
    required = shift.required_volunteers

    if total == 0:
        color = "gray"
    elif approved >= required and waitlisted > 0:
        color = "blue"
    elif approved >= required:
        color = "green"
    else:
        color = "orange"

    return {
        "color": color,
        "pending_icon": has_pending,
        "counts": {
            "approved": approved,
            "total": total,
            "required": required,
            "waitlisted": waitlisted,
        },
        "status": shift.status,
    }


def status_indicator(db: Session, shift_id: int) -> dict:
    return compute_status_indicator(_load(db, shift_id))
