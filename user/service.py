import logging

from sqlalchemy import delete, select, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth.utils.auth_utils import get_password_hash, verify_password
from core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from shift.models import ShiftRegistration, ShiftWaitlistEntry
from user.models import User, UserRole
from user.schemas import UserCreate, UserUpdate

logger = logging.getLogger(__name__)

VOLUNTEER_FIELDS = ("volunteer_type", "has_driver_license")
REQUIRED_FIELDS = ("full_name", "email", "phone", "service_number", "gender")


def normalize_email(email: str) -> str:
    return str(email).strip().lower()


def get_users(db: Session) -> list[User]:
    return list(db.scalars(select(User).order_by(User.id)))


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalars(select(User).where(User.email == normalize_email(email))).first()


def _load(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found.")
    return user


def _find_clash(db: Session, email: str, service_number: str, exclude_id: int | None = None) -> User | None:
    stmt = select(User).where(or_(User.email == email, User.service_number == service_number))
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    return db.scalars(stmt).first()


def _raise_clash(clash: User, email: str) -> None:
    if clash.email == email:
        raise ConflictError("Email already taken.")
    raise ConflictError("Service number already taken.")


def _commit(db: Session) -> None:
    # unique constraints still catch a duplicate that slipped past _find_clash
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("User write rejected by a unique constraint")
        raise ConflictError("Email or service number already taken.")


def create_user(db: Session, user: UserCreate) -> User:
    email = normalize_email(user.email)
    if user.role == UserRole.volunteer and (user.volunteer_type is None or user.has_driver_license is None):
        raise ValidationError("volunteer_type and has_driver_license are required for volunteers")

    clash = _find_clash(db, email, user.service_number)
    if clash is not None:
        _raise_clash(clash, email)

    db_user = User(
        full_name=user.full_name,
        email=email,
        phone=user.phone,
        password_hash=get_password_hash(user.password),
        role=user.role,
        service_number=user.service_number,
        gender=user.gender,
        # officers carry no volunteer profile
        volunteer_type=user.volunteer_type if user.role == UserRole.volunteer else None,
        has_driver_license=user.has_driver_license if user.role == UserRole.volunteer else None,
        is_active=True,
    )
    db.add(db_user)
    _commit(db)
    db.refresh(db_user)
    logger.info("Created %s user %s", db_user.role.value, db_user.id)
    return db_user


def update_me(db: Session, user_id: int, patch: UserUpdate) -> User:
    """Apply a profile patch to the caller's own row."""
    db_user = _load(db, user_id)
    data = patch.model_dump(exclude_unset=True)

    for k in REQUIRED_FIELDS:
        if k in data and data[k] is None:
            raise ValidationError(f"{k} cannot be null")
    if db_user.role == UserRole.volunteer:
        for k in VOLUNTEER_FIELDS:
            if k in data and data[k] is None:
                raise ValidationError(f"{k} is required for volunteers")
    else:
        for k in VOLUNTEER_FIELDS:
            data.pop(k, None)

    if "email" in data:
        data["email"] = normalize_email(data["email"])
    if "email" in data or "service_number" in data:
        email = data.get("email", db_user.email)
        clash = _find_clash(db, email, data.get("service_number", db_user.service_number), exclude_id=db_user.id)
        if clash is not None:
            _raise_clash(clash, email)

    for k, v in data.items():
        setattr(db_user, k, v)
    _commit(db)
    db.refresh(db_user)
    logger.info("User %s updated profile fields %s", db_user.id, sorted(data))
    return db_user


def delete_me(db: Session, user_id: int) -> None:
    db_user = _load(db, user_id)
    # freed seats are not back-filled from the waitlist
    db.execute(delete(ShiftRegistration).where(ShiftRegistration.user_id == user_id))
    db.execute(delete(ShiftWaitlistEntry).where(ShiftWaitlistEntry.user_id == user_id))
    db.delete(db_user)
    db.commit()
    logger.info("Deleted user %s", user_id)


def change_password(db: Session, user_id: int, current_password: str, new_password: str) -> None:
    db_user = _load(db, user_id)
    if not verify_password(current_password, db_user.password_hash):
        logger.warning("Rejected password change for user %s", user_id)
        raise AuthorizationError("Current password is incorrect.")
    db_user.password_hash = get_password_hash(new_password)
    db.commit()
    logger.info("Password changed for user %s", user_id)
