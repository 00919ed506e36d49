import unittest
from datetime import date, datetime, timezone
from unittest.mock import patch

import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from core.database import Base
from core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from auth.services import auth_service
from auth.utils.auth_utils import create_access_token, decode_access_token, verify_password
from user import service
from user.models import Gender, UserRole, VolunteerType
from user.schemas import UserCreate, UserUpdate
from shift.models import Shift, ShiftRegistration, ShiftStatus, ShiftType, ShiftWaitlistEntry, Unit
import models_bootstrap


def _volunteer(**overrides):
    data = dict(
        full_name="Dana Levi",
        email="  Dana.Levi@Example.com ",
        phone="0521234567",
        password="secret123",
        role=UserRole.volunteer,
        service_number="1234567",
        gender=Gender.female,
        volunteer_type=VolunteerType.stage_b,
        has_driver_license=False,
    )
    data.update(overrides)
    return UserCreate.model_construct(**data)


class UserServiceTests(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine("sqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        self.db = sessionmaker(bind=self.engine, future=True)()

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_create_user_normalizes_email_and_hashes(self):
        user = service.create_user(self.db, _volunteer())
        self.assertEqual(user.email, "dana.levi@example.com")
        self.assertNotEqual(user.password_hash, "secret123")
        self.assertTrue(verify_password("secret123", user.password_hash))
        self.assertEqual(service.get_user_by_email(self.db, "DANA.levi@example.com").id, user.id)

    def test_create_user_duplicate_email(self):
        service.create_user(self.db, _volunteer())
        with self.assertRaises(ConflictError) as cm:
            service.create_user(self.db, _volunteer(email="dana.levi@example.com", service_number="7654321"))
        self.assertEqual(cm.exception.detail, "Email already taken.")

    def test_create_user_duplicate_service_number(self):
        service.create_user(self.db, _volunteer())
        with self.assertRaises(ConflictError):
            service.create_user(self.db, _volunteer(email="other@example.com"))

    def test_volunteer_requires_profile(self):
        with self.assertRaises(ValidationError):
            service.create_user(self.db, _volunteer(volunteer_type=None))

    def test_officer_drops_volunteer_profile(self):
        user = service.create_user(self.db, _volunteer(role=UserRole.officer))
        self.assertEqual(user.role, UserRole.officer)
        self.assertIsNone(user.volunteer_type)

    def test_schema_rejects_volunteer_without_profile(self):
        with self.assertRaises(ValueError):
            UserCreate(
                full_name="No Profile", email="np@example.com", phone="0521234567", password="secret123",
                service_number="1234567", gender="male",
            )

    def test_unique_constraint_race_becomes_conflict(self):
        service.create_user(self.db, _volunteer())
        # a concurrent insert slips past the pre-check; the store still rejects it
        with patch.object(service, "_find_clash", return_value=None):
            with self.assertRaises(ConflictError):
                service.create_user(self.db, _volunteer(email="dana.levi@example.com", service_number="7654321"))
        self.assertEqual(len(service.get_users(self.db)), 1)

    # ---- self-service ----
    def test_update_me_partial(self):
        user = service.create_user(self.db, _volunteer())
        updated = service.update_me(
            self.db, user.id, UserUpdate(full_name="Dana Cohen", email="DANA.C@Example.com", has_driver_license=True)
        )
        self.assertEqual(updated.full_name, "Dana Cohen")
        self.assertEqual(updated.email, "dana.c@example.com")
        self.assertTrue(updated.has_driver_license)
        self.assertEqual(updated.role, UserRole.volunteer)
        self.assertEqual(updated.phone, "0521234567")

    def test_update_me_same_email_is_not_a_clash(self):
        user = service.create_user(self.db, _volunteer())
        updated = service.update_me(self.db, user.id, UserUpdate(email="dana.levi@example.com"))
        self.assertEqual(updated.email, "dana.levi@example.com")

    def test_update_me_email_taken(self):
        service.create_user(self.db, _volunteer())
        other = service.create_user(self.db, _volunteer(email="other@example.com", service_number="7654321"))
        with self.assertRaises(ConflictError) as cm:
            service.update_me(self.db, other.id, UserUpdate(email="Dana.Levi@example.com"))
        self.assertEqual(cm.exception.detail, "Email already taken.")
        self.assertEqual(service.get_user(self.db, other.id).email, "other@example.com")

    def test_update_me_rejects_null_required_field(self):
        user = service.create_user(self.db, _volunteer())
        with self.assertRaises(ValidationError):
            service.update_me(self.db, user.id, UserUpdate(volunteer_type=None))
        with self.assertRaises(ValidationError):
            service.update_me(self.db, user.id, UserUpdate(full_name=None))

    def test_update_me_officer_ignores_volunteer_profile(self):
        user = service.create_user(self.db, _volunteer(role=UserRole.officer))
        updated = service.update_me(self.db, user.id, UserUpdate(volunteer_type=VolunteerType.stage_a))
        self.assertIsNone(updated.volunteer_type)

    def test_update_me_missing_user(self):
        with self.assertRaises(NotFoundError):
            service.update_me(self.db, 424242, UserUpdate(full_name="Ghost User"))

    def test_update_schema_forbids_role_and_password(self):
        with self.assertRaises(ValueError):
            UserUpdate(role="officer")
        with self.assertRaises(ValueError):
            UserUpdate(password="newsecret")

    def test_delete_me_removes_user_and_shift_rows(self):
        user = service.create_user(self.db, _volunteer())
        keep = service.create_user(self.db, _volunteer(email="other@example.com", service_number="7654321"))
        shift = Shift(date=date(2025, 10, 16), shift_type=ShiftType.morning, unit=Unit.patrol,
                      required_volunteers=1, status=ShiftStatus.open)
        shift.registered_volunteers.append(ShiftRegistration(
            user_id=user.id, volunteer_type=VolunteerType.stage_b, arrival_time="08:00", leaving_time="14:00"))
        shift.waitlist_volunteers.append(ShiftWaitlistEntry(
            user_id=keep.id, volunteer_type=VolunteerType.stage_b, registered_at=datetime.now(timezone.utc)))
        self.db.add(shift)
        self.db.commit()

        service.delete_me(self.db, user.id)
        self.assertIsNone(service.get_user(self.db, user.id))
        self.assertEqual(self.db.query(ShiftRegistration).count(), 0)
        self.assertEqual(self.db.query(ShiftWaitlistEntry).count(), 1)

    def test_delete_me_missing_user(self):
        with self.assertRaises(NotFoundError):
            service.delete_me(self.db, 424242)

    def test_change_password(self):
        user = service.create_user(self.db, _volunteer())
        service.change_password(self.db, user.id, "secret123", "better-secret")
        self.assertEqual(auth_service.login(self.db, "dana.levi@example.com", "better-secret").count("."), 2)
        with self.assertRaises(AuthorizationError):
            auth_service.login(self.db, "dana.levi@example.com", "secret123")

    def test_change_password_wrong_current(self):
        user = service.create_user(self.db, _volunteer())
        old_hash = user.password_hash
        with self.assertRaises(AuthorizationError) as cm:
            service.change_password(self.db, user.id, "nope", "better-secret")
        self.assertEqual(cm.exception.detail, "Current password is incorrect.")
        self.assertEqual(service.get_user(self.db, user.id).password_hash, old_hash)

    # ---- auth ----
    def test_login_and_authenticate(self):
        user = service.create_user(self.db, _volunteer())
        token = auth_service.login(self.db, "dana.levi@example.com", "secret123")
        caller = auth_service.authenticate(self.db, token)
        self.assertEqual(caller.id, user.id)
        self.assertEqual(caller.role, UserRole.volunteer)

    def test_login_wrong_password(self):
        service.create_user(self.db, _volunteer())
        with self.assertRaises(AuthorizationError):
            auth_service.login(self.db, "dana.levi@example.com", "nope")

    def test_login_unknown_email(self):
        with self.assertRaises(AuthorizationError):
            auth_service.login(self.db, "ghost@example.com", "secret123")

    def test_authenticate_garbage_token(self):
        with self.assertRaises(AuthorizationError):
            auth_service.authenticate(self.db, "not-a-jwt")

    def test_authenticate_deleted_user(self):
        token = create_access_token(424242, "officer")
        with self.assertRaises(AuthorizationError):
            auth_service.authenticate(self.db, token)

    def test_token_roundtrip_carries_role(self):
        payload = decode_access_token(create_access_token(5, "officer"))
        self.assertEqual(payload["sub"], "5")
        self.assertEqual(payload["role"], "officer")

    def test_tampered_token_rejected(self):
        token = create_access_token(5, "volunteer")
        forged = jwt.encode({"sub": "5", "role": "officer"}, "wrong-secret", algorithm="HS256")
        self.assertNotEqual(token, forged)
        with self.assertRaises(jwt.InvalidTokenError):
            decode_access_token(forged)


if __name__ == "__main__":
    unittest.main()
