from fastapi import Depends
from auth.services.auth_service import get_current_active_user
from core.exceptions import ForbiddenError
from user.models import User, UserRole


def require_role(*roles: UserRole):
    allowed = {UserRole(r) for r in roles}

    def guard(user: User = Depends(get_current_active_user)) -> User:
        if user.role not in allowed:
            raise ForbiddenError("Forbidden")
        return user

    return guard


require_officer = require_role(UserRole.officer)
require_volunteer_or_officer = require_role(UserRole.volunteer, UserRole.officer)
