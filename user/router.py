from fastapi import APIRouter, Depends, HTTPException, Response, status

from sqlalchemy.orm import Session

from auth.services.auth_service import get_current_active_user
from core.database import get_db
from user.models import User
from authz.deps import require_officer
from user.schemas import PasswordChange, UserSchema, UserUpdate
from user.service import get_users, get_user, update_me, delete_me, change_password

user_router = APIRouter(
    prefix='/users',
    tags=['Users']
)

# Get all users (officer)
@user_router.get('', response_model=list[UserSchema])
def user_list(db: Session = Depends(get_db), _officer = Depends(require_officer)):
    return get_users(db)

# Get current user
@user_router.get('/me', response_model=UserSchema)
def user_me(current_user: User = Depends(get_current_active_user)):
    return current_user

# Update own profile (role and password are not editable here)
@user_router.put('/me', response_model=UserSchema)
def user_update_me(
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    return update_me(db, current_user.id, payload)

# Delete own account
@user_router.delete('/me', status_code=status.HTTP_204_NO_CONTENT)
def user_delete_me(db: Session = Depends(get_db), current_user: User = Depends(get_current_active_user)):
    delete_me(db, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# Change own password
@user_router.put('/me/password')
def user_change_password(
    payload: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    change_password(db, current_user.id, payload.current_password, payload.new_password)
    return {"message": "Password updated successfully."}

# Get user details (officer)
@user_router.get('/{user_id}', response_model=UserSchema)
def user_detail(user_id: int, db: Session = Depends(get_db), _officer = Depends(require_officer)):
    db_user = get_user(db, user_id)
    if db_user is None:
        raise HTTPException(status_code=404, detail="User not found")

    return db_user
