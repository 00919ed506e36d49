from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from auth.services import auth_service
from auth.utils.auth_utils import create_access_token
from core.database import get_db
from user import service as user_service
from user.schemas import UserCreate, LoginPayload, TokenSchema

auth_router = APIRouter(prefix="/auth", tags=["Auth"])


# Sign up (returns a token so the client is logged in right away)
@auth_router.post("/register", response_model=TokenSchema, status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, db: Session = Depends(get_db)):
    user = user_service.create_user(db, payload)
    return TokenSchema(access_token=create_access_token(user.id, user.role.value))


@auth_router.post("/login", response_model=TokenSchema)
def login(payload: LoginPayload, db: Session = Depends(get_db)):
    return TokenSchema(access_token=auth_service.login(db, payload.email, payload.password))
