"""Registration and login routes"""

from fastapi import APIRouter, Depends, status
import logging

from api.dependencies import get_db, rate_limit
from domain.schemas.user_schemas import LoginRequest, RegisterRequest, UserResponse
from services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Auth"], dependencies=[Depends(rate_limit)])
logger = logging.getLogger("smartplates.api.auth")


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, db=Depends(get_db)):
    """Create an account. Emails listed in ADMIN_EMAILS get the admin role."""
    return UserService.register(db, body.name, body.email, body.password, body.confirm_password)


@router.post("/login", response_model=UserResponse)
def login(body: LoginRequest, db=Depends(get_db)):
    """Check credentials; the returned id is sent back as X-User-Id."""
    return UserService.authenticate(db, body.email, body.password)
