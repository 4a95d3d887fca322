"""Account router - registration and cookie-based sessions"""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ...auth import get_app_settings, get_current_user
from ...config import Settings
from ...database import get_db
from ...models import User
from .schemas import LoginRequest, RegisterRequest, UserResponse
from .service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_account_service(
    db: Session = Depends(get_db), settings: Settings = Depends(get_app_settings)
) -> AccountService:
    """Dependency injection for AccountService"""
    return AccountService(db, settings)


def _set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
        max_age=settings.jwt_expires_minutes * 60,
        path="/",
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    response: Response,
    service: AccountService = Depends(get_account_service),
):
    """Create a client account and open a session"""
    user = service.register(data)
    _set_session_cookie(response, service.issue_token(user), service.settings)
    return {"success": True, "message": "Account created.", "data": UserResponse.from_model(user)}


@router.post("/login")
async def login(
    data: LoginRequest,
    response: Response,
    service: AccountService = Depends(get_account_service),
):
    user = service.authenticate(data.email, data.password)
    _set_session_cookie(response, service.issue_token(user), service.settings)
    logger.info(f"✅ User {user.id} logged in")
    return {"success": True, "message": "Logged in.", "data": UserResponse.from_model(user)}


@router.post("/logout")
async def logout(response: Response, settings: Settings = Depends(get_app_settings)):
    response.delete_cookie(key=settings.cookie_name, path="/")
    return {"success": True, "message": "Logged out.", "data": None}


@router.get("/me")
async def me(current_user: User = Depends(get_current_user)):
    return {"success": True, "message": "Profile retrieved.", "data": UserResponse.from_model(current_user)}
