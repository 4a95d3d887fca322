import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import Settings
from .database import get_db
from .errors import AuthenticationError, AuthorizationError
from .models import User
from .security_utils import verify_jwt_token

logger = logging.getLogger(__name__)

# Cookie is the primary transport; the header is accepted for API clients
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """The authenticated actor performing an operation"""

    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def require_admin(actor: Principal) -> None:
    """Raise AuthorizationError unless the actor holds the admin role"""
    if not actor.is_admin:
        logger.warning(f"⚠️ User {actor.user_id} attempted an admin-only operation")
        raise AuthorizationError("Access denied. Administrator role required.")


def get_app_settings(request: Request) -> Settings:
    """Settings object attached to the application at startup"""
    return request.app.state.settings


def get_clock(settings: Settings = Depends(get_app_settings)) -> Callable[[], datetime]:
    """Wall-clock source for booking rules, as naive local time in the salon's zone"""
    zone = ZoneInfo(settings.salon_timezone)

    def now() -> datetime:
        return datetime.now(zone).replace(tzinfo=None)

    return now


def _extract_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials], settings: Settings
) -> Optional[str]:
    token = request.cookies.get(settings.cookie_name)
    if token:
        return token
    if credentials and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the session token (cookie or Bearer header) to a stored user"""
    token = _extract_token(request, credentials, settings)
    if not token:
        raise AuthenticationError("Missing authentication token.")

    payload = verify_jwt_token(token, settings)
    if not payload:
        raise AuthenticationError("Invalid or expired authentication token.")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        logger.error(f"❌ Token missing user ID claim. Available claims: {list(payload.keys())}")
        raise AuthenticationError("Invalid token claims.") from None

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"⚠️ Token references unknown user {user_id}")
        raise AuthenticationError("User not found.")

    logger.debug(f"✅ User authenticated: {user.email}")
    return user


async def get_current_principal(user: User = Depends(get_current_user)) -> Principal:
    """Identity and role of the authenticated user, as consumed by the services"""
    return Principal(user_id=user.id, role=user.role)
