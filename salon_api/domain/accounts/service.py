"""Account service - registration, credential checks and session tokens"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...config import Settings
from ...errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from ...models import USER_ROLES, User
from ...security_utils import create_jwt_token, hash_password_bcrypt, verify_password_bcrypt
from .repository import UserRepository
from .schemas import RegisterRequest

logger = logging.getLogger(__name__)


class AccountService:
    """Service layer for account business logic"""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.repo = UserRepository()

    def register(self, data: RegisterRequest) -> User:
        """Create a client account"""
        if self.repo.get_by_email(self.db, data.email):
            raise ConflictError("An account with this email already exists.")

        try:
            user = self.repo.create(
                self.db,
                first_name=data.firstName,
                last_name=data.lastName,
                email=data.email,
                password_hash=hash_password_bcrypt(data.password),
                phone=data.phone,
                role="client",
            )
        except IntegrityError as e:
            # Email taken between the check and the insert
            self.db.rollback()
            raise ConflictError("An account with this email already exists.") from e

        logger.info(f"🆕 New client account created: {user.email}")
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self.repo.get_by_email(self.db, email)
        if not user or not verify_password_bcrypt(password, user.password_hash):
            logger.warning(f"⚠️ Failed login attempt for {email}")
            raise AuthenticationError("Invalid email or password.")
        return user

    def issue_token(self, user: User) -> str:
        return create_jwt_token({"sub": str(user.id), "role": user.role}, self.settings)

    def set_role(self, email: str, role: str) -> User:
        """Change a user's role; used by the admin bootstrap script"""
        if role not in USER_ROLES:
            raise ValidationError(f"Role must be one of {', '.join(USER_ROLES)}.")
        user = self.repo.get_by_email(self.db, email)
        if not user:
            raise NotFoundError("User not found.")
        user = self.repo.set_role(self.db, user, role)
        logger.info(f"🔑 User {user.email} is now '{role}'")
        return user
