"""
Promote an existing account to the admin role
Usage: python create_admin.py <email> [role]
"""
import logging
import sys

from salon_api.config import get_settings
from salon_api.database import Base, SessionLocal, engine
from salon_api.domain.accounts.service import AccountService
from salon_api.errors import AppError

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def set_role(email: str, role: str = "admin"):
    Base.metadata.create_all(bind=engine, checkfirst=True)
    db = SessionLocal()
    try:
        AccountService(db, get_settings()).set_role(email.strip().lower(), role)
    finally:
        db.close()
    logger.info(f"✅ {email} now has role '{role}'")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        logger.error("Usage: python create_admin.py <email> [role]")
        sys.exit(1)

    try:
        set_role(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else "admin")
    except AppError as e:
        logger.error(f"❌ {e.message}")
        sys.exit(1)
