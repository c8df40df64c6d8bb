"""Seed the default admin user if not present."""
import logging

from awinja.api.deps import get_password_hash
from awinja.config import settings
from awinja.models.user import User, UserRole

logger = logging.getLogger(__name__)


async def seed_admin():
    if not settings.admin_password:
        logger.info("ADMIN_PASSWORD not set; skipping admin seed")
        return
    existing = await User.find_one(User.email == settings.admin_email)
    if existing:
        return
    await User(
        email=settings.admin_email,
        hashed_password=get_password_hash(settings.admin_password),
        role=UserRole.ADMIN,
        full_name=settings.admin_full_name,
    ).insert()
    logger.info("Seeded admin account %s", settings.admin_email)
