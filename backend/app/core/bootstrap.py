# app/core/bootstrap.py
"""
Bootstrap module for application initialization.
Creates the default admin account on first startup.
"""
import logging

from app.config import Settings
from app.core.security import hash_password, utc_now
from app.models.user import User
from app.services.credential_store import CredentialStore

logger = logging.getLogger("uvicorn.error")

async def ensure_default_admin(store: CredentialStore, settings: Settings) -> User | None:
    """
    If no admin exists in the database, create one from settings.
    Only takes effect under the following conditions:
      - Currently no user with role="admin"
      - And ADMIN_PASSWORD is set (to avoid using default weak password)
    The admin is created already verified, with a profile and an active cart
    like any other account.
    """
    if await User.filter(role="admin").exists():
        return None

    if not settings.admin_password:
        logger.warning("[bootstrap] No admin present, but ADMIN_PASSWORD not set -> skip creating default admin.")
        return None

    if await store.email_exists(settings.admin_email):
        logger.warning("[bootstrap] ADMIN_EMAIL %s belongs to a regular account -> skip creating default admin.",
                       settings.admin_email)
        return None

    u = await store.create_member(
        name=settings.admin_name,
        email=settings.admin_email,
        password_hash=hash_password(settings.admin_password),
        role="admin",
        verified_at=utc_now(),
    )
    logger.warning("[bootstrap] Created default admin -> email=%s id=%s", u.email, u.id)
    return u
