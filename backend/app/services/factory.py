"""
Service Factory

Builds the account services from settings. Everything is constructed
explicitly and handed to the application at startup; there are no
module-level service instances.
"""
import datetime as dt

from app.config import Settings
from app.core.security import TokenService
from .accounts import AccountManager
from .credential_store import CredentialStore
from .mailer import Mailer, build_mailer


def build_token_service(settings: Settings) -> TokenService:
    """
    Raises:
    - RuntimeError: JWT_SECRET is not configured
    """
    return TokenService(
        secret=settings.require_jwt_secret(),
        session_ttl=dt.timedelta(minutes=settings.session_ttl_minutes),
        verification_ttl=dt.timedelta(minutes=settings.verification_ttl_minutes),
        reset_ttl=dt.timedelta(minutes=settings.reset_ttl_minutes),
    )


def build_services(settings: Settings, mailer: Mailer | None = None) -> AccountManager:
    """
    Wire store, token service and mailer into an AccountManager

    Parameters:
    - settings: application settings
    - mailer: override the mailer derived from settings (tests)
    """
    return AccountManager(
        store=CredentialStore(),
        tokens=build_token_service(settings),
        mailer=mailer if mailer is not None else build_mailer(settings),
        settings=settings,
    )
