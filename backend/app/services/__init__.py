"""
Services Module

Account lifecycle and the collaborators it is built from:
- CredentialStore: user/profile/cart persistence (Tortoise ORM)
- AccountManager: registration, login, password and verification flows
- Mailer: outbound notification mail (SMTP)
"""

from .accounts import AccountManager
from .credential_store import CredentialStore
from .mailer import LoggingMailer, Mailer, SmtpMailer, build_mailer
from .factory import build_services

__all__ = [
    "AccountManager",
    "CredentialStore",
    "LoggingMailer",
    "Mailer",
    "SmtpMailer",
    "build_mailer",
    "build_services",
]
