# app/services/accounts.py
"""
Account lifecycle: registration, login, password change/reset and email
verification.

Every operation validates its input first and fails without side effects.
Registration writes user, profile and cart in one transaction (see
CredentialStore.create_member). Mail is sent after the database work is done:
a failed send only changes the response message, except for forgot-password
and resend-verification where delivering the mail is the operation itself.

State of an account:
    Registered (email_verified_at null) --verify_email--> Verified
    any --forgot_password--> ResetPending(token, expiry)
        --reset_password | expiry--> back (token cleared or simply stale)
"""
import datetime as dt
import logging
from typing import Callable

from app.config import Settings
from app.core.errors import (
    AuthError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ServerError,
    TokenError,
    ValidationError,
)
from app.core.security import (
    PURPOSE_EMAIL_VERIFICATION,
    TokenService,
    hash_password,
    utc_now,
    verify_password,
)
from app.core.validation import MIN_PASSWORD_LENGTH, is_strong_password, is_valid_email
from app.models.user import User
from app.services import email_templates
from app.services.credential_store import CredentialStore
from app.services.mailer import Mailer

logger = logging.getLogger("uvicorn.error")

MSG_INVALID_EMAIL = "Invalid email format"
MSG_WEAK_PASSWORD = "Password must be at least 8 characters and contain letters and numbers"
MSG_FORGOT_GENERIC = "If the email is registered, a password reset link has been sent"


def _ok(message: str, data: dict | None = None, **extra) -> dict:
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


class AccountManager:
    def __init__(
        self,
        store: CredentialStore,
        tokens: TokenService,
        mailer: Mailer,
        settings: Settings,
        clock: Callable[[], dt.datetime] = utc_now,
    ):
        self.store = store
        self.tokens = tokens
        self.mailer = mailer
        self.settings = settings
        self._clock = clock

    async def _notify(self, to: str, subject: str, html: str) -> bool:
        """Best-effort send; returns False instead of raising."""
        try:
            await self.mailer.send(to, subject, html)
        except Exception:
            logger.warning("[accounts] mail %r to %s failed", subject, to, exc_info=True)
            return False
        return True

    def _verification_mail(self, user: User, resend: bool = False) -> tuple[str, str]:
        token = self.tokens.issue_verification(user)
        link = email_templates.verification_link(self.settings.frontend_url, token)
        hours = int(self.tokens.verification_ttl.total_seconds() // 3600)
        return email_templates.verification_email(user.name, link, hours, resend=resend)

    # ------------------------------------------------------------------
    async def register(
        self,
        name: str | None,
        email: str | None,
        password: str | None,
        confirm_password: str | None,
        profile: dict | None = None,
    ) -> dict:
        """
        Create a member account with its profile and active cart, then mail a
        verification link.

        Raises:
            ValidationError: bad email format, weak password, or confirmation mismatch
            ConflictError: email (or phone number, when given) already registered
            ServerError: the registration transaction failed and was rolled back
        """
        profile = {k: v for k, v in (profile or {}).items() if v not in (None, "")}
        if not is_valid_email(email):
            raise ValidationError(MSG_INVALID_EMAIL)
        if not is_strong_password(password):
            raise ValidationError(MSG_WEAK_PASSWORD)
        if password != confirm_password:
            raise ValidationError("Password and confirmation do not match")

        if await self.store.email_exists(email):
            raise ConflictError("Email is already registered")
        phone = profile.get("phone_number")
        if phone and await self.store.phone_exists(phone):
            raise ConflictError("Phone number is already registered")

        user = await self.store.create_member(
            name=name or "",
            email=email,
            password_hash=hash_password(password),
            profile_fields=profile,
        )
        logger.info("[accounts] registered user_id=%s email=%s", user.id, user.email)

        subject, html = self._verification_mail(user)
        sent = await self._notify(user.email, subject, html)
        data = {"user": {"id": user.id, "name": user.name, "email": user.email}}
        if not sent:
            return _ok(
                "Registration successful, but the verification email could not be sent. "
                "Please request a new one from the login page.",
                data,
                needVerification=True,
            )
        return _ok("Registration successful. Check your email to verify your account.", data)

    async def login(self, email: str | None, password: str | None) -> dict:
        """
        Authenticate with email and password and issue a session token.

        "User not found" and "wrong password" are reported separately, unlike
        forgot_password which never reveals whether an email exists.
        """
        if not is_valid_email(email):
            raise ValidationError(MSG_INVALID_EMAIL)
        if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError("Password must be at least 8 characters")

        user = await self.store.get_by_email(email)
        if user is None:
            raise AuthError("User not found")
        if not verify_password(password, user.password_hash):
            raise AuthError("Wrong password")
        if not user.is_verified:
            raise ForbiddenError(
                "Email is not verified yet. Check your email or request a new verification link.",
                need_verification=True,
            )

        profile = await self.store.get_profile(user)
        token = self.tokens.issue_session(user)
        logger.info("[accounts] login user_id=%s", user.id)
        return _ok("Login successful", {
            "token": token,
            "user": {
                "id": user.id,
                "name": user.name,
                "email": user.email,
                "role": user.role,
                "verified": user.is_verified,
                "profile": profile.summary() if profile else None,
            },
        })

    async def change_password(
        self,
        user_id: int | None,
        old_password: str | None,
        new_password: str | None,
        confirm_password: str | None,
    ) -> dict:
        if not user_id or not old_password or not new_password or not confirm_password:
            raise ValidationError("All fields are required")
        if new_password != confirm_password:
            raise ValidationError("New password and confirmation do not match")
        if not is_strong_password(new_password):
            raise ValidationError(MSG_WEAK_PASSWORD)

        user = await self.store.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if not verify_password(old_password, user.password_hash):
            raise AuthError("Old password is incorrect")

        await self.store.update_password_hash(user, hash_password(new_password))
        logger.info("[accounts] password changed user_id=%s", user.id)

        subject, html = email_templates.password_changed_email(user.name, self._clock())
        if not await self._notify(user.email, subject, html):
            return _ok("Password changed, but the notification email could not be sent.")
        return _ok("Password changed and a notification has been sent to your email.")

    async def forgot_password(self, email: str | None) -> dict:
        """
        Issue a 15 minute reset token and mail the reset link.

        The response is the same whether or not the email is registered. A
        failure to store the token or send the mail is a ServerError.
        """
        if not email:
            raise ValidationError("Email is required")
        if not is_valid_email(email):
            raise ValidationError(MSG_INVALID_EMAIL)

        user = await self.store.get_by_email(email)
        if user is None:
            logger.info("[accounts] forgot-password for unknown email")
            return _ok(MSG_FORGOT_GENERIC)

        token, expiry = self.tokens.issue_opaque()
        try:
            await self.store.set_reset_token(user, token, expiry)
        except Exception:
            logger.exception("[accounts] storing reset token failed user_id=%s", user.id)
            raise ServerError("Failed to create a password reset token")

        link = email_templates.reset_link(self.settings.frontend_url, token, user.email)
        minutes = int(self.tokens.reset_ttl.total_seconds() // 60)
        subject, html = email_templates.reset_email(user.name, link, minutes)
        try:
            await self.mailer.send(user.email, subject, html)
        except Exception:
            logger.exception("[accounts] reset mail failed user_id=%s", user.id)
            raise ServerError("Failed to send the password reset email")

        logger.info("[accounts] reset token issued user_id=%s", user.id)
        return _ok(MSG_FORGOT_GENERIC)

    async def reset_password(self, email: str | None, token: str | None, new_password: str | None) -> dict:
        if not email or not token or not new_password:
            raise ValidationError("All fields are required")
        if not is_valid_email(email):
            raise ValidationError(MSG_INVALID_EMAIL)
        if not is_strong_password(new_password):
            raise ValidationError(MSG_WEAK_PASSWORD)

        now = self._clock()
        user = await self.store.find_by_reset_token(email, token, now)
        if user is None:
            raise TokenError("Reset token is invalid or has expired")
        if not await self.store.consume_reset_token(user, token, hash_password(new_password), now):
            raise TokenError("Reset token is invalid or has expired")
        logger.info("[accounts] password reset user_id=%s", user.id)

        subject, html = email_templates.password_reset_done_email(user.name)
        if not await self._notify(user.email, subject, html):
            return _ok("Password has been reset, but the notification email could not be sent.")
        return _ok("Password has been reset and a notification has been sent to your email.")

    async def resend_verification(self, email: str | None) -> dict:
        # No rate limit: every call issues and mails a new token.
        if not email:
            raise ValidationError("Email is required")
        if not is_valid_email(email):
            raise ValidationError(MSG_INVALID_EMAIL)

        user = await self.store.get_by_email(email)
        if user is None:
            raise NotFoundError("Email is not registered")
        if user.is_verified:
            raise ConflictError("This email is already verified")

        subject, html = self._verification_mail(user, resend=True)
        try:
            await self.mailer.send(user.email, subject, html)
        except Exception:
            logger.exception("[accounts] verification resend failed user_id=%s", user.id)
            raise ServerError("Failed to resend the verification email")
        return _ok("Verification email has been sent again. Please check your inbox.")

    async def verify_email(self, token: str | None) -> dict:
        if not token:
            raise ValidationError("Verification token is missing")
        try:
            claims = self.tokens.verify_signed(token, PURPOSE_EMAIL_VERIFICATION)
        except TokenError:
            raise TokenError(
                "Verification token is invalid or has expired. Please request a new verification email."
            )

        user_id = claims.get("id")
        if not isinstance(user_id, int):
            raise TokenError("Verification token is invalid")
        user = await self.store.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if user.is_verified or not await self.store.mark_email_verified(user, self._clock()):
            raise ConflictError("Email has already been verified")
        logger.info("[accounts] email verified user_id=%s", user.id)
        return _ok("Email verified. Please log in to continue.")

    async def current_user(self, user_id: int) -> dict:
        user = await self.store.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        profile = await self.store.get_profile(user)
        return _ok("User data retrieved", {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "role": user.role,
            "verified": user.is_verified,
            "profile": profile.to_dict() if profile else None,
        })

    async def logout(self, claims: dict) -> dict:
        """
        Session tokens are stateless and stay valid until they expire; logging
        out means the client discards its token.
        """
        logger.info("[accounts] logout user_id=%s", claims.get("id"))
        return _ok("Logged out. Please log in again to continue.")
