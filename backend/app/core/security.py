# app/core/security.py
"""
Security module for authentication.
Handles password hashing, signed (JWT) token issuance/validation and the
random one-time tokens used for password reset.
"""
import datetime as dt
import secrets
from typing import Any, Callable

import jwt  # PyJWT
from passlib.context import CryptContext

from app.core.errors import TokenError

# Password hashing context
# Argon2 is a modern, secure password hashing algorithm
pwd_context = CryptContext(
    schemes=["argon2"],  # Use Argon2 for password hashing
    deprecated="auto",   # Automatically handle deprecated schemes
)

JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)

# Values of the "typ" claim; a token is only accepted for the purpose it was issued for
PURPOSE_SESSION = "session"
PURPOSE_EMAIL_VERIFICATION = "email_verification"

RESET_TOKEN_BYTES = 32  # 64 hex characters


def utc_now() -> dt.datetime:
    """Current UTC time, timezone-aware."""
    return dt.datetime.now(dt.timezone.utc)


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Note: Never store plain text passwords. Always use this function before saving.
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a hashed password.

    Returns:
        True if password matches, False otherwise (including unreadable hashes)
    """
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False


class TokenService:
    """
    Issues and validates the tokens used by the account lifecycle.

    Two kinds are signed JWTs validated without a store lookup:
      - session tokens (user id, email, role)
      - email-verification tokens (user id, email)
    The third kind, the password-reset token, is an opaque random value that
    is only meaningful together with the expiry stored on the user row.

    Signed tokens cannot be revoked before they expire; their lifetime is
    kept short (two hours by default).
    """

    def __init__(
        self,
        secret: str,
        session_ttl: dt.timedelta = dt.timedelta(hours=2),
        verification_ttl: dt.timedelta = dt.timedelta(hours=2),
        reset_ttl: dt.timedelta = dt.timedelta(minutes=15),
        clock: Callable[[], dt.datetime] = utc_now,
    ):
        if not secret:
            raise ValueError("a non-empty signing secret is required")
        self._secret = secret
        self.session_ttl = session_ttl
        self.verification_ttl = verification_ttl
        self.reset_ttl = reset_ttl
        self._clock = clock

    def issue_signed(self, claims: dict[str, Any], ttl: dt.timedelta, purpose: str) -> str:
        """
        Sign ``claims`` into a JWT that expires ``ttl`` from now.

        Token payload additionally includes:
            - typ: token purpose (session / email_verification)
            - iat: Issued at timestamp
            - exp: Expiration timestamp
        """
        now = self._clock()
        payload = dict(claims)
        payload.update({
            "typ": purpose,
            "iat": now,
            "exp": now + ttl,
        })
        return jwt.encode(payload, self._secret, algorithm=JWT_ALG)

    def verify_signed(self, token: str, purpose: str | None = None) -> dict[str, Any]:
        """
        Decode and validate a signed token.

        Raises:
            TokenError: if the token is malformed, the signature is wrong,
                it has expired, or it was issued for another purpose
        """
        if not token:
            raise TokenError("Token is missing")
        try:
            # Time claims are checked below against the service clock
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALG],
                options={
                    "require": ["exp", "typ"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError:
            raise TokenError("Token is invalid")

        exp = payload["exp"]
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise TokenError("Token is invalid")
        if exp <= self._clock().timestamp():
            raise TokenError("Token has expired")
        if purpose is not None and payload.get("typ") != purpose:
            raise TokenError("Token is invalid")
        return payload

    def issue_session(self, user) -> str:
        claims = {"sub": str(user.id), "id": user.id, "email": user.email, "role": user.role}
        return self.issue_signed(claims, self.session_ttl, PURPOSE_SESSION)

    def issue_verification(self, user) -> str:
        claims = {"sub": str(user.id), "id": user.id, "email": user.email}
        return self.issue_signed(claims, self.verification_ttl, PURPOSE_EMAIL_VERIFICATION)

    def issue_opaque(self, ttl: dt.timedelta | None = None) -> tuple[str, dt.datetime]:
        """
        Return a random one-time token and its absolute expiry.

        The token carries no structure; it is validated by looking it up
        together with its expiry.
        """
        token = secrets.token_hex(RESET_TOKEN_BYTES)
        return token, self._clock() + (ttl if ttl is not None else self.reset_ttl)
