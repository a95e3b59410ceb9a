# app/services/credential_store.py
"""
Credential store: every read and write the account lifecycle performs on
users, profiles and carts.

Writes that must be all-or-nothing are exposed as a single method wrapping a
database transaction; callers never stitch partial writes together.
"""
import datetime as dt
import logging

from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction

from app.core.errors import ConflictError, ServerError
from app.models.cart import CART_ACTIVE, Cart
from app.models.profile import Profile
from app.models.user import User

logger = logging.getLogger("uvicorn.error")

PROFILE_FIELDS = ("phone_number", "address", "city", "country", "zip_code", "avatar_url")


class CredentialStore:
    def __init__(self, connection_name: str = "default"):
        self.connection_name = connection_name

    # ----- lookups -----
    async def get_by_email(self, email: str) -> User | None:
        return await User.get_or_none(email=email)

    async def get_by_id(self, user_id: int) -> User | None:
        return await User.get_or_none(id=user_id)

    async def email_exists(self, email: str) -> bool:
        return await User.filter(email=email).exists()

    async def phone_exists(self, phone_number: str) -> bool:
        return await Profile.filter(phone_number=phone_number).exists()

    async def get_profile(self, user: User) -> Profile | None:
        return await Profile.get_or_none(user_id=user.id)

    # ----- registration -----
    async def create_member(
        self,
        name: str,
        email: str,
        password_hash: str,
        profile_fields: dict | None = None,
        role: str = "member",
        verified_at: dt.datetime | None = None,
    ) -> User:
        """
        Create the user, its profile and its active cart in one transaction.

        Any failure rolls back all three inserts. The unique constraints on
        users.email and profiles.phone_number are the source of truth for
        duplicates: a violation here (e.g. two concurrent registrations that
        both passed the pre-check) is reported as ConflictError.
        """
        profile_fields = {k: v for k, v in (profile_fields or {}).items() if k in PROFILE_FIELDS}
        try:
            async with in_transaction(self.connection_name) as conn:
                user = await User.create(
                    name=name,
                    email=email,
                    password_hash=password_hash,
                    role=role,
                    email_verified_at=verified_at,
                    using_db=conn,
                )
                await Profile.create(user=user, using_db=conn, **profile_fields)
                await Cart.create(user=user, status=CART_ACTIVE, using_db=conn)
        except IntegrityError:
            logger.warning("[store] registration rejected by unique constraint email=%s", email)
            raise ConflictError("Email or phone number is already registered")
        except Exception:
            logger.exception("[store] registration transaction rolled back email=%s", email)
            raise ServerError("Internal server error")
        return user

    # ----- password -----
    async def update_password_hash(self, user: User, password_hash: str) -> None:
        user.password_hash = password_hash
        await user.save(update_fields=["password_hash", "updated_at"])

    async def set_reset_token(self, user: User, token: str, expiry: dt.datetime) -> None:
        """Store a reset token, replacing whatever token the user had before."""
        user.reset_token = token
        user.reset_token_expiry = expiry
        await user.save(update_fields=["reset_token", "reset_token_expiry", "updated_at"])

    async def find_by_reset_token(self, email: str, token: str, now: dt.datetime) -> User | None:
        """Return the user owning ``token`` if it has not expired at ``now``."""
        if not token:
            return None
        user = await User.get_or_none(email=email, reset_token=token)
        if user is None or user.reset_token_expiry is None:
            return None
        expiry = user.reset_token_expiry
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=dt.timezone.utc)
        if expiry <= now:
            return None
        return user

    async def consume_reset_token(self, user: User, token: str, password_hash: str, now: dt.datetime) -> bool:
        """
        Set the new password and clear the reset token in one UPDATE.

        Returns False if the token was consumed or replaced in the meantime.
        """
        updated = await User.filter(id=user.id, reset_token=token).update(
            password_hash=password_hash,
            reset_token=None,
            reset_token_expiry=None,
            updated_at=now,
        )
        return updated == 1

    # ----- verification -----
    async def mark_email_verified(self, user: User, when: dt.datetime) -> bool:
        """
        Flip email_verified_at from null to ``when``.

        Returns False if the user was already verified.
        """
        updated = await User.filter(id=user.id, email_verified_at__isnull=True).update(
            email_verified_at=when,
            updated_at=when,
        )
        return updated == 1

    # ----- cart -----
    async def get_or_create_active_cart(self, user: User) -> Cart:
        cart = await Cart.filter(user_id=user.id, status=CART_ACTIVE).order_by("id").first()
        if cart is None:
            cart = await Cart.create(user=user, status=CART_ACTIVE)
            logger.info("[store] created missing active cart user_id=%s cart_id=%s", user.id, cart.id)
        return cart
