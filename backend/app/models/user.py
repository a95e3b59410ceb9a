# app/models/user.py
"""
Database model for users.
Represents a user account in the system, containing authentication credentials,
role-based access control and the email-verification / password-reset state.
"""
from tortoise import fields, models

class User(models.Model):
    """
    User database model.

    Relationships:
    - Has one Profile (one-to-one, via related_name="profile")
    - Has many Carts (one-to-many, via related_name="carts"); one of them is active

    Security:
    - Password is stored as a hash (never store plain text passwords)
    - Email must be unique across all users (exact, case-sensitive match)
    - reset_token is only set between a forgot-password request and its
      consumption; a new request overwrites the previous token
    """
    id = fields.IntField(pk=True)  # Primary key: numeric user identifier
    name = fields.CharField(max_length=128, default="")  # Display name
    email = fields.CharField(max_length=255, unique=True, index=True)  # Login identity (unique constraint is the source of truth)
    password_hash = fields.CharField(max_length=255)  # Argon2 hash
    role = fields.CharField(max_length=16, default="member")  # "member" (default) or "admin"
    email_verified_at = fields.DatetimeField(null=True)  # Null until the verification link is used
    reset_token = fields.CharField(max_length=64, null=True, index=True)  # Opaque one-time reset token (hex)
    reset_token_expiry = fields.DatetimeField(null=True)  # Absolute expiry of reset_token
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    @property
    def is_verified(self) -> bool:
        return self.email_verified_at is not None

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"  # Database table name
