# app/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.

Fields are optional on purpose: missing values are reported by the account
service as a 400 validation error with a readable message.
"""
from pydantic import BaseModel

class RegisterIn(BaseModel):
    """
    Request model for registration.
    Profile fields are stored on the profile created with the user.
    """
    name: str | None = None
    email: str | None = None
    password: str | None = None
    confirmPassword: str | None = None
    phone_number: str | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    zip_code: str | None = None
    profile_picture: str | None = None  # Stored as profiles.avatar_url

    def profile_fields(self) -> dict:
        return {
            "phone_number": self.phone_number,
            "address": self.address,
            "city": self.city,
            "country": self.country,
            "zip_code": self.zip_code,
            "avatar_url": self.profile_picture,
        }

class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None

class EmailIn(BaseModel):
    """Body of forgot-password and resend-verification."""
    email: str | None = None

class ResetPasswordIn(BaseModel):
    email: str | None = None
    token: str | None = None
    new_password: str | None = None

class ChangePasswordIn(BaseModel):
    user_id: int | None = None
    old_password: str | None = None
    new_password: str | None = None
    confirm_password: str | None = None
