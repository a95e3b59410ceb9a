# app/core/validation.py
"""Input format rules shared by the account operations."""
import re

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# At least 8 characters, at least one letter and one digit
PASSWORD_RE = re.compile(r"^(?=.*[A-Za-z])(?=.*\d).{8,}$")

MIN_PASSWORD_LENGTH = 8


def is_valid_email(email: str | None) -> bool:
    return bool(email) and EMAIL_RE.fullmatch(email) is not None


def is_strong_password(password: str | None) -> bool:
    return bool(password) and PASSWORD_RE.fullmatch(password) is not None
