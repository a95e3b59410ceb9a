# app/models/__init__.py
"""
Database models module initialization.
Exports all database models for convenient imports throughout the application.

Models exported:
- User: User account, credentials, verification and reset-token state
- Profile: Contact/address extension of User (one-to-one)
- Cart: Purchasing session; one active cart per user
"""
from .user import User
from .profile import Profile
from .cart import Cart
