import pytest

from app.config import Settings
from app.core.bootstrap import ensure_default_admin
from app.core.security import verify_password
from app.models import Cart, Profile, User

pytestmark = pytest.mark.asyncio


async def test_creates_verified_admin(accounts):
    settings = Settings(admin_email="root@x.com", admin_password="rootpass1")
    admin = await ensure_default_admin(accounts.store, settings)

    assert admin.role == "admin"
    assert admin.email_verified_at is not None
    assert verify_password("rootpass1", admin.password_hash)
    assert await Profile.filter(user_id=admin.id).exists()
    assert await Cart.filter(user_id=admin.id, status="active").exists()

    # second startup is a no-op
    assert await ensure_default_admin(accounts.store, settings) is None
    assert await User.filter(role="admin").count() == 1


async def test_skips_without_password(accounts):
    assert await ensure_default_admin(accounts.store, Settings(admin_password=None)) is None
    assert await User.all().count() == 0


async def test_skips_when_email_taken_by_member(accounts, create_user):
    member, _ = await create_user()
    settings = Settings(admin_email=member.email, admin_password="rootpass1")
    assert await ensure_default_admin(accounts.store, settings) is None
    assert await User.filter(role="admin").count() == 0
