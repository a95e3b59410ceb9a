# app/models/profile.py
"""
Database model for user profiles.
A profile is the 1:1 extension of a User holding contact/address fields and
the avatar reference. It is created together with the user at registration.
"""
from tortoise import fields, models

class Profile(models.Model):
    id = fields.IntField(pk=True)
    user = fields.OneToOneField(
        "models.User",
        related_name="profile",
        on_delete=fields.CASCADE,
    )  # Owning user; deleting the user deletes the profile
    phone_number = fields.CharField(max_length=32, null=True, unique=True)  # Optional, unique when present
    address = fields.CharField(max_length=255, null=True)
    city = fields.CharField(max_length=128, null=True)
    country = fields.CharField(max_length=128, null=True)
    zip_code = fields.CharField(max_length=16, null=True)
    avatar_url = fields.CharField(max_length=1024, null=True)  # Uploaded avatar location
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    def summary(self) -> dict:
        """Short form returned on login."""
        return {
            "phone_number": self.phone_number,
            "avatar_url": self.avatar_url,
            "city": self.city,
            "country": self.country,
        }

    def to_dict(self) -> dict:
        return {
            "phone_number": self.phone_number,
            "address": self.address,
            "city": self.city,
            "country": self.country,
            "zip_code": self.zip_code,
            "avatar_url": self.avatar_url,
        }

    class Meta:
        table = "profiles"
