# app/models/cart.py
from tortoise import fields, models

CART_ACTIVE = "active"

class Cart(models.Model):
    """
    A user's purchasing session.

    Exactly one cart per user is meant to have status "active". This is kept
    by get-or-create in the credential store, not by a database constraint.
    """
    id = fields.IntField(pk=True)
    user = fields.ForeignKeyField("models.User", related_name="carts", on_delete=fields.CASCADE)
    status = fields.CharField(max_length=16, default=CART_ACTIVE)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "course_carts"
