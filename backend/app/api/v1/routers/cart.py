# app/api/v1/routers/cart.py
from fastapi import APIRouter, Depends
from app.api.v1.deps import get_accounts, get_current_claims
from app.core.errors import NotFoundError
from app.services.accounts import AccountManager

router = APIRouter(prefix="/cart", tags=["cart"])

@router.get("")
async def get_active_cart(
    claims: dict = Depends(get_current_claims),
    accounts: AccountManager = Depends(get_accounts),
):
    """
    Return the caller's active cart, creating it if the user has none.

    Returns:
        dict: {success, message, data: {cart_id, status}}
    """
    user = await accounts.store.get_by_id(claims["id"])
    if user is None:
        raise NotFoundError("User not found")
    cart = await accounts.store.get_or_create_active_cart(user)
    return {"success": True, "message": "Cart retrieved", "data": {"cart_id": cart.id, "status": cart.status}}
