# app/api/v1/deps.py
from fastapi import Depends, Header, Request, status
from app.core.errors import AuthError, TokenError
from app.core.security import PURPOSE_SESSION
from app.services.accounts import AccountManager

def get_accounts(request: Request) -> AccountManager:
    """
    FastAPI dependency returning the AccountManager built at startup.

    The manager (and the store, token service and mailer inside it) is
    constructed once in app.main and kept on ``app.state``; tests replace it
    with one wired to a recording mailer.
    """
    return request.app.state.accounts

async def get_current_claims(
    authorization: str | None = Header(default=None),
    accounts: AccountManager = Depends(get_accounts),
) -> dict:
    """
    FastAPI dependency validating ``Authorization: Bearer <token>``.

    Returns:
        dict: claims of the session token (id, email, role, ...)

    Raises:
        AuthError (401): no bearer token in the request
        TokenError (403): token is malformed, expired, wrongly signed or not a session token

    Usage:
        @router.get("/protected")
        async def protected_route(claims: dict = Depends(get_current_claims)):
            return {"user_id": claims["id"]}
    """
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise AuthError("Token not found in Authorization header")

    try:
        return accounts.tokens.verify_signed(token, PURPOSE_SESSION)
    except TokenError:
        raise TokenError("Token is invalid or has expired", status_code=status.HTTP_403_FORBIDDEN)

