# app/api/v1/routers/auth.py
from fastapi import APIRouter, Depends, Query, status
from app.api.v1.deps import get_accounts, get_current_claims
from app.schemas.auth import (
    ChangePasswordIn,
    EmailIn,
    LoginRequest,
    RegisterIn,
    ResetPasswordIn,
)
from app.services.accounts import AccountManager

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/registeruser", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterIn, accounts: AccountManager = Depends(get_accounts)):
    """
    Register a new member account.

    Creates the user, its profile and its active cart in one transaction and
    mails a verification link. If the mail cannot be sent the account still
    exists; the response then carries ``needVerification: true`` so the client
    can offer "resend verification".

    Returns:
        201: {success, message, data: {user: {id, name, email}}, needVerification?}

    Errors:
        400 invalid email / weak password / confirmation mismatch
        409 email or phone number already registered
        500 registration transaction failed (nothing was created)
    """
    return await accounts.register(
        name=body.name,
        email=body.email,
        password=body.password,
        confirm_password=body.confirmPassword,
        profile=body.profile_fields(),
    )

@router.post("/loginuser")
async def login(body: LoginRequest, accounts: AccountManager = Depends(get_accounts)):
    """
    Authenticate with email and password.

    Returns:
        200: {success, message, data: {token, user: {id, name, email, role, verified, profile}}}

    Errors:
        400 malformed email or password shorter than 8 characters
        401 user not found / wrong password
        403 email not verified (``needVerification: true``)
    """
    return await accounts.login(body.email, body.password)

@router.post("/forgotpassword")
async def forgot_password(body: EmailIn, accounts: AccountManager = Depends(get_accounts)):
    """
    Mail a password reset link valid for 15 minutes.

    The success response is identical for registered and unknown emails.
    """
    return await accounts.forgot_password(body.email)

@router.post("/resetpassword")
async def reset_password(body: ResetPasswordIn, accounts: AccountManager = Depends(get_accounts)):
    return await accounts.reset_password(body.email, body.token, body.new_password)

@router.post("/changepassword")
async def change_password(body: ChangePasswordIn, accounts: AccountManager = Depends(get_accounts)):
    """
    Change a password given the old one. The user is identified by
    ``user_id`` in the body, not by a session token.
    """
    return await accounts.change_password(
        body.user_id, body.old_password, body.new_password, body.confirm_password
    )

@router.post("/resendverif")
async def resend_verification(body: EmailIn, accounts: AccountManager = Depends(get_accounts)):
    return await accounts.resend_verification(body.email)

@router.get("/verifyemail")
async def verify_email(
    token: str | None = Query(default=None),
    accounts: AccountManager = Depends(get_accounts),
):
    """
    Mark the email of the token's user as verified.

    Errors:
        400 token missing, malformed or expired
        404 user no longer exists
        409 email already verified (a second use of the same link)
    """
    return await accounts.verify_email(token)

@router.get("/me")
async def me(
    claims: dict = Depends(get_current_claims),
    accounts: AccountManager = Depends(get_accounts),
):
    """Return the authenticated user with the full profile."""
    return await accounts.current_user(claims["id"])

@router.post("/logout")
async def logout(
    claims: dict = Depends(get_current_claims),
    accounts: AccountManager = Depends(get_accounts),
):
    """
    Log out.

    Note:
        Session tokens are not revoked server side; the token stays valid
        until it expires and the client is expected to discard it.
    """
    return await accounts.logout(claims)
