# app/services/email_templates.py
"""HTML bodies for account mail. Each builder returns (subject, html)."""
import datetime as dt
from html import escape
from urllib.parse import urlencode

_BUTTON = (
    'display:inline-block;padding:10px 16px;background:#1677ff;color:#fff;'
    'text-decoration:none;border-radius:6px'
)


def verification_link(frontend_url: str, token: str) -> str:
    return f"{frontend_url.rstrip('/')}/verify-email?{urlencode({'token': token})}"


def reset_link(frontend_url: str, token: str, email: str) -> str:
    return f"{frontend_url.rstrip('/')}/reset-password?{urlencode({'token': token, 'email': email})}"


def _wrap(body: str) -> str:
    return f'<div style="font-family: Arial, sans-serif; padding:16px; color:#222">{body}</div>'


def verification_email(name: str, link: str, valid_hours: int, resend: bool = False) -> tuple[str, str]:
    intro = (
        "You have not verified your email yet. Use the button below to verify your account:"
        if resend else
        "Thanks for signing up. Use the button below to verify your email:"
    )
    body = (
        f"<h2>Hello {escape(name or 'Member')}</h2>"
        f"<p>{intro}</p>"
        f'<p><a href="{escape(link)}" style="{_BUTTON}">Verify email</a></p>'
        f"<p>Or copy this link into your browser:</p><p>{escape(link)}</p>"
        f"<p><small>The link is valid for {valid_hours} hours.</small></p>"
    )
    return "Verify your email - Coursenese", _wrap(body)


def reset_email(name: str, link: str, valid_minutes: int) -> tuple[str, str]:
    body = (
        "<h2>Reset password</h2>"
        f"<p>Hello {escape(name or 'User')}, we received a request to reset the password of your account.</p>"
        f'<p><a href="{escape(link)}" style="{_BUTTON}">Reset password</a></p>'
        f"<p>Or copy this link into your browser:</p><p>{escape(link)}</p>"
        f"<p><small>The link is valid for {valid_minutes} minutes.</small></p>"
    )
    return "Password reset request - Coursenese", _wrap(body)


def password_reset_done_email(name: str) -> tuple[str, str]:
    body = (
        "<h2>Password reset</h2>"
        f"<p>Hello {escape(name or 'Member')},</p>"
        "<p>The password of your account has been reset.</p>"
        "<p>If you did not do this, contact our support team immediately.</p>"
    )
    return "Your password has been reset - Coursenese", _wrap(body)


def password_changed_email(name: str, when: dt.datetime) -> tuple[str, str]:
    body = (
        "<h2>Password updated</h2>"
        f"<p>Hello {escape(name or 'Member')},</p>"
        f"<p>The password of your account was changed on <b>{when.strftime('%Y-%m-%d %H:%M UTC')}</b>.</p>"
        "<p>If this was not you, contact our support team immediately.</p>"
    )
    return "Your password has been changed - Coursenese", _wrap(body)
