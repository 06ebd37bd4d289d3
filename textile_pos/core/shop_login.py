"""The shop's single shared login.

Counter staff sign in once per browser; the user name is kept in the signed
session cookie. With no login configured every route is open, which is how a
single-till shop usually runs.
"""
import hashlib
import hmac
from typing import Optional

from fastapi import HTTPException, Request, status

from textile_pos.config import Settings

SESSION_USER_KEY = "user"


def login_required(settings: Settings) -> bool:
    return bool(
        settings.SHOP_LOGIN_USERNAME
        and (settings.SHOP_LOGIN_PASSWORD or settings.SHOP_LOGIN_PASSWORD_HASH)
    )


def hash_password(password: str, salt: str, rounds: int) -> str:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), rounds).hex()


def _password_matches(settings: Settings, password: str) -> bool:
    if settings.SHOP_LOGIN_PASSWORD_HASH:
        if not settings.SHOP_LOGIN_PASSWORD_SALT:
            raise ValueError("SHOP_LOGIN_PASSWORD_SALT must be set alongside the password hash.")
        candidate = hash_password(
            password, settings.SHOP_LOGIN_PASSWORD_SALT, settings.SHOP_LOGIN_PBKDF2_ROUNDS
        )
        return hmac.compare_digest(candidate, settings.SHOP_LOGIN_PASSWORD_HASH)
    return hmac.compare_digest(password, (settings.SHOP_LOGIN_PASSWORD or "").strip())


def check_credentials(settings: Settings, username: str, password: str) -> bool:
    """True when ``username``/``password`` match the configured shop login.

    The user name is compared case-insensitively. A configured hash takes
    precedence over a plain password.
    """
    if not login_required(settings):
        return False
    expected = settings.SHOP_LOGIN_USERNAME.strip().casefold()
    if not hmac.compare_digest(username.strip().casefold(), expected):
        return False
    return _password_matches(settings, password.strip())


def signed_in_user(request: Request) -> Optional[str]:
    return request.session.get(SESSION_USER_KEY)


def sign_in(request: Request, username: str) -> None:
    request.session[SESSION_USER_KEY] = username.strip()


def sign_out(request: Request) -> None:
    request.session.clear()


def ensure_signed_in(request: Request, settings: Settings) -> None:
    if login_required(settings) and not signed_in_user(request):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sign in to the shop first.")


__all__ = [
    "check_credentials",
    "ensure_signed_in",
    "hash_password",
    "login_required",
    "sign_in",
    "sign_out",
    "signed_in_user",
]
