"""Token pair issuance and cookie transport."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from rest_framework_simplejwt.settings import api_settings as jwt_settings  # type: ignore
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken  # type: ignore
from rest_framework_simplejwt.tokens import RefreshToken  # type: ignore


def tokens_for_user(user) -> dict[str, str]:
    refresh = RefreshToken.for_user(user)
    return {"refresh": str(refresh), "access": str(refresh.access_token)}


def revoke_user_tokens(user) -> int:
    """Blacklist every outstanding refresh token of ``user``."""

    revoked = 0
    for outstanding in OutstandingToken.objects.filter(user=user, blacklistedtoken__isnull=True):
        _, created = BlacklistedToken.objects.get_or_create(token=outstanding)
        revoked += int(created)
    return revoked


def set_auth_cookies(response, tokens: dict[str, str]):
    common = {
        "httponly": True,
        "secure": settings.AUTH_COOKIE_SECURE,
        "samesite": settings.AUTH_COOKIE_SAMESITE,
    }
    if "access" in tokens:
        response.set_cookie(
            settings.AUTH_COOKIE_ACCESS,
            tokens["access"],
            max_age=int(jwt_settings.ACCESS_TOKEN_LIFETIME.total_seconds()),
            **common,
        )
    if "refresh" in tokens:
        response.set_cookie(
            settings.AUTH_COOKIE_REFRESH,
            tokens["refresh"],
            max_age=int(jwt_settings.REFRESH_TOKEN_LIFETIME.total_seconds()),
            **common,
        )
    return response


def clear_auth_cookies(response):
    response.delete_cookie(settings.AUTH_COOKIE_ACCESS, samesite=settings.AUTH_COOKIE_SAMESITE)
    response.delete_cookie(settings.AUTH_COOKIE_REFRESH, samesite=settings.AUTH_COOKIE_SAMESITE)
    return response
