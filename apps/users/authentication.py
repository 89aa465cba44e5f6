"""JWT authentication that also accepts the http-only access cookie."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from rest_framework_simplejwt.authentication import JWTAuthentication  # type: ignore


class CookieJWTAuthentication(JWTAuthentication):
    """``Authorization: Bearer <token>`` first, then the access-token cookie."""

    def authenticate(self, request):  # type: ignore
        header = self.get_header(request)
        if header is not None:
            raw_token = self.get_raw_token(header)
        else:
            raw_token = request.COOKIES.get(settings.AUTH_COOKIE_ACCESS)

        if raw_token is None:
            return None

        validated_token = self.get_validated_token(raw_token)
        return self.get_user(validated_token), validated_token
