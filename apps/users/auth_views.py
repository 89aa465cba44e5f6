"""Views for authentication flows (sign-up, login, token refresh, password reset)."""

from __future__ import annotations

import logging

from rest_framework import status  # type: ignore
from rest_framework.exceptions import ValidationError  # type: ignore
from rest_framework.permissions import AllowAny, IsAuthenticated  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError  # type: ignore
from rest_framework_simplejwt.serializers import TokenRefreshSerializer  # type: ignore
from rest_framework_simplejwt.tokens import RefreshToken  # type: ignore

from .auth_serializers import (
    ForgetPasswordSerializer,
    LoginSerializer,
    RefreshTokenSerializer,
    ResetPasswordSerializer,
    SignUpSerializer,
)
from .serializers import UserSerializer
from .tokens import clear_auth_cookies, set_auth_cookies, tokens_for_user

logger = logging.getLogger(__name__)


def _auth_response(user, status_code: int = status.HTTP_200_OK) -> Response:
    tokens = tokens_for_user(user)
    response = Response({"user": UserSerializer(user).data, "tokens": tokens}, status=status_code)
    return set_auth_cookies(response, tokens)


class SignUpView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    def post(self, request):  # type: ignore
        serializer = SignUpSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("User %s signed up", user.pk)
        return _auth_response(user, status.HTTP_201_CREATED)


class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    def post(self, request):  # type: ignore
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return _auth_response(serializer.validated_data["user"])


class ForgetPasswordView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    def post(self, request):  # type: ignore
        serializer = ForgetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(
            {"status": "success", "message": "A reset code has been sent to your email."},
            status=status.HTTP_200_OK,
        )


class ResetPasswordView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    def post(self, request):  # type: ignore
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        response = Response(
            {"status": "success", "message": "Password has been reset. Please log in again."},
            status=status.HTTP_200_OK,
        )
        return clear_auth_cookies(response)


class TokenRefreshView(APIView):
    """Rotate the refresh token; the old one is blacklisted."""

    permission_classes = [AllowAny]
    authentication_classes: list = []

    def post(self, request):  # type: ignore
        source = RefreshTokenSerializer(data=request.data, context={"request": request})
        source.is_valid(raise_exception=True)

        serializer = TokenRefreshSerializer(data={"refresh": source.validated_data["refresh"]})
        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as exc:
            raise InvalidToken(exc.args[0]) from exc

        tokens = dict(serializer.validated_data)
        return set_auth_cookies(Response({"tokens": tokens}), tokens)


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):  # type: ignore
        source = RefreshTokenSerializer(data=request.data, context={"request": request})
        source.is_valid(raise_exception=True)
        try:
            RefreshToken(source.validated_data["refresh"]).blacklist()
        except TokenError as exc:
            raise ValidationError({"refresh": [str(exc)]}) from exc

        logger.info("User %s logged out", request.user.pk)
        return clear_auth_cookies(Response({"status": "success", "message": "Logged out."}))


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):  # type: ignore
        return Response(UserSerializer(request.user).data)
