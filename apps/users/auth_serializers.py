"""Serializers for authentication flows (sign-up, login, password reset)."""

from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from typing import Any

from django.conf import settings  # type: ignore
from django.contrib.auth import get_user_model, password_validation  # type: ignore
from django.contrib.auth.models import update_last_login  # type: ignore
from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from django.db import transaction  # type: ignore
from rest_framework import serializers  # type: ignore
from rest_framework.exceptions import NotFound  # type: ignore
from rest_framework_simplejwt.settings import api_settings as jwt_settings  # type: ignore

from .tasks import send_password_reset_code
from .tokens import revoke_user_tokens

logger = logging.getLogger(__name__)

User = get_user_model()

RESET_CODE_DIGITS = 6


def _find_user(email: str):
    try:
        return User.objects.get_by_email(email)
    except User.DoesNotExist:
        raise NotFound("There is no user with that email address.") from None


def _check_password_strength(password: str, field: str, user=None) -> None:
    try:
        password_validation.validate_password(password, user=user)
    except DjangoValidationError as exc:
        raise serializers.ValidationError({field: list(exc.messages)}) from exc


class SignUpSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=3, max_length=50)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, max_length=100)
    confirmPassword = serializers.CharField(write_only=True, max_length=100)

    def validate_email(self, value: str) -> str:
        email = value.strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            raise serializers.ValidationError("User already exists.")
        return email

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        if attrs["password"] != attrs["confirmPassword"]:
            raise serializers.ValidationError(
                {"confirmPassword": "Password and confirm password do not match."}
            )
        _check_password_strength(attrs["password"], "password")
        return attrs

    @transaction.atomic
    def create(self, validated_data: dict[str, Any]):  # type: ignore
        return User.objects.create_user(
            email=validated_data["email"],
            password=validated_data["password"],
            name=validated_data["name"],
        )


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    default_error = "Invalid email or password."

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        try:
            user = User.objects.get_by_email(attrs["email"])
        except User.DoesNotExist:
            raise serializers.ValidationError(self.default_error) from None

        if not user.is_active or not user.check_password(attrs["password"]):
            raise serializers.ValidationError(self.default_error)

        if jwt_settings.UPDATE_LAST_LOGIN:
            update_last_login(None, user)

        attrs["user"] = user
        return attrs


class ForgetPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        attrs["user"] = _find_user(attrs["email"])
        return attrs

    @transaction.atomic
    def create(self, validated_data: dict[str, Any]):  # type: ignore
        user = validated_data["user"]
        code = f"{secrets.randbelow(10 ** RESET_CODE_DIGITS):0{RESET_CODE_DIGITS}d}"
        user.issue_reset_code(code, timedelta(minutes=settings.PASSWORD_RESET_CODE_TTL_MINUTES))

        # The code only ever leaves the server by email.
        transaction.on_commit(lambda: send_password_reset_code.delay(user.pk, code))
        logger.info("Password reset requested for user %s", user.pk)
        return user


class ResetPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()
    otp = serializers.CharField(max_length=RESET_CODE_DIGITS)
    newPassword = serializers.CharField(write_only=True, max_length=100)
    confirmPassword = serializers.CharField(write_only=True, max_length=100)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        if attrs["newPassword"] != attrs["confirmPassword"]:
            raise serializers.ValidationError(
                {"confirmPassword": "Password and confirm password do not match."}
            )
        user = _find_user(attrs["email"])

        if not user.has_pending_reset:
            raise serializers.ValidationError({"otp": "Reset code is invalid or has already been used."})
        if user.reset_code_expired:
            user.clear_reset_code()
            raise serializers.ValidationError({"otp": "Reset code has expired. Request a new one."})
        if not user.check_reset_code(attrs["otp"].strip()):
            logger.warning("Wrong password reset code for user %s", user.pk)
            raise serializers.ValidationError({"otp": "Invalid reset code."})

        _check_password_strength(attrs["newPassword"], "newPassword", user=user)
        attrs["user"] = user
        return attrs

    @transaction.atomic
    def create(self, validated_data: dict[str, Any]):  # type: ignore
        user = validated_data["user"]
        user.complete_password_reset(validated_data["newPassword"])
        revoke_user_tokens(user)
        logger.info("Password reset completed for user %s", user.pk)
        return user


class RefreshTokenSerializer(serializers.Serializer):
    """Refresh token taken from the body or, failing that, from the cookie."""

    refresh = serializers.CharField(required=False, allow_blank=False)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        refresh = attrs.get("refresh")
        if not refresh:
            request = self.context.get("request")
            refresh = request.COOKIES.get(settings.AUTH_COOKIE_REFRESH) if request else None
        if not refresh:
            raise serializers.ValidationError({"refresh": "Refresh token is required."})
        attrs["refresh"] = refresh
        return attrs
