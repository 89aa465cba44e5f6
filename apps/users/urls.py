"""URL declarations for the users app (namespace: users)."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .auth_views import (
    ForgetPasswordView,
    LoginView,
    LogoutView,
    MeView,
    ResetPasswordView,
    SignUpView,
    TokenRefreshView,
)

app_name = "users"

urlpatterns = [
    path("sign-up", SignUpView.as_view(), name="sign-up"),
    path("login", LoginView.as_view(), name="login"),
    path("forget-password", ForgetPasswordView.as_view(), name="forget-password"),
    path("reset-password", ResetPasswordView.as_view(), name="reset-password"),
    path("token/refresh", TokenRefreshView.as_view(), name="token-refresh"),
    path("logout", LogoutView.as_view(), name="logout"),
    path("me", MeView.as_view(), name="me"),
]
