"""User domain models for StayBook.

The platform knows two roles: regular guests (``user``) who book rooms and
administrators (``admin``) who manage the catalog and every booking.
Password reset codes live on the user record only between a reset request
and its consumption.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from django.contrib.auth.hashers import check_password, make_password  # type: ignore
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin  # type: ignore
from django.core.validators import MinLengthValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class UserManager(BaseUserManager):
    """Manager that uses the email address as the login."""

    use_in_migrations = True

    def _create_user(self, email: str, password: str | None, **extra_fields: Any):
        if not email:
            raise ValueError("Email is required to create a user.")
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        extra_fields.setdefault("role", User.Role.USER)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", User.Role.ADMIN)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email, password, **extra_fields)

    def get_by_email(self, email: str):
        return self.get(email__iexact=email.strip())


class User(AbstractBaseUser, PermissionsMixin):
    """Platform account: a guest (``user``) or an administrator."""

    class Role(models.TextChoices):
        USER = "user", _("User")
        ADMIN = "admin", _("Admin")

    name = models.CharField(
        _("Name"),
        max_length=50,
        validators=[MinLengthValidator(3)],
    )
    email = models.EmailField(_("Email"), unique=True)
    role = models.CharField(
        _("Role"),
        max_length=10,
        choices=Role.choices,
        default=Role.USER,
    )
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(
        default=False,
        help_text=_("Designates whether the user can log into the admin site."),
    )
    reset_code = models.CharField(max_length=128, blank=True)
    reset_expires = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    class Meta:
        verbose_name = _("User")
        verbose_name_plural = _("Users")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.email} ({self.get_role_display()})"

    def is_admin(self) -> bool:
        return self.role == self.Role.ADMIN

    # --- Password reset -----------------------------------------------------
    def issue_reset_code(self, code: str, ttl: timedelta) -> None:
        """Store a hashed one-time code, replacing any earlier one."""
        self.reset_code = make_password(code)
        self.reset_expires = timezone.now() + ttl
        self.save(update_fields=["reset_code", "reset_expires", "updated_at"])

    @property
    def has_pending_reset(self) -> bool:
        return bool(self.reset_code and self.reset_expires)

    @property
    def reset_code_expired(self) -> bool:
        return self.reset_expires is None or timezone.now() >= self.reset_expires

    def check_reset_code(self, code: str) -> bool:
        return self.has_pending_reset and check_password(code, self.reset_code)

    def clear_reset_code(self) -> None:
        self.reset_code = ""
        self.reset_expires = None
        self.save(update_fields=["reset_code", "reset_expires", "updated_at"])

    def complete_password_reset(self, new_password: str) -> None:
        self.set_password(new_password)
        self.reset_code = ""
        self.reset_expires = None
        self.save(update_fields=["password", "reset_code", "reset_expires", "updated_at"])
