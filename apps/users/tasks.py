"""Celery tasks for the users domain."""

from __future__ import annotations

import logging
from smtplib import SMTPException

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from django.core.mail import send_mail  # type: ignore

logger = logging.getLogger(__name__)


@shared_task(autoretry_for=(SMTPException,), retry_backoff=True, max_retries=3)
def send_password_reset_code(user_id: int, code: str) -> bool:
    """Emails the one-time password reset code."""

    User = get_user_model()
    try:
        user = User.objects.get(pk=user_id)
    except User.DoesNotExist:
        logger.warning("Password reset email skipped, user %s no longer exists", user_id)
        return False

    ttl = settings.PASSWORD_RESET_CODE_TTL_MINUTES
    send_mail(
        subject="Your password reset code",
        message=(
            f"Hello {user.name},\n\n"
            f"Your password reset code is {code}. It expires in {ttl} minutes.\n"
            "If you did not request a reset, you can ignore this email."
        ),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[user.email],
        fail_silently=False,
    )
    logger.info("Password reset code sent to user %s", user_id)
    return True
