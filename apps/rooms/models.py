"""Room catalog models."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.validators import MinLengthValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Room(models.Model):
    """A bookable room. Changed only by administrators."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(_("Name"), max_length=100)
    description = models.TextField(_("Description"), validators=[MinLengthValidator(10)])
    guest_capacity = models.PositiveSmallIntegerField(
        _("Guest capacity"), validators=[MinValueValidator(1)]
    )
    price = models.DecimalField(
        _("Price per night"),
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    location = models.CharField(_("Location"), max_length=255)
    amenities = models.JSONField(_("Amenities"), default=list, blank=True)
    images = models.JSONField(_("Images"), default=list)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Room")
        verbose_name_plural = _("Rooms")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(guest_capacity__gte=1), name="room_guest_capacity_positive"
            ),
            models.CheckConstraint(condition=models.Q(price__gte=0), name="room_price_not_negative"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.location})"
