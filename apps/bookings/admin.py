"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "room", "user", "status", "start_date", "end_date", "created_at")
    list_filter = ("status", "start_date")
    search_fields = ("id", "room__name", "user__email")
    raw_id_fields = ("user", "room")
    readonly_fields = ("created_at", "updated_at")
