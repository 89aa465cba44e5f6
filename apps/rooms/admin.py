"""Admin registrations for the room catalog."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Room


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ("name", "location", "guest_capacity", "price", "created_at")
    list_filter = ("location",)
    search_fields = ("name", "location", "description")
    readonly_fields = ("id", "created_at", "updated_at")
