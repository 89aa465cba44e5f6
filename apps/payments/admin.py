"""Admin registration for payments."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("transaction_id", "booking", "amount", "payment_method", "payment_status", "payment_date")
    list_filter = ("payment_status", "payment_method")
    search_fields = ("transaction_id", "booking__id", "booking__user__email")
    raw_id_fields = ("booking",)
    readonly_fields = ("id", "payment_date")
