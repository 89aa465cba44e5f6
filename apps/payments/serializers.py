"""Serializers for payments."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from shared.api.mixins import ProjectedModelSerializer

from .models import Payment


class CheckoutSerializer(serializers.Serializer):
    bookingId = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))


class PaymentSerializer(ProjectedModelSerializer):
    bookingId = serializers.UUIDField(source="booking_id", read_only=True)
    paymentMethod = serializers.CharField(source="payment_method", read_only=True)
    transactionId = serializers.CharField(source="transaction_id", read_only=True)
    paymentStatus = serializers.CharField(source="payment_status", read_only=True)
    paymentDate = serializers.DateTimeField(source="payment_date", read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "bookingId",
            "amount",
            "paymentMethod",
            "transactionId",
            "paymentStatus",
            "paymentDate",
        ]
        read_only_fields = fields
