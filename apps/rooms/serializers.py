"""Serializers for the room catalog."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from shared.api.mixins import ProjectedModelSerializer

from .models import Room


class RoomSerializer(ProjectedModelSerializer):
    description = serializers.CharField(min_length=10)
    guestCapacity = serializers.IntegerField(source="guest_capacity", min_value=1, max_value=32767)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0"))
    amenities = serializers.ListField(
        child=serializers.CharField(max_length=100), allow_empty=True, required=False
    )
    images = serializers.ListField(
        child=serializers.URLField(),
        allow_empty=False,
        error_messages={"empty": "At least one image is required."},
    )
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Room
        fields = [
            "id",
            "name",
            "description",
            "guestCapacity",
            "price",
            "location",
            "amenities",
            "images",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = ["id"]

    def validate_name(self, value: str) -> str:
        return value.strip()

    def validate_location(self, value: str) -> str:
        return value.strip()
