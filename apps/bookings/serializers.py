"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from shared.api.mixins import ProjectedModelSerializer

from .models import Booking
from .services import parse_instant


class InstantField(serializers.DateTimeField):
    """ISO-8601 instant; a bare date is read as midnight UTC."""

    def to_internal_value(self, value):  # type: ignore
        try:
            return parse_instant(value)
        except (TypeError, ValueError):
            self.fail("invalid", format="ISO-8601")


class BookingUserSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(read_only=True)
    email = serializers.EmailField(read_only=True)


class BookingRoomSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(read_only=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)


class BookingCreateSerializer(serializers.Serializer):
    roomId = serializers.UUIDField()
    startDate = InstantField()
    endDate = InstantField()

    def validate(self, attrs):  # type: ignore
        if attrs["startDate"] >= attrs["endDate"]:
            raise serializers.ValidationError({"endDate": "End date must be after start date."})
        return attrs


class BookingUpdateSerializer(serializers.Serializer):
    """Admin changes; on PATCH every field is optional."""

    startDate = InstantField(source="start_date")
    endDate = InstantField(source="end_date")
    status = serializers.ChoiceField(choices=Booking.Status.choices)


class BookingSerializer(ProjectedModelSerializer):
    userId = serializers.IntegerField(source="user_id", read_only=True)
    roomId = serializers.UUIDField(source="room_id", read_only=True)
    user = BookingUserSerializer(read_only=True)
    room = BookingRoomSerializer(read_only=True)
    startDate = serializers.DateTimeField(source="start_date", read_only=True)
    endDate = serializers.DateTimeField(source="end_date", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "userId",
            "roomId",
            "user",
            "room",
            "startDate",
            "endDate",
            "status",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields
