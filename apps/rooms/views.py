"""Room catalog API views."""

from __future__ import annotations

import logging

from django.db.models import ProtectedError  # type: ignore
from rest_framework import viewsets  # type: ignore

from shared.api.exceptions import ConflictError
from shared.api.mixins import IdentifierLookupMixin, ListQueryMixin
from shared.api.permissions import IsAdminOrReadOnly

from .models import Room
from .serializers import RoomSerializer

logger = logging.getLogger(__name__)


class RoomViewSet(IdentifierLookupMixin, ListQueryMixin, viewsets.ModelViewSet):
    """Any signed-in user may browse rooms; only admins change the catalog."""

    queryset = Room.objects.all()
    serializer_class = RoomSerializer
    permission_classes = [IsAdminOrReadOnly]
    query_fields = {
        "id": "id",
        "name": "name",
        "location": "location",
        "guestCapacity": "guest_capacity",
        "price": "price",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }

    def perform_create(self, serializer):  # type: ignore
        room = serializer.save()
        logger.info("Room %s created by user %s", room.pk, self.request.user.pk)

    def perform_update(self, serializer):  # type: ignore
        room = serializer.save()
        logger.info("Room %s updated by user %s", room.pk, self.request.user.pk)

    def perform_destroy(self, instance):  # type: ignore
        room_id = instance.pk
        try:
            instance.delete()
        except ProtectedError as exc:
            raise ConflictError("Room has bookings and cannot be deleted.") from exc
        logger.info("Room %s deleted by user %s", room_id, self.request.user.pk)
