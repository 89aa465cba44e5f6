"""API views for the booking domain."""

from __future__ import annotations

from contextlib import contextmanager

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.api.exceptions import ConflictError
from shared.api.mixins import IdentifierLookupMixin, ListQueryMixin, RequestContextMixin
from shared.api.permissions import IsAdminRole, IsOwnerOrAdmin

from .models import Booking
from .serializers import BookingCreateSerializer, BookingSerializer, BookingUpdateSerializer
from .services import BookingConflictError, cancel_booking, create_booking, update_booking


@contextmanager
def conflicts_as_409():
    try:
        yield
    except BookingConflictError as exc:
        raise ConflictError(str(exc)) from exc


class BookingViewSet(RequestContextMixin, IdentifierLookupMixin, ListQueryMixin, viewsets.ModelViewSet):
    """Guests book and cancel their own stays; admins manage every booking."""

    queryset = Booking.objects.select_related("user", "room")
    serializer_class = BookingSerializer
    query_fields = {
        "id": "id",
        "userId": "user_id",
        "roomId": "room_id",
        "startDate": "start_date",
        "endDate": "end_date",
        "status": "status",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }

    def get_permissions(self):  # type: ignore
        if self.action in {"update", "partial_update", "destroy"}:
            return [permissions.IsAuthenticated(), IsAdminRole()]
        if self.action in {"retrieve", "cancel"}:
            return [permissions.IsAuthenticated(), IsOwnerOrAdmin()]
        return [permissions.IsAuthenticated()]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        context = self.request_context
        if self.action == "list" and not (context and context.is_admin):
            # Detail routes stay unscoped so foreign bookings answer 403, not 404.
            return qs.filter(user_id=context.user_id if context else None)
        return qs

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        with conflicts_as_409():
            booking = create_booking(self.request_context, data["roomId"], data["startDate"], data["endDate"])
        read_serializer = self.get_serializer(booking)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):  # type: ignore
        partial = kwargs.pop("partial", False)
        booking = self.get_object()
        serializer = BookingUpdateSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        with conflicts_as_409():
            booking = update_booking(self.request_context, booking, **serializer.validated_data)
        return Response(self.get_serializer(booking).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking = cancel_booking(self.request_context, self.get_object())
        return Response(self.get_serializer(booking).data, status=status.HTTP_200_OK)
