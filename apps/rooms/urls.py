"""URL routing for the room catalog (namespace: rooms)."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import RoomViewSet

app_name = "rooms"

router = SimpleRouter(trailing_slash=False)
router.register(r"", RoomViewSet, basename="room")

urlpatterns = [
    path("", include(router.urls)),
]
