"""URL routing for the booking domain (namespace: bookings)."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import BookingViewSet

app_name = "bookings"

router = SimpleRouter(trailing_slash=False)
router.register(r"", BookingViewSet, basename="booking")

urlpatterns = [
    path("", include(router.urls)),
]
