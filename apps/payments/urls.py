"""URL routing for payments (namespace: payments)."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import PaymentViewSet, StripeWebhookView

app_name = "payments"

router = SimpleRouter(trailing_slash=False)
router.register(r"", PaymentViewSet, basename="payment")

urlpatterns = [
    # Must precede the router so "webhook" is not taken for a payment id.
    path("webhook", StripeWebhookView.as_view(), name="stripe-webhook"),
    path("", include(router.urls)),
]
