"""API views for payments: checkout, Stripe webhook and payment history."""

from __future__ import annotations

import logging

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.api.exceptions import ConflictError, GatewayError, GatewayUnavailableError
from shared.api.mixins import IdentifierLookupMixin, ListQueryMixin, RequestContextMixin
from shared.api.permissions import IsOwnerOrAdmin

from . import gateway
from .models import Payment
from .serializers import CheckoutSerializer, PaymentSerializer
from .services import BookingAlreadyPaidError, handle_event, start_checkout

logger = logging.getLogger(__name__)


class PaymentViewSet(
    RequestContextMixin,
    IdentifierLookupMixin,
    ListQueryMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """``POST`` opens a Checkout session; reads show the payment history."""

    queryset = Payment.objects.select_related("booking")
    serializer_class = PaymentSerializer
    owner_field = "booking__user_id"
    query_fields = {
        "id": "id",
        "bookingId": "booking_id",
        "amount": "amount",
        "paymentMethod": "payment_method",
        "transactionId": "transaction_id",
        "paymentStatus": "payment_status",
        "paymentDate": "payment_date",
        "createdAt": "payment_date",
    }

    def get_permissions(self):  # type: ignore
        if self.action == "retrieve":
            return [permissions.IsAuthenticated(), IsOwnerOrAdmin()]
        return [permissions.IsAuthenticated()]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        context = self.request_context
        if self.action == "list" and not (context and context.is_admin):
            return qs.filter(booking__user_id=context.user_id if context else None)
        return qs

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            session = start_checkout(self.request_context, data["bookingId"], data["amount"])
        except BookingAlreadyPaidError as exc:
            raise ConflictError(str(exc)) from exc
        except gateway.PaymentGatewayError as exc:
            raise GatewayUnavailableError() from exc
        return Response({"sessionId": session.session_id, "url": session.url}, status=status.HTTP_200_OK)


class StripeWebhookView(APIView):
    """Receives Stripe events. Authenticated by signature, not by user."""

    permission_classes = [permissions.AllowAny]
    authentication_classes: list = []

    def post(self, request):  # type: ignore
        try:
            event = gateway.verify_event(request.body, request.META.get("HTTP_STRIPE_SIGNATURE"))
        except gateway.WebhookVerificationError as exc:
            logger.warning("Rejected Stripe webhook: %s", exc)
            raise GatewayError(str(exc)) from exc

        handle_event(event)
        return Response({"received": True}, status=status.HTTP_200_OK)
