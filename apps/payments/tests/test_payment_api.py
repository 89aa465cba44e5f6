"""API tests for checkout, the Stripe webhook and payment history."""

from __future__ import annotations

import hashlib
import hmac
import json
import time
import uuid
from decimal import Decimal
from types import SimpleNamespace
from unittest import mock

import stripe
from django.conf import settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.payments.models import Payment
from apps.rooms.models import Room
from apps.users.models import User

SESSION_CREATE = "apps.payments.gateway.stripe.checkout.Session.create"


def stripe_signature(payload: str, secret: str | None = None, timestamp: int | None = None) -> str:
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.{payload}".encode()
    digest = hmac.new((secret or settings.STRIPE_WEBHOOK_SECRET).encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


class PaymentAPITestCase(APITestCase):
    def setUp(self) -> None:
        self.guest = User.objects.create_user(email="guest@example.com", password="GuestPass123", name="Guest")
        self.other = User.objects.create_user(email="other@example.com", password="OtherPass123", name="Other")
        self.admin = User.objects.create_user(
            email="admin@example.com", password="AdminPass123", name="Admin", role=User.Role.ADMIN
        )
        self.room = Room.objects.create(
            name="Sea Breeze",
            description="Beachfront room with a terrace.",
            guest_capacity=2,
            price=Decimal("250.00"),
            location="Mirissa",
            images=["https://cdn.example.com/sea.jpg"],
        )
        self.booking = Booking.objects.create(
            user=self.guest,
            room=self.room,
            start_date="2024-01-01T00:00:00Z",
            end_date="2024-01-05T00:00:00Z",
        )

    def _pay(self, transaction_id: str, booking: Booking | None = None, **extra) -> Payment:
        return Payment.objects.create(
            booking=booking or self.booking,
            amount=Decimal("1000.00"),
            transaction_id=transaction_id,
            payment_status=extra.pop("payment_status", Payment.Status.COMPLETED),
            **extra,
        )


class CheckoutAPITests(PaymentAPITestCase):
    url = reverse("payments:payment-list")

    def setUp(self) -> None:
        super().setUp()
        self.client.force_authenticate(self.guest)

    def test_checkout_returns_session(self) -> None:
        session = SimpleNamespace(id="cs_test_123", url="https://checkout.stripe.com/c/pay/cs_test_123")
        with mock.patch(SESSION_CREATE, return_value=session) as create:
            response = self.client.post(
                self.url, {"bookingId": str(self.booking.pk), "amount": "1000.00"}, format="json"
            )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data, {"sessionId": "cs_test_123", "url": session.url})
        kwargs = create.call_args.kwargs
        self.assertEqual(kwargs["client_reference_id"], str(self.booking.pk))
        self.assertEqual(kwargs["line_items"][0]["price_data"]["unit_amount"], 100000)
        self.assertEqual(kwargs["line_items"][0]["price_data"]["currency"], settings.PAYMENT_CURRENCY)
        self.assertFalse(Payment.objects.exists())

    def test_unknown_booking_is_not_found(self) -> None:
        with mock.patch(SESSION_CREATE) as create:
            response = self.client.post(
                self.url, {"bookingId": str(uuid.uuid4()), "amount": "10.00"}, format="json"
            )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        create.assert_not_called()

    def test_foreign_booking_is_forbidden(self) -> None:
        self.client.force_authenticate(self.other)

        with mock.patch(SESSION_CREATE) as create:
            response = self.client.post(
                self.url, {"bookingId": str(self.booking.pk), "amount": "10.00"}, format="json"
            )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        create.assert_not_called()

    def test_cancelled_booking_cannot_be_paid(self) -> None:
        self.booking.mark_cancelled()

        with mock.patch(SESSION_CREATE):
            response = self.client.post(
                self.url, {"bookingId": str(self.booking.pk), "amount": "10.00"}, format="json"
            )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_paid_booking_is_a_conflict(self) -> None:
        self._pay("pi_done")

        with mock.patch(SESSION_CREATE):
            response = self.client.post(
                self.url, {"bookingId": str(self.booking.pk), "amount": "10.00"}, format="json"
            )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_invalid_amount_is_rejected(self) -> None:
        response = self.client.post(self.url, {"bookingId": str(self.booking.pk), "amount": "0"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("amount", response.data["errors"])

    def test_gateway_failure_is_bad_gateway(self) -> None:
        with mock.patch(SESSION_CREATE, side_effect=stripe.APIConnectionError("network down")):
            response = self.client.post(
                self.url, {"bookingId": str(self.booking.pk), "amount": "10.00"}, format="json"
            )

        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data["status"], "error")


class StripeWebhookAPITests(PaymentAPITestCase):
    url = reverse("payments:stripe-webhook")

    def _event(self, event_type: str = "checkout.session.completed", **session) -> str:
        data = {
            "id": "cs_test_abc",
            "client_reference_id": str(self.booking.pk),
            "payment_intent": "pi_test_abc",
            "amount_total": 100000,
            "payment_method_types": ["card"],
        }
        data.update(session)
        return json.dumps({"id": "evt_1", "type": event_type, "data": {"object": data}})

    def _post(self, payload: str, signature: str | None = None):
        headers = {}
        if signature is not None:
            headers["HTTP_STRIPE_SIGNATURE"] = signature
        return self.client.post(self.url, data=payload, content_type="application/json", **headers)

    def test_completed_checkout_records_payment_and_confirms_booking(self) -> None:
        payload = self._event()

        response = self._post(payload, stripe_signature(payload))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data, {"received": True})
        payment = Payment.objects.get()
        self.assertEqual(payment.transaction_id, "pi_test_abc")
        self.assertEqual(payment.amount, Decimal("1000.00"))
        self.assertEqual(payment.payment_status, Payment.Status.COMPLETED)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.CONFIRMED)

    def test_replayed_event_is_idempotent(self) -> None:
        payload = self._event()

        self._post(payload, stripe_signature(payload))
        response = self._post(payload, stripe_signature(payload))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Payment.objects.count(), 1)

    def test_cancelled_booking_is_not_revived(self) -> None:
        self.booking.mark_cancelled()
        payload = self._event()

        response = self._post(payload, stripe_signature(payload))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.CANCELLED)
        self.assertTrue(Payment.objects.filter(transaction_id="pi_test_abc").exists())

    def test_failed_payment_is_recorded(self) -> None:
        payload = self._event("checkout.session.async_payment_failed")

        response = self._post(payload, stripe_signature(payload))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Payment.objects.get().payment_status, Payment.Status.FAILED)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.PENDING)

    def test_other_events_are_acknowledged(self) -> None:
        payload = json.dumps({"id": "evt_2", "type": "customer.created", "data": {"object": {}}})

        response = self._post(payload, stripe_signature(payload))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Payment.objects.exists())

    def test_unknown_booking_is_acknowledged(self) -> None:
        payload = self._event(client_reference_id=str(uuid.uuid4()))

        response = self._post(payload, stripe_signature(payload))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Payment.objects.exists())

    def test_wrong_signature_is_rejected(self) -> None:
        payload = self._event()

        response = self._post(payload, stripe_signature(payload, secret="whsec_other"))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["status"], "fail")
        self.assertFalse(Payment.objects.exists())

    def test_missing_signature_is_rejected(self) -> None:
        response = self._post(self._event())

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_tampered_payload_is_rejected(self) -> None:
        payload = self._event()
        signature = stripe_signature(payload)

        response = self._post(self._event(amount_total=1), signature)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_signed_garbage_is_rejected(self) -> None:
        payload = "not json"

        response = self._post(payload, stripe_signature(payload))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Payment.objects.exists())


class PaymentHistoryAPITests(PaymentAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        other_booking = Booking.objects.create(
            user=self.other,
            room=self.room,
            start_date="2024-02-01T00:00:00Z",
            end_date="2024-02-03T00:00:00Z",
        )
        self.mine = self._pay("pi_mine")
        self.theirs = self._pay("pi_theirs", booking=other_booking, payment_status=Payment.Status.FAILED)

    def test_guest_sees_own_payments(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.get(reverse("payments:payment-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item["transactionId"] for item in response.data["results"]], ["pi_mine"])
        self.assertEqual(response.data["results"][0]["bookingId"], str(self.booking.pk))

    def test_admin_filters_by_status(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.get(reverse("payments:payment-list"), {"paymentStatus": "failed"})

        self.assertEqual([item["transactionId"] for item in response.data["results"]], ["pi_theirs"])

    def test_foreign_payment_is_forbidden(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.get(reverse("payments:payment-detail", args=[self.theirs.pk]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_owner_retrieves_payment(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.get(reverse("payments:payment-detail", args=[self.mine.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["paymentStatus"], Payment.Status.COMPLETED)
