"""Stripe adapter: hosted checkout sessions and webhook verification."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import stripe  # type: ignore
from django.conf import settings  # type: ignore

logger = logging.getLogger(__name__)

MINOR_UNITS = Decimal("100")


class PaymentGatewayError(Exception):
    """Stripe could not be reached or refused the request."""


class WebhookVerificationError(Exception):
    """A webhook payload is unsigned, wrongly signed or malformed."""


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    url: str


def to_minor_units(amount: Decimal) -> int:
    return int((Decimal(amount) * MINOR_UNITS).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(value: Any) -> Decimal:
    return (Decimal(int(value or 0)) / MINOR_UNITS).quantize(Decimal("0.01"))


def create_checkout_session(booking, amount: Decimal) -> CheckoutSession:
    """Open a one-item Checkout session for ``booking``."""

    try:
        session = stripe.checkout.Session.create(
            api_key=settings.STRIPE_SECRET_KEY,
            mode="payment",
            payment_method_types=["card"],
            line_items=[
                {
                    "price_data": {
                        "currency": settings.PAYMENT_CURRENCY,
                        "product_data": {"name": f"Hotel booking: {booking.room.name}"},
                        "unit_amount": to_minor_units(amount),
                    },
                    "quantity": 1,
                }
            ],
            success_url=f"{settings.CHECKOUT_SUCCESS_URL}?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=settings.CHECKOUT_CANCEL_URL,
            client_reference_id=str(booking.pk),
            metadata={"booking_id": str(booking.pk)},
        )
    except stripe.StripeError as exc:
        logger.error("Stripe checkout failed for booking %s: %s", booking.pk, exc)
        raise PaymentGatewayError(str(exc)) from exc

    logger.info("Checkout session %s opened for booking %s", session.id, booking.pk)
    return CheckoutSession(session_id=session.id, url=session.url)


def verify_event(payload: bytes, signature: str | None) -> dict[str, Any]:
    """Check the ``Stripe-Signature`` header and return the decoded event."""

    if not signature:
        raise WebhookVerificationError("Missing Stripe-Signature header.")
    try:
        event = stripe.Webhook.construct_event(payload, signature, settings.STRIPE_WEBHOOK_SECRET)
    except stripe.SignatureVerificationError as exc:
        raise WebhookVerificationError(f"Webhook signature mismatch: {exc}") from exc
    except ValueError as exc:
        raise WebhookVerificationError("Webhook payload is not valid JSON.") from exc

    event = event.to_dict()
    if "type" not in event:
        raise WebhookVerificationError("Webhook payload is not a Stripe event.")
    return event
