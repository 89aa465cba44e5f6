"""Checkout and webhook workflows."""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import Any, Mapping

from django.core.exceptions import PermissionDenied, ValidationError  # type: ignore
from django.db import transaction  # type: ignore
from django.shortcuts import get_object_or_404  # type: ignore

from apps.bookings.models import Booking
from apps.bookings.services import confirm_booking
from shared.api.context import RequestContext

from . import gateway
from .models import Payment

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
CHECKOUT_FAILED = "checkout.session.async_payment_failed"


class BookingAlreadyPaidError(Exception):
    pass


def start_checkout(context: RequestContext, booking_id: Any, amount: Decimal) -> gateway.CheckoutSession:
    booking = get_object_or_404(Booking.objects.select_related("room"), pk=booking_id)
    if not context.can_access(booking.user_id):
        raise PermissionDenied("You can only pay for your own bookings.")
    if booking.status == Booking.Status.CANCELLED:
        raise ValidationError({"bookingId": "Cannot pay for a cancelled booking."})
    if booking.payments.filter(payment_status=Payment.Status.COMPLETED).exists():
        raise BookingAlreadyPaidError("Booking is already paid.")
    return gateway.create_checkout_session(booking, amount)


def _booking_for_session(session: Mapping[str, Any]) -> Booking | None:
    raw_id = session.get("client_reference_id") or (session.get("metadata") or {}).get("booking_id")
    try:
        booking_id = uuid.UUID(str(raw_id))
    except (TypeError, ValueError):
        logger.warning("Checkout session %s carries no usable booking id", session.get("id"))
        return None
    booking = Booking.objects.select_for_update().filter(pk=booking_id).first()
    if booking is None:
        logger.warning("Checkout session %s refers to unknown booking %s", session.get("id"), booking_id)
    return booking


def _transaction_id(session: Mapping[str, Any]) -> str:
    return str(session.get("payment_intent") or session.get("id"))


def _payment_method(session: Mapping[str, Any]) -> str:
    methods = session.get("payment_method_types") or ["card"]
    return str(methods[0])


@transaction.atomic
def record_completed_checkout(session: Mapping[str, Any]) -> Payment | None:
    """Store a completed payment and confirm its booking. Replays are no-ops."""

    booking = _booking_for_session(session)
    if booking is None:
        return None

    payment, created = Payment.objects.get_or_create(
        transaction_id=_transaction_id(session),
        defaults={
            "booking": booking,
            "amount": gateway.from_minor_units(session.get("amount_total")),
            "payment_method": _payment_method(session),
            "payment_status": Payment.Status.COMPLETED,
        },
    )
    if not created and payment.payment_status != Payment.Status.COMPLETED:
        payment.mark_completed()

    if not confirm_booking(booking) and booking.status == Booking.Status.CANCELLED:
        logger.warning("Payment %s received for cancelled booking %s", payment.transaction_id, booking.pk)
    logger.info("Payment %s recorded for booking %s", payment.transaction_id, booking.pk)
    return payment


@transaction.atomic
def record_failed_checkout(session: Mapping[str, Any]) -> Payment | None:
    booking = _booking_for_session(session)
    if booking is None:
        return None

    payment, _ = Payment.objects.get_or_create(
        transaction_id=_transaction_id(session),
        defaults={
            "booking": booking,
            "amount": gateway.from_minor_units(session.get("amount_total")),
            "payment_method": _payment_method(session),
            "payment_status": Payment.Status.FAILED,
        },
    )
    logger.info("Failed payment %s recorded for booking %s", payment.transaction_id, booking.pk)
    return payment


def handle_event(event: Mapping[str, Any]) -> Payment | None:
    """Dispatch a verified Stripe event; unknown types are acknowledged and ignored."""

    session = (event.get("data") or {}).get("object") or {}
    event_type = event.get("type")
    if event_type == CHECKOUT_COMPLETED:
        return record_completed_checkout(session)
    if event_type == CHECKOUT_FAILED:
        return record_failed_checkout(session)
    logger.debug("Ignoring Stripe event %s of type %s", event.get("id"), event_type)
    return None
