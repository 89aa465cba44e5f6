"""Domain services for booking workflows.

``booking_conflicts`` is the overlap guard: a candidate period ``[S, E)``
collides with an existing ``[S', E')`` of the same room iff
``S' < E and E' > S``. Touching periods never collide.

Writers (create, update) lock the room row first so two requests for the
same room are serialized; the guard then runs inside that lock.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, time, timezone as dt_timezone
from typing import Any, Iterable

from django.core.exceptions import PermissionDenied, ValidationError  # type: ignore
from django.db import IntegrityError, transaction  # type: ignore
from django.shortcuts import get_object_or_404  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.dateparse import parse_date, parse_datetime  # type: ignore

from apps.rooms.models import Room
from shared.api.context import RequestContext
from shared.domain.value_objects import DateRange

from .models import Booking

logger = logging.getLogger(__name__)

ACTIVE_STATUSES: tuple[str, ...] = (Booking.Status.PENDING, Booking.Status.CONFIRMED)
IGNORED_STATUSES: tuple[str, ...] = (Booking.Status.CANCELLED,)

CONFLICT_MESSAGE = "Room is already booked for the selected dates."


class BookingConflictError(Exception):
    """Raised when a room is busy for the requested period."""


def parse_instant(value: Any) -> datetime:
    """Parse an ISO-8601 instant; bare dates mean midnight UTC.

    Raises ``ValueError`` for anything else.
    """

    if isinstance(value, datetime):
        instant = value
    elif isinstance(value, date):
        instant = datetime.combine(value, time.min)
    else:
        text = str(value).strip()
        instant = parse_datetime(text)
        if instant is None:
            day = parse_date(text)
            if day is None:
                raise ValueError(f"Invalid date: {value!r}")
            instant = datetime.combine(day, time.min)
    if timezone.is_naive(instant):
        instant = timezone.make_aware(instant, dt_timezone.utc)
    return instant


def _room_pk(room_id: Any) -> uuid.UUID:
    if isinstance(room_id, uuid.UUID):
        return room_id
    try:
        return uuid.UUID(str(room_id))
    except (TypeError, ValueError, AttributeError):
        raise ValidationError({"roomId": "Invalid room id format."}) from None


def _period(start: Any, end: Any) -> DateRange:
    errors = {}
    try:
        start = parse_instant(start)
    except (TypeError, ValueError):
        errors["startDate"] = "Enter a valid date."
    try:
        end = parse_instant(end)
    except (TypeError, ValueError):
        errors["endDate"] = "Enter a valid date."
    if errors:
        raise ValidationError(errors)
    try:
        return DateRange(start, end)
    except ValueError:
        raise ValidationError({"endDate": "End date must be after start date."}) from None


def booking_conflicts(
    room_id: Any,
    start: Any,
    end: Any,
    *,
    exclude_booking_id: Any = None,
    ignored_statuses: Iterable[str] = IGNORED_STATUSES,
) -> bool:
    """Whether an active booking of ``room_id`` overlaps ``[start, end)``."""

    room_pk = _room_pk(room_id)
    period = _period(start, end)
    ignored = set(ignored_statuses)
    blocking = [status for status in ACTIVE_STATUSES if status not in ignored]
    if not blocking:
        return False

    bookings = Booking.objects.filter(
        room_id=room_pk,
        status__in=blocking,
        start_date__lt=period.end,
        end_date__gt=period.start,
    )
    if exclude_booking_id is not None:
        bookings = bookings.exclude(pk=exclude_booking_id)
    return bookings.exists()


def ensure_room_is_available(room_id: Any, start: Any, end: Any, *, exclude_booking_id: Any = None) -> None:
    if booking_conflicts(room_id, start, end, exclude_booking_id=exclude_booking_id):
        raise BookingConflictError(CONFLICT_MESSAGE)


def _lock_room(room_id: Any) -> Room:
    return get_object_or_404(Room.objects.select_for_update(), pk=_room_pk(room_id))


def _save_guarded(booking: Booking, **save_kwargs: Any) -> Booking:
    # A savepoint keeps the outer transaction usable if the storage-level
    # exclusion constraint rejects the row.
    try:
        with transaction.atomic():
            booking.save(**save_kwargs)
    except IntegrityError as exc:
        logger.warning("Storage rejected overlapping booking for room %s: %s", booking.room_id, exc)
        raise BookingConflictError(CONFLICT_MESSAGE) from exc
    return booking


def create_booking(context: RequestContext, room_id: Any, start: Any, end: Any) -> Booking:
    """Reserve ``room_id`` for ``[start, end)`` on behalf of the caller."""

    period = _period(start, end)
    with transaction.atomic():
        room = _lock_room(room_id)
        ensure_room_is_available(room.pk, period.start, period.end)
        booking = _save_guarded(
            Booking(user_id=context.user_id, room=room, start_date=period.start, end_date=period.end)
        )
    logger.info("Booking %s created for room %s by user %s", booking.pk, room.pk, context.user_id)
    return booking


def update_booking(
    context: RequestContext,
    booking: Booking,
    *,
    start_date: Any = None,
    end_date: Any = None,
    status: str | None = None,
) -> Booking:
    """Change period and/or status; the result must still not overlap."""

    if not context.is_admin:
        raise PermissionDenied("Only administrators can modify bookings.")

    period = _period(
        booking.start_date if start_date is None else start_date,
        booking.end_date if end_date is None else end_date,
    )
    new_status = status or booking.status
    if new_status not in Booking.Status.values:
        raise ValidationError({"status": f"Unknown status '{new_status}'."})

    with transaction.atomic():
        _lock_room(booking.room_id)
        if new_status in ACTIVE_STATUSES:
            ensure_room_is_available(booking.room_id, period.start, period.end, exclude_booking_id=booking.pk)
        booking.start_date, booking.end_date, booking.status = period.start, period.end, new_status
        _save_guarded(booking)
    logger.info("Booking %s updated by admin %s", booking.pk, context.user_id)
    return booking


def cancel_booking(context: RequestContext, booking: Booking) -> Booking:
    if not context.can_access(booking.user_id):
        raise PermissionDenied("You do not have permission to cancel this booking.")
    if booking.status == Booking.Status.CANCELLED:
        raise ValidationError({"status": "Booking is already cancelled."})
    booking.mark_cancelled()
    logger.info("Booking %s cancelled by user %s", booking.pk, context.user_id)
    return booking


def confirm_booking(booking: Booking) -> bool:
    """Confirm a pending booking after payment; cancelled ones stay cancelled."""

    if booking.status != Booking.Status.PENDING:
        return False
    booking.mark_confirmed()
    logger.info("Booking %s confirmed", booking.pk)
    return True
