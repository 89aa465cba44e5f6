"""Tests for the booking overlap guard and booking services."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from unittest import mock

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import IntegrityError
from django.http import Http404
from django.test import TestCase

from apps.bookings.models import Booking
from apps.bookings.services import (
    BookingConflictError,
    booking_conflicts,
    cancel_booking,
    confirm_booking,
    create_booking,
    ensure_room_is_available,
    parse_instant,
    update_booking,
)
from apps.rooms.models import Room
from apps.users.models import User
from shared.api.context import RequestContext


def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=dt_timezone.utc)


class ParseInstantTests(TestCase):
    def test_bare_date_is_midnight_utc(self) -> None:
        self.assertEqual(parse_instant("2024-01-05"), utc(2024, 1, 5))

    def test_offset_is_preserved(self) -> None:
        self.assertEqual(parse_instant("2024-01-05T14:00:00+02:00"), utc(2024, 1, 5, 12))

    def test_garbage_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            parse_instant("next tuesday")


class OverlapGuardTests(TestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(email="guest@example.com", password="x" * 10, name="Guest")
        self.room = Room.objects.create(
            name="Deluxe",
            description="Large room with a king bed.",
            guest_capacity=2,
            price=Decimal("90.00"),
            location="Colombo",
            images=["https://cdn.example.com/deluxe.jpg"],
        )
        self.booking = Booking.objects.create(
            user=self.user, room=self.room, start_date=utc(2024, 1, 1), end_date=utc(2024, 1, 5)
        )

    def test_overlapping_period_conflicts(self) -> None:
        self.assertTrue(booking_conflicts(self.room.pk, utc(2024, 1, 3), utc(2024, 1, 7)))
        self.assertTrue(booking_conflicts(self.room.pk, utc(2023, 12, 30), utc(2024, 1, 2)))
        self.assertTrue(booking_conflicts(self.room.pk, utc(2024, 1, 2), utc(2024, 1, 3)))
        self.assertTrue(booking_conflicts(self.room.pk, utc(2023, 12, 1), utc(2024, 2, 1)))

    def test_touching_periods_do_not_conflict(self) -> None:
        self.assertFalse(booking_conflicts(self.room.pk, utc(2024, 1, 5), utc(2024, 1, 7)))
        self.assertFalse(booking_conflicts(self.room.pk, utc(2023, 12, 28), utc(2024, 1, 1)))

    def test_other_rooms_are_independent(self) -> None:
        other = Room.objects.create(
            name="Twin",
            description="Two single beds and a desk.",
            guest_capacity=2,
            price=Decimal("70.00"),
            location="Colombo",
            images=["https://cdn.example.com/twin.jpg"],
        )

        self.assertFalse(booking_conflicts(other.pk, utc(2024, 1, 2), utc(2024, 1, 4)))

    def test_cancelled_bookings_never_block(self) -> None:
        self.booking.mark_cancelled()

        self.assertFalse(booking_conflicts(self.room.pk, utc(2024, 1, 2), utc(2024, 1, 4)))

    def test_confirmed_bookings_block(self) -> None:
        self.booking.mark_confirmed()

        self.assertTrue(booking_conflicts(self.room.pk, utc(2024, 1, 2), utc(2024, 1, 4)))

    def test_ignored_statuses_can_be_widened(self) -> None:
        self.assertFalse(
            booking_conflicts(
                self.room.pk,
                utc(2024, 1, 2),
                utc(2024, 1, 4),
                ignored_statuses=(Booking.Status.PENDING, Booking.Status.CANCELLED),
            )
        )

    def test_booking_does_not_conflict_with_itself(self) -> None:
        self.assertFalse(
            booking_conflicts(
                self.room.pk, utc(2024, 1, 2), utc(2024, 1, 6), exclude_booking_id=self.booking.pk
            )
        )

    def test_accepts_iso_strings(self) -> None:
        self.assertTrue(booking_conflicts(str(self.room.pk), "2024-01-03", "2024-01-07"))

    def test_invalid_input_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            booking_conflicts("not-a-uuid", utc(2024, 1, 2), utc(2024, 1, 3))
        with self.assertRaises(ValidationError):
            booking_conflicts(self.room.pk, "soon", utc(2024, 1, 3))
        with self.assertRaises(ValidationError):
            booking_conflicts(self.room.pk, utc(2024, 1, 3), utc(2024, 1, 3))
        with self.assertRaises(ValidationError):
            booking_conflicts(self.room.pk, utc(2024, 1, 4), utc(2024, 1, 3))

    def test_ensure_room_is_available_raises_on_conflict(self) -> None:
        with self.assertRaises(BookingConflictError):
            ensure_room_is_available(self.room.pk, utc(2024, 1, 4), utc(2024, 1, 6))


class BookingServiceTests(TestCase):
    def setUp(self) -> None:
        self.guest = User.objects.create_user(email="guest@example.com", password="x" * 10, name="Guest")
        self.other = User.objects.create_user(email="other@example.com", password="x" * 10, name="Other")
        self.admin = User.objects.create_user(
            email="admin@example.com", password="x" * 10, name="Admin", role=User.Role.ADMIN
        )
        self.room = Room.objects.create(
            name="Deluxe",
            description="Large room with a king bed.",
            guest_capacity=2,
            price=Decimal("90.00"),
            location="Colombo",
            images=["https://cdn.example.com/deluxe.jpg"],
        )
        self.guest_ctx = RequestContext.from_user(self.guest)
        self.other_ctx = RequestContext.from_user(self.other)
        self.admin_ctx = RequestContext.from_user(self.admin)

    def test_create_booking_is_pending_and_owned_by_caller(self) -> None:
        booking = create_booking(self.guest_ctx, self.room.pk, "2024-01-01", "2024-01-05")

        self.assertEqual(booking.status, Booking.Status.PENDING)
        self.assertEqual(booking.user_id, self.guest.pk)
        self.assertEqual(booking.start_date, utc(2024, 1, 1))

    def test_create_booking_conflict_leaves_no_row(self) -> None:
        create_booking(self.guest_ctx, self.room.pk, "2024-01-01", "2024-01-05")

        with self.assertRaises(BookingConflictError):
            create_booking(self.other_ctx, self.room.pk, "2024-01-03", "2024-01-07")
        self.assertEqual(Booking.objects.count(), 1)

    def test_create_booking_for_unknown_room(self) -> None:
        with self.assertRaises(Http404):
            create_booking(self.guest_ctx, uuid.uuid4(), "2024-01-01", "2024-01-05")

    def test_update_booking_moves_period(self) -> None:
        booking = create_booking(self.guest_ctx, self.room.pk, "2024-01-01", "2024-01-05")

        update_booking(self.admin_ctx, booking, end_date="2024-01-08")

        booking.refresh_from_db()
        self.assertEqual(booking.end_date, utc(2024, 1, 8))

    def test_update_booking_rejects_overlap(self) -> None:
        create_booking(self.guest_ctx, self.room.pk, "2024-01-10", "2024-01-12")
        booking = create_booking(self.other_ctx, self.room.pk, "2024-01-01", "2024-01-05")

        with self.assertRaises(BookingConflictError):
            update_booking(self.admin_ctx, booking, end_date="2024-01-11")

    def test_update_booking_requires_admin(self) -> None:
        booking = create_booking(self.guest_ctx, self.room.pk, "2024-01-01", "2024-01-05")

        with self.assertRaises(PermissionDenied):
            update_booking(self.guest_ctx, booking, status=Booking.Status.CONFIRMED)

    def test_reactivating_a_cancelled_booking_is_guarded(self) -> None:
        first = create_booking(self.guest_ctx, self.room.pk, "2024-01-01", "2024-01-05")
        cancel_booking(self.guest_ctx, first)
        create_booking(self.other_ctx, self.room.pk, "2024-01-02", "2024-01-04")

        with self.assertRaises(BookingConflictError):
            update_booking(self.admin_ctx, first, status=Booking.Status.PENDING)

    def test_cancel_booking_by_owner_and_twice(self) -> None:
        booking = create_booking(self.guest_ctx, self.room.pk, "2024-01-01", "2024-01-05")

        cancel_booking(self.guest_ctx, booking)

        self.assertEqual(booking.status, Booking.Status.CANCELLED)
        with self.assertRaises(ValidationError):
            cancel_booking(self.guest_ctx, booking)

    def test_cancel_booking_by_stranger_is_denied(self) -> None:
        booking = create_booking(self.guest_ctx, self.room.pk, "2024-01-01", "2024-01-05")

        with self.assertRaises(PermissionDenied):
            cancel_booking(self.other_ctx, booking)

    def test_confirm_booking_never_revives_cancelled(self) -> None:
        booking = create_booking(self.guest_ctx, self.room.pk, "2024-01-01", "2024-01-05")
        booking.mark_cancelled()

        self.assertFalse(confirm_booking(booking))
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.CANCELLED)

    def test_storage_level_overlap_becomes_conflict(self) -> None:
        with mock.patch.object(Booking, "save", side_effect=IntegrityError("booking_no_overlap")):
            with self.assertRaises(BookingConflictError):
                create_booking(self.guest_ctx, self.room.pk, "2024-01-01", "2024-01-05")

        self.assertFalse(Booking.objects.exists())

    def test_storage_level_overlap_on_update_keeps_period(self) -> None:
        booking = create_booking(self.guest_ctx, self.room.pk, "2024-01-01", "2024-01-05")

        with mock.patch.object(Booking, "save", side_effect=IntegrityError("booking_no_overlap")):
            with self.assertRaises(BookingConflictError):
                update_booking(self.admin_ctx, booking, end_date="2024-01-08")

        booking.refresh_from_db()
        self.assertEqual(booking.end_date, utc(2024, 1, 5))
