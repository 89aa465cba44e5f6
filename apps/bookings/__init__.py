"""Bookings app package.

A booking holds a room for a half-open period ``[start, end)``. Active
bookings (pending or confirmed) of the same room never overlap: the service
layer checks before writing, serializes writers per room with a row lock and,
on PostgreSQL, an exclusion constraint backs the rule at the storage level.
"""
