"""Payments app package.

Guests pay through a hosted Stripe Checkout session. Payment records are
written only when Stripe reports the outcome through the signed webhook;
no client-facing endpoint creates or edits them.
"""
