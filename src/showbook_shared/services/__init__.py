"""Shared services for the booking platform.

Import services from their modules directly, e.g.
``from showbook_shared.services.booking_service import BookingService``.
"""
