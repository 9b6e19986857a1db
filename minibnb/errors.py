"""
Error taxonomy shared by the property catalog and the reservation engine.

Business-rule violations derive from ``BookingError``; failures of the
underlying record store derive from ``StoreError`` and are never mixed with
business errors. Each class carries the HTTP status the API layer renders.
"""


class BookingError(Exception):
    """Base class for every business-rule violation."""

    status_code = 400
    error = "business_rule_violation"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(BookingError):
    status_code = 404
    error = "not_found"


class PermissionDenied(BookingError):
    status_code = 403
    error = "permission_denied"


class InvalidTransition(BookingError):
    error = "invalid_transition"


class InvalidDateRange(BookingError):
    error = "invalid_date_range"


class CapacityExceeded(BookingError):
    error = "capacity_exceeded"


class PropertyInactive(BookingError):
    error = "property_inactive"


class SelfBooking(BookingError):
    error = "self_booking"


class NotAvailable(BookingError):
    error = "not_available"


class HasActiveBookings(BookingError):
    error = "has_active_bookings"


class DuplicateEmail(BookingError):
    error = "duplicate_email"


class UserInUse(BookingError):
    error = "user_in_use"


class StoreError(Exception):
    """The record store failed for a reason unrelated to business rules."""

    status_code = 500
    error = "store_error"

    def __init__(self, detail: str = "Record store failure"):
        super().__init__(detail)
        self.detail = detail


class StoreConflict(StoreError):
    """A write was rejected by a store-level uniqueness constraint."""

    status_code = 409
    error = "store_conflict"


class StoreUnavailable(StoreError):
    """The circuit breaker is open; writes are failing fast."""

    status_code = 503
    error = "store_unavailable"
