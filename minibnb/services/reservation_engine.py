"""
Reservation engine: availability, pricing and the reservation lifecycle.

Status transitions::

    (new) -> PENDING -> CONFIRMED -> COMPLETED
    PENDING | CONFIRMED -> CANCELLED

COMPLETED and CANCELLED are terminal. Only CONFIRMED reservations hold
dates; two guests may both have PENDING requests for the same nights and
the first one to be confirmed wins.

Date ranges are compared with inclusive boundaries on both ends, so a stay
checking out on day X collides with one checking in on day X, even though
the price only counts the nights between the two dates.
"""
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from .. import models, policy
from ..errors import (
    CapacityExceeded,
    InvalidDateRange,
    InvalidTransition,
    NotAvailable,
    NotFound,
    PermissionDenied,
    PropertyInactive,
    SelfBooking,
    StoreConflict,
)
from ..store import RecordStore

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

Status = models.ReservationStatus


def calculate_total_price(price_per_night: Decimal, check_in: date, check_out: date) -> Decimal:
    nights = (check_out - check_in).days
    if nights <= 0:
        raise InvalidDateRange("Check-out date must be after check-in date")
    return (Decimal(price_per_night) * nights).quantize(CENTS)


def _get_property(store: RecordStore, property_id: int, lock: bool = False) -> models.Property:
    prop = store.get(models.Property, property_id, lock=lock)
    if prop is None:
        raise NotFound(f"Property not found with id: {property_id}")
    return prop


def _get_reservation(store: RecordStore, reservation_id: int) -> models.Reservation:
    reservation = store.get(models.Reservation, reservation_id)
    if reservation is None:
        raise NotFound(f"Reservation not found with id: {reservation_id}")
    return reservation


def _blocked_days(reservation: models.Reservation) -> List[models.BlockedDate]:
    days = (reservation.check_out_date - reservation.check_in_date).days
    return [
        models.BlockedDate(
            property_id=reservation.property_id,
            reservation_id=reservation.id,
            day=reservation.check_in_date + timedelta(days=offset),
        )
        for offset in range(days + 1)
    ]


def is_property_available(
    store: RecordStore, property_id: int, check_in: date, check_out: date
) -> bool:
    prop = _get_property(store, property_id)
    if not prop.is_active:
        return False
    conflicts = store.query_reservations_overlapping(
        property_id, Status.CONFIRMED, check_in, check_out
    )
    return not conflicts


def create_reservation(
    store: RecordStore,
    property_id: int,
    check_in: date,
    check_out: date,
    guests_count: int,
    guest: models.User,
    today: Optional[date] = None,
) -> models.Reservation:
    """
    Book ``property_id`` for ``guest`` and return the PENDING reservation.

    The property row stays locked from the availability check until the
    insert is committed.

    Raises
    ------
    PermissionDenied
        The actor's role may not book.
    NotFound, SelfBooking, PropertyInactive, InvalidDateRange,
    CapacityExceeded, NotAvailable
        The corresponding business rule was violated, checked in that order.
    """
    today = today or date.today()

    if not policy.can_create_reservation(guest.role):
        raise PermissionDenied("Only GUEST or ADMIN can create reservations")

    prop = _get_property(store, property_id, lock=True)

    if prop.host_id == guest.id:
        raise SelfBooking("You cannot book a property you host")
    if not prop.is_active:
        raise PropertyInactive("Property is not available")
    if check_in < today:
        raise InvalidDateRange("Check-in date cannot be in the past")
    if check_out <= check_in:
        raise InvalidDateRange("Check-out date must be after check-in date")
    if guests_count < 1:
        raise CapacityExceeded("At least one guest is required")
    if guests_count > prop.max_guests:
        raise CapacityExceeded("Number of guests exceeds property capacity")
    if not is_property_available(store, property_id, check_in, check_out):
        logger.warning(
            f"Guest {guest.id} rejected on property {property_id}: "
            f"{check_in} to {check_out} already booked"
        )
        raise NotAvailable("Property is not available for the selected dates")

    reservation = models.Reservation(
        property_id=prop.id,
        guest_id=guest.id,
        check_in_date=check_in,
        check_out_date=check_out,
        number_of_guests=guests_count,
        total_price=calculate_total_price(prop.price_per_night, check_in, check_out),
        status=Status.PENDING,
    )
    store.save(reservation)
    logger.info(
        f"Reservation {reservation.id} created for property {prop.id} "
        f"({check_in} to {check_out}, total {reservation.total_price})"
    )
    return reservation


def confirm_reservation(
    store: RecordStore, reservation_id: int, actor: models.User
) -> models.Reservation:
    """
    Move a PENDING reservation to CONFIRMED.

    Availability is checked again because other requests for the same
    nights may have been confirmed since this one was created. The days are
    then recorded in ``blocked_dates`` in the same commit; if a concurrent
    confirmation got there first the unique constraint rejects this one.
    """
    reservation = _get_reservation(store, reservation_id)
    if not policy.can_manage_as_owner_or_admin(actor, reservation.property.host_id):
        raise PermissionDenied("Only property host or ADMIN can confirm reservations")
    if reservation.status != Status.PENDING:
        raise InvalidTransition("Only PENDING reservations can be confirmed")

    _get_property(store, reservation.property_id, lock=True)
    conflicts = store.query_reservations_overlapping(
        reservation.property_id,
        Status.CONFIRMED,
        reservation.check_in_date,
        reservation.check_out_date,
        exclude_id=reservation.id,
    )
    if conflicts:
        raise NotAvailable("Property is already booked for these dates")

    reservation.status = Status.CONFIRMED
    try:
        store.save(reservation, *_blocked_days(reservation))
    except StoreConflict as exc:
        logger.warning(f"Reservation {reservation_id} lost a concurrent confirmation race")
        raise NotAvailable("Property is already booked for these dates") from exc
    logger.info(f"Reservation {reservation.id} confirmed by user {actor.id}")
    return reservation


def complete_reservation(
    store: RecordStore, reservation_id: int, actor: models.User
) -> models.Reservation:
    reservation = _get_reservation(store, reservation_id)
    if not policy.can_manage_as_owner_or_admin(actor, reservation.property.host_id):
        raise PermissionDenied("Only property host or ADMIN can complete reservations")
    if reservation.status != Status.CONFIRMED:
        raise InvalidTransition("Only CONFIRMED reservations can be completed")

    store.clear_blocked_dates(reservation.id)
    reservation.status = Status.COMPLETED
    store.save(reservation)
    logger.info(f"Reservation {reservation.id} completed by user {actor.id}")
    return reservation


def cancel_reservation(
    store: RecordStore, reservation_id: int, actor: models.User
) -> models.Reservation:
    reservation = _get_reservation(store, reservation_id)
    is_guest = reservation.guest_id == actor.id
    if not is_guest and not policy.can_manage_as_owner_or_admin(
        actor, reservation.property.host_id
    ):
        raise PermissionDenied("You don't have permission to cancel this reservation")
    if reservation.status == Status.CANCELLED:
        raise InvalidTransition("Reservation is already cancelled")
    if reservation.status == Status.COMPLETED:
        raise InvalidTransition("Cannot cancel a completed reservation")

    if reservation.status == Status.CONFIRMED:
        store.clear_blocked_dates(reservation.id)
    reservation.status = Status.CANCELLED
    store.save(reservation)
    logger.info(f"Reservation {reservation.id} cancelled by user {actor.id}")
    return reservation


# ----- queries -----
def find_reservation(store: RecordStore, reservation_id: int) -> Optional[models.Reservation]:
    return store.get(models.Reservation, reservation_id)


def find_reservations_by_guest(store: RecordStore, guest: models.User) -> List[models.Reservation]:
    return store.query_by_field(models.Reservation, "guest_id", guest.id)


def find_reservations_by_property(store: RecordStore, property_id: int) -> List[models.Reservation]:
    _get_property(store, property_id)
    return store.query_by_field(models.Reservation, "property_id", property_id)


def find_reservations_by_host(store: RecordStore, host: models.User) -> List[models.Reservation]:
    return store.query_reservations_by_host(host.id)


def find_busy_periods(store: RecordStore, property_id: int) -> List[models.Reservation]:
    """CONFIRMED reservations of a property, ordered by check-in."""
    _get_property(store, property_id)
    return sorted(
        (
            r for r in store.query_by_field(models.Reservation, "property_id", property_id)
            if r.status == Status.CONFIRMED
        ),
        key=lambda r: r.check_in_date,
    )
