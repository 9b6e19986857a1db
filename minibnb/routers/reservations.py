from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from datetime import date

from .. import schemas, models
from ..deps import get_store, get_current_user, require_roles
from ..services import reservation_engine
from ..store import RecordStore

router = APIRouter(prefix="/reservations", tags=["reservations"])


@router.post("/", response_model=schemas.ReservationOut, status_code=status.HTTP_201_CREATED)
def create_reservation(
    reservation_in: schemas.ReservationCreate,
    store: RecordStore = Depends(get_store),
    current_user: models.User = Depends(get_current_user),
):
    """
    Request a stay. *(Guest or Admin)*

    The reservation starts PENDING and does not hold the dates until the
    host confirms it. The total price is the nightly price times the number
    of nights.

    Raises
    ------
    BookingError
        - 403 if the caller may not book.
        - 404 if the property does not exist.
        - 400 for self-booking, inactive property, invalid dates, too many
          guests, or dates that collide with a confirmed stay.
    """
    return reservation_engine.create_reservation(
        store,
        reservation_in.property_id,
        reservation_in.check_in_date,
        reservation_in.check_out_date,
        reservation_in.number_of_guests,
        current_user,
    )


@router.get("/mine", response_model=List[schemas.ReservationOut])
def list_my_reservations(
    store: RecordStore = Depends(get_store),
    current_user: models.User = Depends(get_current_user),
):
    """Reservations made by the current user."""
    return reservation_engine.find_reservations_by_guest(store, current_user)


@router.get("/hosting", response_model=List[schemas.ReservationOut])
def list_hosting_reservations(
    store: RecordStore = Depends(get_store),
    current_user: models.User = Depends(
        require_roles(models.UserRole.HOST, models.UserRole.ADMIN)
    ),
):
    """Reservations on properties hosted by the current user. *(Host or Admin)*"""
    return reservation_engine.find_reservations_by_host(store, current_user)


@router.get("/check", response_model=schemas.AvailabilityResponse)
def check_property_availability(
    property_id: int,
    check_in_date: date,
    check_out_date: date,
    store: RecordStore = Depends(get_store),
):
    """
    Check whether a property can be booked for a date range.

    This does not create a reservation. Only confirmed reservations make
    dates unavailable, and an inactive property is never available.
    """
    available = reservation_engine.is_property_available(
        store, property_id, check_in_date, check_out_date
    )
    return schemas.AvailabilityResponse(
        property_id=property_id,
        check_in_date=check_in_date,
        check_out_date=check_out_date,
        available=available,
    )


@router.get("/property/{property_id}", response_model=List[schemas.ReservationOut])
def list_property_reservations(
    property_id: int,
    store: RecordStore = Depends(get_store),
    _: models.User = Depends(get_current_user),
):
    """All reservations of a property, in any status."""
    return reservation_engine.find_reservations_by_property(store, property_id)


@router.get("/property/{property_id}/busy-dates", response_model=List[schemas.BusyPeriod])
def list_busy_dates(property_id: int, store: RecordStore = Depends(get_store)):
    """
    Date ranges held by confirmed reservations.

    Public, so calendars can grey out taken dates without exposing guests.
    """
    return reservation_engine.find_busy_periods(store, property_id)


@router.get("/{reservation_id}", response_model=schemas.ReservationOut)
def get_reservation(
    reservation_id: int,
    store: RecordStore = Depends(get_store),
    _: models.User = Depends(get_current_user),
):
    reservation = reservation_engine.find_reservation(store, reservation_id)
    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return reservation


@router.put("/{reservation_id}/confirm", response_model=schemas.ReservationOut)
def confirm_reservation(
    reservation_id: int,
    store: RecordStore = Depends(get_store),
    current_user: models.User = Depends(get_current_user),
):
    """
    Confirm a PENDING reservation. *(Property host or Admin)*

    Fails with 400 if another confirmed stay already holds the dates.
    """
    return reservation_engine.confirm_reservation(store, reservation_id, current_user)


@router.put("/{reservation_id}/complete", response_model=schemas.ReservationOut)
def complete_reservation(
    reservation_id: int,
    store: RecordStore = Depends(get_store),
    current_user: models.User = Depends(get_current_user),
):
    """Mark a CONFIRMED stay as completed. *(Property host or Admin)*"""
    return reservation_engine.complete_reservation(store, reservation_id, current_user)


@router.put("/{reservation_id}/cancel", response_model=schemas.ReservationOut)
def cancel_reservation(
    reservation_id: int,
    store: RecordStore = Depends(get_store),
    current_user: models.User = Depends(get_current_user),
):
    """
    Cancel a PENDING or CONFIRMED reservation.

    - The guest can cancel their own reservation.
    - The property host and admins can cancel any reservation on it.
    """
    return reservation_engine.cancel_reservation(store, reservation_id, current_user)
