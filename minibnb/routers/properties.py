from fastapi import APIRouter, Depends, Response, status
from typing import List, Optional

from .. import schemas, models
from ..deps import get_store, get_current_user, require_roles
from ..services import property_catalog
from ..services import users as user_service
from ..store import RecordStore

router = APIRouter(prefix="/properties", tags=["properties"])


@router.get("/", response_model=List[schemas.PropertyOut])
def list_properties(
    city: Optional[str] = None,
    country: Optional[str] = None,
    store: RecordStore = Depends(get_store),
):
    """
    List active properties.

    Parameters
    ----------
    city : str, optional
        Exact city to match. Takes precedence over ``country``.
    country : str, optional
        Exact country to match, used only when no city is given.
    """
    return property_catalog.list_active(store, city=city, country=country)


@router.get("/mine", response_model=List[schemas.PropertyOut])
def list_my_properties(
    store: RecordStore = Depends(get_store),
    current_user: models.User = Depends(get_current_user),
):
    """Properties hosted by the current user, active or not."""
    return property_catalog.list_by_host(store, current_user.id)


@router.get("/all", response_model=List[schemas.PropertyOut])
def list_all_properties(
    store: RecordStore = Depends(get_store),
    _: models.User = Depends(require_roles(models.UserRole.ADMIN)),
):
    """Every property including inactive ones. *(Admin-only)*"""
    return property_catalog.list_all(store)


@router.get("/user/{user_id}", response_model=List[schemas.PropertyOut])
def list_properties_of_user(
    user_id: int,
    store: RecordStore = Depends(get_store),
    _: models.User = Depends(require_roles(models.UserRole.ADMIN)),
):
    """Properties hosted by a given user. *(Admin-only)*"""
    user = user_service.get_user(store, user_id)
    return property_catalog.list_by_host(store, user.id)


@router.get("/{property_id}", response_model=schemas.PropertyOut)
def get_property(property_id: int, store: RecordStore = Depends(get_store)):
    """
    Retrieve a single property by its ID.

    Raises a 404 error if the property does not exist.
    """
    return property_catalog.get_property(store, property_id)


@router.post("/", response_model=schemas.PropertyOut, status_code=status.HTTP_201_CREATED)
def create_property(
    property_in: schemas.PropertyCreate,
    store: RecordStore = Depends(get_store),
    current_user: models.User = Depends(get_current_user),
):
    """
    List a new property. *(Host or Admin)*

    The caller becomes the host and the property starts active.
    """
    return property_catalog.create_property(store, property_in, current_user)


@router.patch("/{property_id}", response_model=schemas.PropertyOut)
def update_property(
    property_id: int,
    property_update: schemas.PropertyUpdate,
    store: RecordStore = Depends(get_store),
    current_user: models.User = Depends(get_current_user),
):
    """
    Update details of a property. *(Its host or an Admin)*

    Only the supplied fields change. Send ``is_active: false`` to take a
    property with bookings off the market.
    """
    return property_catalog.update_property(store, property_id, property_update, current_user)


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_property(
    property_id: int,
    store: RecordStore = Depends(get_store),
    current_user: models.User = Depends(get_current_user),
):
    """
    Delete a property. *(Its host or an Admin)*

    Refused with 400 while any non-cancelled reservation references it.
    """
    property_catalog.delete_property(store, property_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
