"""
Property catalog: listing, ownership and lifecycle of properties.
"""
import logging
from typing import List, Optional

from .. import models, policy, schemas
from ..errors import HasActiveBookings, NotFound, PermissionDenied
from ..store import RecordStore

logger = logging.getLogger(__name__)


def get_property(store: RecordStore, property_id: int) -> models.Property:
    prop = store.get(models.Property, property_id)
    if prop is None:
        raise NotFound(f"Property not found with id: {property_id}")
    return prop


def is_owner(store: RecordStore, property_id: int, user: models.User) -> bool:
    prop = store.get(models.Property, property_id)
    return prop is not None and prop.host_id == user.id


def _require_owner_or_admin(prop: models.Property, actor: models.User, action: str) -> None:
    if not policy.can_manage_as_owner_or_admin(actor, prop.host_id):
        logger.warning(f"User {actor.id} denied {action} on property {prop.id}")
        raise PermissionDenied(f"You don't have permission to {action} this property")


def create_property(
    store: RecordStore, draft: schemas.PropertyCreate, actor: models.User
) -> models.Property:
    if not policy.can_create_property(actor.role):
        raise PermissionDenied("Only HOST or ADMIN can create properties")

    prop = models.Property(**draft.model_dump(), host_id=actor.id, is_active=True)
    store.save(prop)
    logger.info(f"Property {prop.id} created by host {actor.id}")
    return prop


def update_property(
    store: RecordStore,
    property_id: int,
    patch: schemas.PropertyUpdate,
    actor: models.User,
) -> models.Property:
    """
    Apply a partial update.

    Only fields carrying a value overwrite the stored ones; the host
    reference is not part of the patch and stays fixed.
    """
    prop = get_property(store, property_id)
    _require_owner_or_admin(prop, actor, "update")

    for field, value in patch.model_dump(exclude_none=True).items():
        setattr(prop, field, value)
    # an empty or no-op patch still counts as an update
    prop.updated_at = models.utcnow()
    store.save(prop)
    logger.info(f"Property {prop.id} updated by user {actor.id}")
    return prop


def delete_property(store: RecordStore, property_id: int, actor: models.User) -> None:
    prop = get_property(store, property_id)
    _require_owner_or_admin(prop, actor, "delete")

    # PENDING, CONFIRMED and COMPLETED all keep the property alive
    blocking = [
        r for r in store.query_by_field(models.Reservation, "property_id", prop.id)
        if r.status != models.ReservationStatus.CANCELLED
    ]
    if blocking:
        raise HasActiveBookings(
            "This property has active or completed reservations and cannot be "
            "deleted. Deactivate it instead."
        )

    store.delete(prop)
    logger.info(f"Property {property_id} deleted by user {actor.id}")


def list_active(
    store: RecordStore, city: Optional[str] = None, country: Optional[str] = None
) -> List[models.Property]:
    """
    Active properties, optionally narrowed to one city or one country.

    When both are supplied only the city filter applies.
    """
    active = store.query_by_field(models.Property, "is_active", True)
    if city:
        return [p for p in active if p.city == city]
    if country:
        return [p for p in active if p.country == country]
    return active


def list_by_host(store: RecordStore, host_id: int) -> List[models.Property]:
    return store.query_by_field(models.Property, "host_id", host_id)


def list_all(store: RecordStore) -> List[models.Property]:
    return store.query_all(models.Property)
