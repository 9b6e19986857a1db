"""
User account management: registration, login and role changes.
"""
import logging
from typing import List, Optional

from .. import models, schemas
from ..errors import DuplicateEmail, NotFound, StoreConflict, UserInUse
from ..security import get_password_hash, verify_password
from ..store import RecordStore

logger = logging.getLogger(__name__)


def get_user(store: RecordStore, user_id: int) -> models.User:
    user = store.get(models.User, user_id)
    if user is None:
        raise NotFound(f"User not found with id: {user_id}")
    return user


def find_user_by_email(store: RecordStore, email: str) -> Optional[models.User]:
    users = store.query_by_field(models.User, "email", email)
    return users[0] if users else None


def list_users(store: RecordStore) -> List[models.User]:
    return store.query_all(models.User)


def register_user(store: RecordStore, user_in: schemas.UserCreate) -> models.User:
    """
    Create a new account with a hashed password.

    Raises
    ------
    DuplicateEmail
        If an account with the same email already exists, including when a
        concurrent registration wins the race to the unique index.
    """
    if find_user_by_email(store, user_in.email) is not None:
        raise DuplicateEmail(f"Email already exists: {user_in.email}")

    user = models.User(
        email=user_in.email,
        first_name=user_in.first_name,
        last_name=user_in.last_name,
        hashed_password=get_password_hash(user_in.password),
        role=user_in.role,
    )
    try:
        store.save(user)
    except StoreConflict as exc:
        raise DuplicateEmail(f"Email already exists: {user_in.email}") from exc
    logger.info(f"Registered user {user.id} with role {user.role.value}")
    return user


def authenticate_user(store: RecordStore, email: str, password: str) -> Optional[models.User]:
    user = find_user_by_email(store, email)
    if user is None:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def update_user_role(store: RecordStore, user_id: int, role: models.UserRole) -> models.User:
    user = get_user(store, user_id)
    if user.role == role:
        return user
    previous = user.role
    user.role = role
    store.save(user)
    logger.info(f"User {user.id} role changed from {previous.value} to {role.value}")
    return user


def become_host(store: RecordStore, user: models.User) -> models.User:
    """Promote a guest to host. Hosts and admins are returned unchanged."""
    if user.role != models.UserRole.GUEST:
        return user
    return update_user_role(store, user.id, models.UserRole.HOST)


def delete_user(store: RecordStore, user_id: int) -> None:
    """
    Remove an account.

    Deletion does not cascade: a user who still hosts properties or holds
    reservations must be cleaned up first.
    """
    user = get_user(store, user_id)
    if store.query_by_field(models.Property, "host_id", user.id):
        raise UserInUse("User still hosts properties and cannot be deleted")
    if store.query_by_field(models.Reservation, "guest_id", user.id):
        raise UserInUse("User has reservations and cannot be deleted")
    store.delete(user)
    logger.info(f"Deleted user {user_id}")
