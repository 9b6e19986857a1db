"""
Role-based authorization predicates.

Pure functions of the actor and the resource owner; they never touch the
store and never raise.
"""
from .models import User, UserRole


def is_admin(actor: User) -> bool:
    return actor.role == UserRole.ADMIN


def can_create_property(role: UserRole) -> bool:
    return role in (UserRole.HOST, UserRole.ADMIN)


def can_create_reservation(role: UserRole) -> bool:
    return role in (UserRole.GUEST, UserRole.ADMIN)


def can_manage_as_owner_or_admin(actor: User, resource_owner_id: int) -> bool:
    return is_admin(actor) or actor.id == resource_owner_id
