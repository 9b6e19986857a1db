"""
Unit tests for the access policy predicates.
"""
import pytest

from minibnb import models, policy

Role = models.UserRole


@pytest.mark.parametrize(
    "role, expected",
    [(Role.GUEST, False), (Role.HOST, True), (Role.ADMIN, True)],
)
def test_can_create_property(role, expected):
    assert policy.can_create_property(role) is expected


@pytest.mark.parametrize(
    "role, expected",
    [(Role.GUEST, True), (Role.HOST, False), (Role.ADMIN, True)],
)
def test_can_create_reservation(role, expected):
    assert policy.can_create_reservation(role) is expected


def test_owner_can_manage():
    owner = models.User(id=7, role=Role.HOST)
    assert policy.can_manage_as_owner_or_admin(owner, 7) is True


def test_admin_can_manage_anything():
    admin = models.User(id=1, role=Role.ADMIN)
    assert policy.can_manage_as_owner_or_admin(admin, 7) is True
    assert policy.is_admin(admin) is True


def test_other_host_cannot_manage():
    stranger = models.User(id=8, role=Role.HOST)
    assert policy.can_manage_as_owner_or_admin(stranger, 7) is False
    assert policy.is_admin(stranger) is False
