# tests/test_access_policy.py
from types import SimpleNamespace

import pytest

from core.exceptions import UnhandledRole
from models.enums import LeaseStatus, MaintenanceStatus, UserRole
from policy.access_policy import AccessPolicy, Visibility, enters_active, leaves_active
from services.occupancy_service import clamp_available


def actor(role, id=1):
    return SimpleNamespace(id=id, role=role)


VISIBILITY_RULES = [
    AccessPolicy.property_visibility,
    AccessPolicy.unit_visibility,
    AccessPolicy.lease_visibility,
    AccessPolicy.maintenance_visibility,
    AccessPolicy.payment_visibility,
    AccessPolicy.tenant_visibility,
]


@pytest.mark.parametrize("rule", VISIBILITY_RULES)
@pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.PROPERTY_MANAGER])
def test_staff_see_everything(rule, role):
    assert rule(actor(role)) == Visibility.ALL


@pytest.mark.parametrize("rule", VISIBILITY_RULES)
def test_unknown_role_is_rejected_loudly(rule):
    with pytest.raises(UnhandledRole):
        rule(actor("caretaker"))


def test_landlord_visibility_goes_through_owned_properties():
    landlord = actor(UserRole.LANDLORD)
    assert AccessPolicy.property_visibility(landlord) == Visibility.OWNED_PROPERTIES
    assert AccessPolicy.lease_visibility(landlord) == Visibility.OWNED_PROPERTIES
    assert AccessPolicy.payment_visibility(landlord) == Visibility.ALL
    assert AccessPolicy.tenant_visibility(landlord) == Visibility.LANDLORD_TENANTS


def test_tenant_sees_only_their_own_records():
    tenant = actor(UserRole.TENANT)
    assert AccessPolicy.property_visibility(tenant) == Visibility.NONE
    assert AccessPolicy.unit_visibility(tenant) == Visibility.NONE
    assert AccessPolicy.lease_visibility(tenant) == Visibility.OWN_RECORDS
    assert AccessPolicy.maintenance_visibility(tenant) == Visibility.OWN_RECORDS
    assert AccessPolicy.payment_visibility(tenant) == Visibility.OWN_RECORDS
    assert AccessPolicy.tenant_visibility(tenant) == Visibility.NONE


def test_property_access_follows_ownership():
    prop = SimpleNamespace(landlord_id=7)
    owner = actor(UserRole.LANDLORD, id=7)
    stranger = actor(UserRole.LANDLORD, id=8)

    assert AccessPolicy.can_view_property(owner, prop)
    assert AccessPolicy.can_manage_property(owner, prop)
    assert not AccessPolicy.can_view_property(stranger, prop)
    assert not AccessPolicy.can_manage_property(stranger, prop)
    assert AccessPolicy.can_view_property(actor(UserRole.PROPERTY_MANAGER), prop)
    assert not AccessPolicy.can_manage_property(actor(UserRole.PROPERTY_MANAGER), prop)
    assert not AccessPolicy.can_view_property(actor(UserRole.TENANT), prop)


def test_tenant_sees_unit_only_while_leasing_it():
    prop = SimpleNamespace(landlord_id=7)
    tenant = actor(UserRole.TENANT, id=3)

    assert not AccessPolicy.can_view_unit(tenant, prop)
    assert AccessPolicy.can_view_unit(tenant, prop, tenant_has_active_lease=True)
    assert not AccessPolicy.can_manage_units(tenant, prop)


def test_tenant_lease_and_payment_access_is_by_tenant_id():
    prop = SimpleNamespace(landlord_id=7)
    tenant = actor(UserRole.TENANT, id=3)
    own_lease = SimpleNamespace(tenant_id=3)
    other_lease = SimpleNamespace(tenant_id=4)

    assert AccessPolicy.can_view_lease(tenant, own_lease, prop)
    assert not AccessPolicy.can_view_lease(tenant, other_lease, prop)
    assert AccessPolicy.can_record_payment(tenant, own_lease, prop)
    assert not AccessPolicy.can_record_payment(tenant, other_lease, prop)
    assert not AccessPolicy.can_view_payment(tenant, SimpleNamespace(tenant_id=4), prop)


def test_tenant_may_delete_only_pending_own_requests():
    prop = SimpleNamespace(landlord_id=7)
    tenant = actor(UserRole.TENANT, id=3)
    pending = SimpleNamespace(created_by=3, status=MaintenanceStatus.PENDING)
    started = SimpleNamespace(created_by=3, status=MaintenanceStatus.IN_PROGRESS)
    someone_elses = SimpleNamespace(created_by=4, status=MaintenanceStatus.PENDING)

    assert AccessPolicy.can_delete_maintenance(tenant, pending, prop)
    assert not AccessPolicy.can_delete_maintenance(tenant, started, prop)
    assert not AccessPolicy.can_delete_maintenance(tenant, someone_elses, prop)


def test_landlord_tenant_visibility():
    landlord = actor(UserRole.LANDLORD, id=7)
    created = SimpleNamespace(created_by=7)
    unrelated = SimpleNamespace(created_by=None)

    assert AccessPolicy.can_view_tenant(landlord, created)
    assert AccessPolicy.can_view_tenant(landlord, unrelated, leases_in_actor_property=True)
    assert not AccessPolicy.can_view_tenant(landlord, unrelated)
    assert not AccessPolicy.can_delete_tenant(actor(UserRole.PROPERTY_MANAGER), created)


def test_lease_status_transitions():
    assert leaves_active(LeaseStatus.ACTIVE, LeaseStatus.TERMINATED)
    assert leaves_active(LeaseStatus.ACTIVE, LeaseStatus.EXPIRED)
    assert not leaves_active(LeaseStatus.ACTIVE, LeaseStatus.ACTIVE)
    assert enters_active(LeaseStatus.EXPIRED, LeaseStatus.ACTIVE)
    assert not enters_active(LeaseStatus.TERMINATED, LeaseStatus.EXPIRED)


@pytest.mark.parametrize(
    "total, non_vacant, expected",
    [(3, 0, 3), (3, 1, 2), (3, 3, 0), (3, 5, 0), (0, 0, 0)],
)
def test_available_units_stay_within_bounds(total, non_vacant, expected):
    assert clamp_available(total, non_vacant) == expected


def test_landlord_payment_detail_is_not_ownership_filtered():
    prop = SimpleNamespace(landlord_id=7)
    stranger = actor(UserRole.LANDLORD, id=8)
    assert AccessPolicy.can_view_payment(stranger, SimpleNamespace(tenant_id=3), prop)
    assert not AccessPolicy.can_record_payment(stranger, SimpleNamespace(tenant_id=3), prop)
