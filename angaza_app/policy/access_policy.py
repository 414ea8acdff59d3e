"""Who may see and change which records.

Visibility functions answer the list question (which rows an actor may see)
and the ``can_*`` predicates answer it for a single loaded record. Every
function names all four roles; an unknown role raises ``UnhandledRole``
rather than falling through to a permissive default.
"""

from enum import Enum

from core.exceptions import UnhandledRole
from models.enums import LeaseStatus, MaintenanceStatus, UserRole


class Visibility(str, Enum):
    ALL = "all"
    OWNED_PROPERTIES = "owned_properties"
    OWN_RECORDS = "own_records"
    LANDLORD_TENANTS = "landlord_tenants"
    NONE = "none"


def _owns(actor, prop) -> bool:
    return prop is not None and prop.landlord_id == actor.id


class AccessPolicy:
    # Lists

    @staticmethod
    def property_visibility(actor) -> Visibility:
        role = actor.role
        if role == UserRole.ADMIN:
            return Visibility.ALL
        if role == UserRole.PROPERTY_MANAGER:
            return Visibility.ALL
        if role == UserRole.LANDLORD:
            return Visibility.OWNED_PROPERTIES
        if role == UserRole.TENANT:
            return Visibility.NONE
        raise UnhandledRole(role)

    @staticmethod
    def unit_visibility(actor) -> Visibility:
        role = actor.role
        if role == UserRole.ADMIN:
            return Visibility.ALL
        if role == UserRole.PROPERTY_MANAGER:
            return Visibility.ALL
        if role == UserRole.LANDLORD:
            return Visibility.OWNED_PROPERTIES
        if role == UserRole.TENANT:
            return Visibility.NONE
        raise UnhandledRole(role)

    @staticmethod
    def lease_visibility(actor) -> Visibility:
        role = actor.role
        if role == UserRole.ADMIN:
            return Visibility.ALL
        if role == UserRole.PROPERTY_MANAGER:
            return Visibility.ALL
        if role == UserRole.LANDLORD:
            return Visibility.OWNED_PROPERTIES
        if role == UserRole.TENANT:
            return Visibility.OWN_RECORDS
        raise UnhandledRole(role)

    @staticmethod
    def maintenance_visibility(actor) -> Visibility:
        role = actor.role
        if role == UserRole.ADMIN:
            return Visibility.ALL
        if role == UserRole.PROPERTY_MANAGER:
            return Visibility.ALL
        if role == UserRole.LANDLORD:
            return Visibility.OWNED_PROPERTIES
        if role == UserRole.TENANT:
            return Visibility.OWN_RECORDS
        raise UnhandledRole(role)

    @staticmethod
    def payment_visibility(actor) -> Visibility:
        role = actor.role
        if role == UserRole.ADMIN:
            return Visibility.ALL
        if role == UserRole.PROPERTY_MANAGER:
            return Visibility.ALL
        if role == UserRole.LANDLORD:
            return Visibility.ALL
        if role == UserRole.TENANT:
            return Visibility.OWN_RECORDS
        raise UnhandledRole(role)

    @staticmethod
    def tenant_visibility(actor) -> Visibility:
        role = actor.role
        if role == UserRole.ADMIN:
            return Visibility.ALL
        if role == UserRole.PROPERTY_MANAGER:
            return Visibility.ALL
        if role == UserRole.LANDLORD:
            return Visibility.LANDLORD_TENANTS
        if role == UserRole.TENANT:
            return Visibility.NONE
        raise UnhandledRole(role)

    # Single records

    @staticmethod
    def can_view_property(actor, prop) -> bool:
        role = actor.role
        if role in (UserRole.ADMIN, UserRole.PROPERTY_MANAGER):
            return True
        if role == UserRole.LANDLORD:
            return _owns(actor, prop)
        if role == UserRole.TENANT:
            return False
        raise UnhandledRole(role)

    @staticmethod
    def can_manage_property(actor, prop) -> bool:
        role = actor.role
        if role == UserRole.ADMIN:
            return True
        if role == UserRole.PROPERTY_MANAGER:
            return False
        if role == UserRole.LANDLORD:
            return _owns(actor, prop)
        if role == UserRole.TENANT:
            return False
        raise UnhandledRole(role)

    @staticmethod
    def can_view_unit(actor, prop, *, tenant_has_active_lease: bool = False) -> bool:
        role = actor.role
        if role in (UserRole.ADMIN, UserRole.PROPERTY_MANAGER):
            return True
        if role == UserRole.LANDLORD:
            return _owns(actor, prop)
        if role == UserRole.TENANT:
            return tenant_has_active_lease
        raise UnhandledRole(role)

    @staticmethod
    def can_manage_units(actor, prop) -> bool:
        """Units and leases share one write rule: staff, or the owning landlord."""
        role = actor.role
        if role in (UserRole.ADMIN, UserRole.PROPERTY_MANAGER):
            return True
        if role == UserRole.LANDLORD:
            return _owns(actor, prop)
        if role == UserRole.TENANT:
            return False
        raise UnhandledRole(role)

    @staticmethod
    def can_view_lease(actor, lease, prop) -> bool:
        role = actor.role
        if role in (UserRole.ADMIN, UserRole.PROPERTY_MANAGER):
            return True
        if role == UserRole.LANDLORD:
            return _owns(actor, prop)
        if role == UserRole.TENANT:
            return lease.tenant_id == actor.id
        raise UnhandledRole(role)

    @staticmethod
    def can_view_maintenance(actor, request, prop) -> bool:
        role = actor.role
        if role in (UserRole.ADMIN, UserRole.PROPERTY_MANAGER):
            return True
        if role == UserRole.LANDLORD:
            return _owns(actor, prop)
        if role == UserRole.TENANT:
            return request.created_by == actor.id
        raise UnhandledRole(role)

    @staticmethod
    def can_request_maintenance(
        actor, prop, *, tenant_has_active_lease: bool = False
    ) -> bool:
        role = actor.role
        if role in (UserRole.ADMIN, UserRole.PROPERTY_MANAGER):
            return True
        if role == UserRole.LANDLORD:
            return _owns(actor, prop)
        if role == UserRole.TENANT:
            return tenant_has_active_lease
        raise UnhandledRole(role)

    @staticmethod
    def can_delete_maintenance(actor, request, prop) -> bool:
        role = actor.role
        if role in (UserRole.ADMIN, UserRole.PROPERTY_MANAGER):
            return True
        if role == UserRole.LANDLORD:
            return _owns(actor, prop)
        if role == UserRole.TENANT:
            return (
                request.created_by == actor.id
                and request.status == MaintenanceStatus.PENDING
            )
        raise UnhandledRole(role)

    @staticmethod
    def can_view_payment(actor, payment, prop) -> bool:
        role = actor.role
        if role in (UserRole.ADMIN, UserRole.PROPERTY_MANAGER):
            return True
        if role == UserRole.LANDLORD:
            return True
        if role == UserRole.TENANT:
            return payment.tenant_id == actor.id
        raise UnhandledRole(role)

    @staticmethod
    def can_record_payment(actor, lease, prop) -> bool:
        role = actor.role
        if role in (UserRole.ADMIN, UserRole.PROPERTY_MANAGER):
            return True
        if role == UserRole.LANDLORD:
            return _owns(actor, prop)
        if role == UserRole.TENANT:
            return lease.tenant_id == actor.id
        raise UnhandledRole(role)

    @staticmethod
    def can_view_tenant(actor, tenant, *, leases_in_actor_property: bool = False) -> bool:
        role = actor.role
        if role in (UserRole.ADMIN, UserRole.PROPERTY_MANAGER):
            return True
        if role == UserRole.LANDLORD:
            return leases_in_actor_property or tenant.created_by == actor.id
        if role == UserRole.TENANT:
            return False
        raise UnhandledRole(role)

    @staticmethod
    def can_delete_tenant(actor, tenant, *, leases_in_actor_property: bool = False) -> bool:
        role = actor.role
        if role == UserRole.ADMIN:
            return True
        if role == UserRole.PROPERTY_MANAGER:
            return False
        if role == UserRole.LANDLORD:
            return leases_in_actor_property or tenant.created_by == actor.id
        if role == UserRole.TENANT:
            return False
        raise UnhandledRole(role)


def leaves_active(old_status, new_status) -> bool:
    return old_status == LeaseStatus.ACTIVE and new_status != LeaseStatus.ACTIVE


def enters_active(old_status, new_status) -> bool:
    return old_status != LeaseStatus.ACTIVE and new_status == LeaseStatus.ACTIVE
