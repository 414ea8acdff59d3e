# tests/test_leases.py
from datetime import date, timedelta

from models.enums import LeaseStatus, UnitStatus, UserRole
from models.models import Lease, Property, Unit


def lease_payload(tenant, unit, **overrides):
    payload = {
        "start_date": date.today().isoformat(),
        "end_date": (date.today() + timedelta(days=365)).isoformat(),
        "rent_amount": 15000,
        "security_deposit": 15000,
        "tenant_id": tenant.id,
        "unit_id": unit.id,
    }
    payload.update(overrides)
    return payload


def test_create_lease_occupies_unit(client, auth, seed, landlord, tenant):
    prop = seed.property(landlord, total_units=2)
    unit = seed.unit(prop)

    res = client.post("/api/leases/", json=lease_payload(tenant, unit), headers=auth(landlord))
    assert res.status_code == 201
    lease = res.json()["lease"]
    assert lease["status"] == "active"
    assert lease["tenant"]["id"] == tenant.id
    assert lease["unit"]["property"]["id"] == prop.id

    assert seed.reload(Unit, unit.id).status == UnitStatus.OCCUPIED
    assert seed.reload(Property, prop.id).available_units == 1


def test_second_lease_on_unit_is_409(client, auth, seed, manager, landlord, tenant):
    prop = seed.property(landlord)
    unit = seed.unit(prop)
    seed.occupied_lease(tenant, unit)
    newcomer = seed.user(UserRole.TENANT)

    res = client.post("/api/leases/", json=lease_payload(newcomer, unit), headers=auth(manager))
    assert res.status_code == 409
    assert seed.reload(Property, prop.id).available_units == 1


def test_unit_under_maintenance_cannot_be_leased(client, auth, seed, landlord, tenant):
    prop = seed.property(landlord)
    unit = seed.unit(prop, status=UnitStatus.MAINTENANCE)
    res = client.post("/api/leases/", json=lease_payload(tenant, unit), headers=auth(landlord))
    assert res.status_code == 409


def test_end_before_start_is_422(client, auth, seed, landlord, tenant):
    prop = seed.property(landlord)
    unit = seed.unit(prop)
    payload = lease_payload(tenant, unit, end_date=date.today().isoformat())
    assert client.post("/api/leases/", json=payload, headers=auth(landlord)).status_code == 422


def test_foreign_landlord_and_tenant_cannot_create(client, auth, seed, landlord, other_landlord, tenant):
    prop = seed.property(landlord)
    unit = seed.unit(prop)
    payload = lease_payload(tenant, unit)
    assert client.post("/api/leases/", json=payload, headers=auth(other_landlord)).status_code == 403
    assert client.post("/api/leases/", json=payload, headers=auth(tenant)).status_code == 403


def test_tenant_lists_only_own_leases(client, auth, seed, landlord, tenant):
    prop = seed.property(landlord, total_units=2)
    mine = seed.lease(tenant, seed.unit(prop))
    seed.lease(seed.user(UserRole.TENANT), seed.unit(prop))

    body = client.get("/api/leases/", headers=auth(tenant)).json()
    assert [lease["id"] for lease in body["items"]] == [mine.id]


def test_landlord_without_properties_sees_no_leases(client, auth, seed, landlord, other_landlord, tenant):
    prop = seed.property(other_landlord)
    seed.lease(tenant, seed.unit(prop))

    body = client.get("/api/leases/", headers=auth(landlord)).json()
    assert body["items"] == []
    assert body["total"] == 0


def test_status_filter(client, auth, seed, manager, landlord, tenant):
    prop = seed.property(landlord, total_units=2)
    seed.lease(tenant, seed.unit(prop))
    seed.lease(tenant, seed.unit(prop), status=LeaseStatus.EXPIRED)

    body = client.get("/api/leases/", params={"status": "expired"}, headers=auth(manager)).json()
    assert body["total"] == 1
    assert body["items"][0]["status"] == "expired"


def test_tenant_cannot_read_someone_elses_lease(client, auth, seed, landlord, tenant):
    prop = seed.property(landlord)
    lease = seed.lease(seed.user(UserRole.TENANT), seed.unit(prop))
    assert client.get(f"/api/leases/{lease.id}", headers=auth(tenant)).status_code == 403


def test_terminating_lease_vacates_unit(client, auth, seed, landlord, tenant):
    prop = seed.property(landlord, total_units=1)
    unit = seed.unit(prop)
    lease = seed.occupied_lease(tenant, unit)

    res = client.put(
        f"/api/leases/{lease.id}", json={"status": "terminated"}, headers=auth(landlord)
    )
    assert res.status_code == 200
    assert seed.reload(Unit, unit.id).status == UnitStatus.VACANT
    assert seed.reload(Property, prop.id).available_units == 1


def test_delete_lease_with_payments_conflicts(client, auth, seed, landlord, tenant):
    prop = seed.property(landlord)
    lease = seed.occupied_lease(tenant, seed.unit(prop))
    seed.payment(lease)

    assert client.delete(f"/api/leases/{lease.id}", headers=auth(landlord)).status_code == 409
    assert seed.reload(Lease, lease.id) is not None


def test_delete_active_lease_vacates(client, auth, seed, landlord, tenant):
    prop = seed.property(landlord, total_units=1)
    unit = seed.unit(prop)
    lease = seed.occupied_lease(tenant, unit)

    assert client.delete(f"/api/leases/{lease.id}", headers=auth(landlord)).status_code == 200
    assert seed.reload(Lease, lease.id) is None
    assert seed.reload(Unit, unit.id).status == UnitStatus.VACANT
    assert seed.reload(Property, prop.id).available_units == 1
