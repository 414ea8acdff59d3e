# tests/test_units.py
from models.enums import UnitStatus
from models.models import Property, Unit


def unit_payload(prop, **overrides):
    payload = {
        "unit_number": "B1",
        "type": "2br",
        "rent": 25000,
        "property_id": prop.id,
    }
    payload.update(overrides)
    return payload


def test_units_fill_up_to_capacity(client, auth, seed, landlord):
    prop = seed.property(landlord, total_units=1)
    headers = auth(landlord)

    first = client.post("/api/units/", json=unit_payload(prop), headers=headers)
    assert first.status_code == 201
    assert first.json()["unit"]["property"]["id"] == prop.id

    second = client.post(
        "/api/units/", json=unit_payload(prop, unit_number="B2"), headers=headers
    )
    assert second.status_code == 409
    assert seed.reload(Property, prop.id).available_units == 1


def test_unit_created_occupied_reduces_availability(client, auth, seed, manager, landlord):
    prop = seed.property(landlord, total_units=2)
    res = client.post(
        "/api/units/", json=unit_payload(prop, status="occupied"), headers=auth(manager)
    )
    assert res.status_code == 201
    assert seed.reload(Property, prop.id).available_units == 1


def test_landlord_cannot_add_units_to_foreign_property(client, auth, seed, landlord, other_landlord):
    prop = seed.property(other_landlord)
    res = client.post("/api/units/", json=unit_payload(prop), headers=auth(landlord))
    assert res.status_code == 403


def test_tenant_cannot_create_units(client, auth, seed, landlord, tenant):
    prop = seed.property(landlord)
    assert client.post("/api/units/", json=unit_payload(prop), headers=auth(tenant)).status_code == 403


def test_list_filters_and_scoping(client, auth, seed, landlord, other_landlord):
    prop = seed.property(landlord, total_units=3)
    seed.unit(prop)
    seed.unit(prop, status=UnitStatus.OCCUPIED)
    foreign = seed.property(other_landlord)
    seed.unit(foreign)
    headers = auth(landlord)

    assert client.get("/api/units/", headers=headers).json()["total"] == 2
    vacant = client.get("/api/units/", params={"status": "vacant"}, headers=headers).json()
    assert vacant["total"] == 1

    res = client.get("/api/units/", params={"propertyId": foreign.id}, headers=headers)
    assert res.status_code == 403


def test_invalid_status_filter_is_422(client, auth, manager):
    res = client.get("/api/units/", params={"status": "haunted"}, headers=auth(manager))
    assert res.status_code == 422


def test_tenant_sees_only_the_unit_they_lease(client, auth, seed, landlord, tenant):
    prop = seed.property(landlord)
    leased = seed.unit(prop)
    other = seed.unit(prop)
    seed.occupied_lease(tenant, leased)
    headers = auth(tenant)

    assert client.get(f"/api/units/{leased.id}", headers=headers).status_code == 200
    assert client.get(f"/api/units/{other.id}", headers=headers).status_code == 403
    assert client.get("/api/units/", headers=headers).json()["total"] == 0


def test_status_update_moves_availability(client, auth, seed, landlord):
    prop = seed.property(landlord, total_units=2)
    unit = seed.unit(prop)

    res = client.put(
        f"/api/units/{unit.id}", json={"status": "maintenance"}, headers=auth(landlord)
    )
    assert res.status_code == 200
    assert res.json()["unit"]["status"] == "maintenance"
    assert seed.reload(Property, prop.id).available_units == 1


def test_null_for_required_field_is_rejected(client, auth, seed, landlord):
    prop = seed.property(landlord)
    unit = seed.unit(prop)
    res = client.put(f"/api/units/{unit.id}", json={"rent": None}, headers=auth(landlord))
    assert res.status_code == 422


def test_delete_blocked_by_active_lease(client, auth, seed, landlord, tenant):
    prop = seed.property(landlord)
    unit = seed.unit(prop)
    seed.occupied_lease(tenant, unit)

    assert client.delete(f"/api/units/{unit.id}", headers=auth(landlord)).status_code == 409
    assert seed.reload(Unit, unit.id) is not None


def test_delete_vacant_unit_recomputes(client, auth, seed, landlord):
    prop = seed.property(landlord, total_units=2)
    unit = seed.unit(prop, status=UnitStatus.MAINTENANCE)
    seed.unit(prop)

    assert client.delete(f"/api/units/{unit.id}", headers=auth(landlord)).status_code == 200
    assert seed.reload(Unit, unit.id) is None
    assert seed.reload(Property, prop.id).available_units == 2
