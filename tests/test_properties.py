# tests/test_properties.py
from models.enums import UnitStatus
from models.models import Property, Unit


def property_payload(**overrides):
    payload = {
        "name": "Kilimani Heights",
        "address": "Argwings Kodhek Rd, Nairobi",
        "type": "residential",
        "total_units": 4,
    }
    payload.update(overrides)
    return payload


def test_landlord_creates_property_for_themself(client, auth, landlord):
    res = client.post("/api/properties/", json=property_payload(), headers=auth(landlord))
    assert res.status_code == 201
    prop = res.json()["property"]
    assert prop["landlord_id"] == landlord.id
    assert prop["available_units"] == 4
    assert prop["units"] == []


def test_admin_must_name_landlord(client, auth, admin, landlord, tenant):
    missing = client.post("/api/properties/", json=property_payload(), headers=auth(admin))
    assert missing.status_code == 422

    not_landlord = client.post(
        "/api/properties/",
        json=property_payload(landlord_id=tenant.id),
        headers=auth(admin),
    )
    assert not_landlord.status_code == 404

    ok = client.post(
        "/api/properties/",
        json=property_payload(landlord_id=landlord.id),
        headers=auth(admin),
    )
    assert ok.status_code == 201
    assert ok.json()["property"]["landlord_id"] == landlord.id


def test_manager_and_tenant_cannot_create(client, auth, manager, tenant):
    for user in (manager, tenant):
        res = client.post("/api/properties/", json=property_payload(), headers=auth(user))
        assert res.status_code == 403


def test_landlord_lists_only_own_properties(client, auth, seed, landlord, other_landlord):
    mine = seed.property(landlord)
    seed.property(other_landlord)

    body = client.get("/api/properties/", headers=auth(landlord)).json()
    assert body["total"] == 1
    assert [p["id"] for p in body["items"]] == [mine.id]


def test_landlord_without_properties_sees_empty_page(client, auth, seed, landlord, other_landlord):
    seed.property(other_landlord)
    body = client.get("/api/properties/", headers=auth(landlord)).json()
    assert body == {"items": [], "total": 0, "page": 1, "per_page": 20}


def test_staff_see_all_properties(client, auth, seed, manager, landlord, other_landlord):
    seed.property(landlord)
    seed.property(other_landlord)
    assert client.get("/api/properties/", headers=auth(manager)).json()["total"] == 2


def test_tenant_gets_empty_list_and_forbidden_detail(client, auth, seed, landlord, tenant):
    prop = seed.property(landlord)
    assert client.get("/api/properties/", headers=auth(tenant)).json()["total"] == 0
    assert client.get(f"/api/properties/{prop.id}", headers=auth(tenant)).status_code == 403


def test_other_landlord_cannot_view_or_update(client, auth, seed, landlord, other_landlord):
    prop = seed.property(landlord)
    headers = auth(other_landlord)
    assert client.get(f"/api/properties/{prop.id}", headers=headers).status_code == 403
    res = client.put(f"/api/properties/{prop.id}", json={"name": "Mine now"}, headers=headers)
    assert res.status_code == 403


def test_missing_property_is_404(client, auth, admin):
    res = client.get("/api/properties/999", headers=auth(admin))
    assert res.status_code == 404
    assert res.json()["success"] is False


def test_shrinking_below_unit_count_conflicts(client, auth, seed, landlord):
    prop = seed.property(landlord, total_units=3)
    seed.unit(prop)
    seed.unit(prop)

    res = client.put(
        f"/api/properties/{prop.id}", json={"total_units": 1}, headers=auth(landlord)
    )
    assert res.status_code == 409
    assert seed.reload(Property, prop.id).total_units == 3


def test_growing_total_recomputes_available(client, auth, seed, landlord, tenant):
    prop = seed.property(landlord, total_units=2)
    unit = seed.unit(prop)
    seed.occupied_lease(tenant, unit)

    res = client.put(
        f"/api/properties/{prop.id}", json={"total_units": 5}, headers=auth(landlord)
    )
    assert res.status_code == 200
    assert res.json()["property"]["available_units"] == 4


def test_only_admin_reassigns_landlord(client, auth, seed, admin, landlord, other_landlord):
    prop = seed.property(landlord)

    denied = client.put(
        f"/api/properties/{prop.id}",
        json={"landlord_id": other_landlord.id},
        headers=auth(landlord),
    )
    assert denied.status_code == 403

    ok = client.put(
        f"/api/properties/{prop.id}",
        json={"landlord_id": other_landlord.id},
        headers=auth(admin),
    )
    assert ok.status_code == 200
    assert ok.json()["property"]["landlord_id"] == other_landlord.id


def test_empty_update_is_rejected(client, auth, seed, landlord):
    prop = seed.property(landlord)
    res = client.put(f"/api/properties/{prop.id}", json={}, headers=auth(landlord))
    assert res.status_code == 422


def test_delete_blocked_by_active_lease(client, auth, seed, landlord, tenant):
    prop = seed.property(landlord)
    unit = seed.unit(prop)
    seed.occupied_lease(tenant, unit)

    res = client.delete(f"/api/properties/{prop.id}", headers=auth(landlord))
    assert res.status_code == 409
    assert seed.reload(Property, prop.id) is not None


def test_delete_removes_units(client, auth, seed, landlord):
    prop = seed.property(landlord)
    prop_id = prop.id
    unit_id = seed.unit(prop, status=UnitStatus.MAINTENANCE).id

    res = client.delete(f"/api/properties/{prop_id}", headers=auth(landlord))
    assert res.status_code == 200
    assert seed.reload(Property, prop_id) is None
    assert seed.reload(Unit, unit_id) is None


def test_landlord_directory_is_admin_only(client, auth, admin, landlord, other_landlord):
    res = client.get("/api/properties/landlords/list", headers=auth(admin))
    assert res.status_code == 200
    assert {u["id"] for u in res.json()} == {landlord.id, other_landlord.id}

    assert (
        client.get("/api/properties/landlords/list", headers=auth(landlord)).status_code
        == 403
    )
