# tests/test_maintenance.py
from models.enums import MaintenanceStatus, UserRole
from models.models import Maintenance


def request_payload(unit, **overrides):
    payload = {
        "title": "Broken window",
        "description": "Bedroom window latch snapped",
        "priority": "high",
        "unit_id": unit.id,
    }
    payload.update(overrides)
    return payload


def test_tenant_with_lease_opens_request(client, auth, seed, landlord, tenant):
    prop = seed.property(landlord)
    unit = seed.unit(prop)
    seed.occupied_lease(tenant, unit)

    res = client.post("/api/maintenance/", json=request_payload(unit), headers=auth(tenant))
    assert res.status_code == 201
    body = res.json()["maintenance"]
    assert body["status"] == "pending"
    assert body["created_by"] == tenant.id
    assert body["assigned_to"] == landlord.id


def test_tenant_without_lease_is_forbidden(client, auth, seed, landlord, tenant):
    prop = seed.property(landlord)
    unit = seed.unit(prop)
    res = client.post("/api/maintenance/", json=request_payload(unit), headers=auth(tenant))
    assert res.status_code == 403


def test_foreign_landlord_is_forbidden(client, auth, seed, landlord, other_landlord):
    unit = seed.unit(seed.property(landlord))
    res = client.post(
        "/api/maintenance/", json=request_payload(unit), headers=auth(other_landlord)
    )
    assert res.status_code == 403


def test_unknown_unit_is_404(client, auth, manager):
    res = client.post(
        "/api/maintenance/",
        json={"title": "x", "description": "y", "unit_id": 999},
        headers=auth(manager),
    )
    assert res.status_code == 404


def test_list_scoping(client, auth, seed, landlord, other_landlord, tenant):
    unit = seed.unit(seed.property(landlord))
    seed.occupied_lease(tenant, unit)
    mine = seed.maintenance(tenant, unit)
    seed.maintenance(landlord, unit)
    seed.maintenance(other_landlord, seed.unit(seed.property(other_landlord)))

    tenant_view = client.get("/api/maintenance/", headers=auth(tenant)).json()
    assert [r["id"] for r in tenant_view["items"]] == [mine.id]

    landlord_view = client.get("/api/maintenance/", headers=auth(landlord)).json()
    assert landlord_view["total"] == 2

    by_unit = client.get(
        "/api/maintenance/", params={"unitId": unit.id}, headers=auth(other_landlord)
    ).json()
    assert by_unit["total"] == 0


def test_tenant_cannot_change_status(client, auth, seed, landlord, tenant):
    unit = seed.unit(seed.property(landlord))
    seed.occupied_lease(tenant, unit)
    request = seed.maintenance(tenant, unit)

    res = client.put(
        f"/api/maintenance/{request.id}", json={"status": "completed"}, headers=auth(tenant)
    )
    assert res.status_code == 403
    assert seed.reload(Maintenance, request.id).status == MaintenanceStatus.PENDING


def test_tenant_cannot_reassign(client, auth, seed, landlord, tenant):
    unit = seed.unit(seed.property(landlord))
    request = seed.maintenance(tenant, unit)
    res = client.put(
        f"/api/maintenance/{request.id}",
        json={"assigned_to": tenant.id},
        headers=auth(tenant),
    )
    assert res.status_code == 403


def test_tenant_edits_own_notes(client, auth, seed, landlord, tenant):
    unit = seed.unit(seed.property(landlord))
    request = seed.maintenance(tenant, unit)
    res = client.put(
        f"/api/maintenance/{request.id}",
        json={"notes": "Available after 5pm"},
        headers=auth(tenant),
    )
    assert res.status_code == 200
    assert res.json()["maintenance"]["notes"] == "Available after 5pm"


def test_completion_stamps_and_reopening_clears(client, auth, seed, landlord, tenant):
    unit = seed.unit(seed.property(landlord))
    request = seed.maintenance(tenant, unit)
    headers = auth(landlord)

    done = client.put(
        f"/api/maintenance/{request.id}", json={"status": "completed"}, headers=headers
    )
    assert done.status_code == 200
    assert done.json()["maintenance"]["completed_at"] is not None

    reopened = client.put(
        f"/api/maintenance/{request.id}", json={"status": "in-progress"}, headers=headers
    )
    assert reopened.json()["maintenance"]["completed_at"] is None


def test_assigning_unknown_user_is_404(client, auth, seed, manager, landlord, tenant):
    request = seed.maintenance(tenant, seed.unit(seed.property(landlord)))
    res = client.put(
        f"/api/maintenance/{request.id}", json={"assigned_to": 999}, headers=auth(manager)
    )
    assert res.status_code == 404


def test_tenant_deletes_only_pending_requests(client, auth, seed, landlord, tenant):
    unit = seed.unit(seed.property(landlord))
    started = seed.maintenance(tenant, unit, status=MaintenanceStatus.IN_PROGRESS)
    pending = seed.maintenance(tenant, unit)
    headers = auth(tenant)

    assert client.delete(f"/api/maintenance/{started.id}", headers=headers).status_code == 403
    assert client.delete(f"/api/maintenance/{pending.id}", headers=headers).status_code == 200
    assert seed.reload(Maintenance, pending.id) is None


def test_tenant_cannot_view_another_tenants_request(client, auth, seed, landlord, tenant):
    unit = seed.unit(seed.property(landlord))
    other = seed.maintenance(seed.user(UserRole.TENANT), unit)
    assert client.get(f"/api/maintenance/{other.id}", headers=auth(tenant)).status_code == 403
