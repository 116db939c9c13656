from tests.factories import auth_headers, make_bin, make_product, make_user

WAREHOUSES = "/api/inventory/warehouses"


def test_create_composes_location(client, admin_user):
    response = client.post(
        WAREHOUSES,
        json={"name": "Calgary", "code": "CA-CGY", "address": "12 Rail Rd", "city": "Calgary",
              "state": "AB", "zip": "T2P 1J9"},
        headers=auth_headers(admin_user)
    )

    assert response.status_code == 201
    warehouse = response.json()["warehouse"]
    assert warehouse["location"] == "12 Rail Rd, Calgary, AB, T2P 1J9"
    assert warehouse["status"] == "active"
    assert warehouse["is_active"] is True


def test_create_requires_name(client, admin_user):
    response = client.post(WAREHOUSES, json={"code": "X"}, headers=auth_headers(admin_user))
    assert response.status_code == 400
    assert "name" in response.json()["detail"]


def test_duplicate_code_conflicts(client, warehouse_a, admin_user):
    response = client.post(WAREHOUSES, json={"name": "Other", "code": "a"}, headers=auth_headers(admin_user))
    assert response.status_code == 409


def test_unknown_admin_user_is_not_found(client, admin_user):
    response = client.post(WAREHOUSES, json={"name": "Other", "admin_user_id": 999}, headers=auth_headers(admin_user))
    assert response.status_code == 404


def test_list_includes_counts(client, db, warehouse_a, warehouse_b, admin_user):
    make_bin(db, warehouse_a, "A-01")
    make_bin(db, warehouse_a, "A-02")
    make_product(db, warehouse_a, "PK-001", quantity=1)

    response = client.get(WAREHOUSES, headers=auth_headers(admin_user))

    assert response.status_code == 200
    rows = {w["id"]: w for w in response.json()["warehouses"]}
    assert rows[warehouse_a.id]["bin_count"] == 2
    assert rows[warehouse_a.id]["product_count"] == 1
    assert rows[warehouse_b.id]["bin_count"] == 0


def test_get_one_and_missing(client, warehouse_a, admin_user):
    found = client.get(WAREHOUSES, params={"id": warehouse_a.id}, headers=auth_headers(admin_user))
    assert found.status_code == 200
    assert found.json()["warehouse"]["name"] == "Toronto Main"

    missing = client.get(WAREHOUSES, params={"id": 999}, headers=auth_headers(admin_user))
    assert missing.status_code == 404


def test_update_is_partial(client, db, admin_user):
    created = client.post(
        WAREHOUSES,
        json={"name": "Calgary", "address": "12 Rail Rd", "city": "Calgary", "phone": "555-0100"},
        headers=auth_headers(admin_user)
    ).json()["warehouse"]

    response = client.put(
        WAREHOUSES,
        json={"id": created["id"], "city": "Airdrie"},
        headers=auth_headers(admin_user)
    )

    assert response.status_code == 200
    warehouse = response.json()["warehouse"]
    assert warehouse["name"] == "Calgary"
    assert warehouse["phone"] == "555-0100"
    assert warehouse["location"] == "12 Rail Rd, Airdrie"


def test_delete_is_soft(client, warehouse_a, warehouse_b, admin_user):
    deleted = client.delete(WAREHOUSES, params={"id": warehouse_b.id}, headers=auth_headers(admin_user))
    assert deleted.status_code == 200
    assert deleted.json()["warehouse"]["status"] == "inactive"

    listed = client.get(WAREHOUSES, headers=auth_headers(admin_user)).json()["warehouses"]
    assert [w["id"] for w in listed] == [warehouse_a.id]

    still_there = client.get(WAREHOUSES, params={"id": warehouse_b.id}, headers=auth_headers(admin_user))
    assert still_there.json()["warehouse"]["is_active"] is False


def test_reactivate_through_update(client, warehouse_b, admin_user):
    client.delete(WAREHOUSES, params={"id": warehouse_b.id}, headers=auth_headers(admin_user))
    response = client.put(WAREHOUSES, json={"id": warehouse_b.id, "status": "active"}, headers=auth_headers(admin_user))
    assert response.json()["warehouse"]["status"] == "active"


def test_non_admin_is_forbidden(client, db):
    clerk = make_user(db, role="customer")
    assert client.get(WAREHOUSES, headers=auth_headers(clerk)).status_code == 403
