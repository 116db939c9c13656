from tests.factories import auth_headers, make_bin, make_product, make_warehouse

BINS = "/api/inventory/bins"
CONTENTS = "/api/inventory/bin-contents"


def test_create_uses_default_capacity(client, warehouse_a, admin_user):
    response = client.post(BINS, json={"warehouse_id": warehouse_a.id, "bin_number": "A-01"},
                           headers=auth_headers(admin_user))

    assert response.status_code == 201
    bin_ = response.json()["bin"]
    assert bin_["capacity"] == 100
    assert bin_["status"] == "active"
    assert bin_["warehouse_name"] == "Toronto Main"


def test_duplicate_bin_conflicts(client, db, warehouse_a, warehouse_b, admin_user):
    make_bin(db, warehouse_a, "A-01")

    duplicate = client.post(BINS, json={"warehouse_id": warehouse_a.id, "bin_number": "A-01"},
                            headers=auth_headers(admin_user))
    other_warehouse = client.post(BINS, json={"warehouse_id": warehouse_b.id, "bin_number": "A-01"},
                                  headers=auth_headers(admin_user))

    assert duplicate.status_code == 409
    assert other_warehouse.status_code == 201


def test_bin_in_unknown_or_inactive_warehouse(client, db, admin_user):
    closed = make_warehouse(db, name="Closed", status="inactive")

    unknown = client.post(BINS, json={"warehouse_id": 999, "bin_number": "A-01"}, headers=auth_headers(admin_user))
    inactive = client.post(BINS, json={"warehouse_id": closed.id, "bin_number": "A-01"}, headers=auth_headers(admin_user))

    assert unknown.status_code == 404
    assert inactive.status_code == 404


def test_missing_bin_number_is_named(client, warehouse_a, admin_user):
    response = client.post(BINS, json={"warehouse_id": warehouse_a.id}, headers=auth_headers(admin_user))
    assert response.status_code == 400
    assert "bin_number" in response.json()["detail"]


def test_list_by_warehouse_with_product_count(client, db, warehouse_a, warehouse_b, admin_user):
    make_bin(db, warehouse_a, "A-01")
    make_bin(db, warehouse_a, "A-02")
    make_bin(db, warehouse_a, "A-03", status="inactive")
    make_bin(db, warehouse_b, "B-01")
    make_product(db, warehouse_a, "PK-001", quantity=3, bin_number="A-01")
    make_product(db, warehouse_a, "PK-002", quantity=1, bin_number="A-01")

    response = client.get(BINS, params={"warehouse_id": warehouse_a.id}, headers=auth_headers(admin_user))

    assert response.status_code == 200
    bins = {b["bin_number"]: b for b in response.json()["bins"]}
    assert sorted(bins) == ["A-01", "A-02"]
    assert bins["A-01"]["product_count"] == 2
    assert bins["A-02"]["product_count"] == 0


def test_list_all_carries_warehouse_name(client, db, warehouse_a, warehouse_b, admin_user):
    make_bin(db, warehouse_a, "A-01")
    make_bin(db, warehouse_b, "B-01")

    bins = client.get(BINS, headers=auth_headers(admin_user)).json()["bins"]

    assert [(b["warehouse_name"], b["bin_number"]) for b in bins] == [
        ("Ottawa Depot", "B-01"),
        ("Toronto Main", "A-01"),
    ]


def test_update_and_rename_rules(client, db, warehouse_a, admin_user):
    empty = make_bin(db, warehouse_a, "A-01")
    busy = make_bin(db, warehouse_a, "A-02")
    make_product(db, warehouse_a, "PK-001", quantity=1, bin_number="A-02")

    renamed = client.put(BINS, params={"id": empty.id}, json={"bin_number": "A-10", "capacity": 40},
                         headers=auth_headers(admin_user))
    assert renamed.status_code == 200
    assert renamed.json()["bin"]["bin_number"] == "A-10"
    assert renamed.json()["bin"]["capacity"] == 40

    clash = client.put(BINS, params={"id": busy.id}, json={"bin_number": "A-10"}, headers=auth_headers(admin_user))
    assert clash.status_code == 409

    occupied = client.put(BINS, params={"id": busy.id}, json={"bin_number": "A-20"}, headers=auth_headers(admin_user))
    assert occupied.status_code == 400

    described = client.put(BINS, params={"id": busy.id}, json={"description": "Top shelf"},
                           headers=auth_headers(admin_user))
    assert described.status_code == 200
    assert described.json()["bin"]["description"] == "Top shelf"


def test_delete_is_soft(client, db, warehouse_a, admin_user):
    bin_ = make_bin(db, warehouse_a, "A-01")

    deleted = client.delete(BINS, params={"id": bin_.id}, headers=auth_headers(admin_user))
    assert deleted.status_code == 200
    assert deleted.json()["bin"]["status"] == "inactive"

    listed = client.get(BINS, params={"warehouse_id": warehouse_a.id}, headers=auth_headers(admin_user))
    assert listed.json()["bins"] == []

    detail = client.get(BINS, params={"id": bin_.id}, headers=auth_headers(admin_user))
    assert detail.json()["bin"]["is_active"] is False


def test_bin_contents_groups_products(client, db, warehouse_a, admin_user):
    make_product(db, warehouse_a, "PK-001", quantity=3, bin_number="A-01", name="Brake Pad")
    make_product(db, warehouse_a, "PK-002", quantity=2, bin_number="A-01", name="Rotor")
    make_product(db, warehouse_a, "PK-003", quantity=7, name="Filter")

    response = client.get(CONTENTS, params={"warehouse_id": warehouse_a.id}, headers=auth_headers(admin_user))

    assert response.status_code == 200
    body = response.json()
    assert body["warehouse"]["name"] == "Toronto Main"
    assert body["total_bins"] == 2
    rows = {row["bin_number"]: row for row in body["bins"]}
    assert rows["A-01"]["part_numbers"] == "PK-001, PK-002"
    assert rows["A-01"]["product_names"] == "Brake Pad, Rotor"
    assert rows["A-01"]["unique_products"] == 2
    assert rows["A-01"]["total_quantity"] == 5
    assert rows["UNASSIGNED"]["total_quantity"] == 7


def test_bin_contents_search(client, db, warehouse_a, admin_user):
    make_product(db, warehouse_a, "PK-001", quantity=3, bin_number="A-01", name="Brake Pad")
    make_product(db, warehouse_a, "PK-002", quantity=2, bin_number="B-01", name="Rotor")

    response = client.get(CONTENTS, params={"warehouse_id": warehouse_a.id, "search": "rotor"},
                          headers=auth_headers(admin_user))

    assert [row["bin_number"] for row in response.json()["bins"]] == ["B-01"]


def test_bin_contents_requires_warehouse(client, admin_user):
    response = client.get(CONTENTS, headers=auth_headers(admin_user))
    assert response.status_code == 400
    assert "warehouse_id" in response.json()["detail"]
