from app.shared.database.models import Product
from tests.factories import auth_headers, make_product, make_user, make_warehouse

MOVEMENTS = "/api/inventory/movements"


def _ship(client, user, product, source, destination, quantity=1):
    return client.post(
        MOVEMENTS,
        params={"action": "ship"},
        json={
            "product_ids": [product.id],
            "from_warehouse_id": source.id,
            "to_warehouse_id": destination.id,
            "quantity": quantity,
            "notes": "restock"
        },
        headers=auth_headers(user)
    )


def test_requires_token(client):
    assert client.get(MOVEMENTS).status_code == 401


def test_rejects_invalid_token(client):
    response = client.get(MOVEMENTS, headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_requires_admin_role(client, db):
    customer = make_user(db, role="customer")
    response = client.get(MOVEMENTS, headers=auth_headers(customer))
    assert response.status_code == 403


def test_invalid_action(client, admin_user):
    response = client.post(MOVEMENTS, params={"action": "teleport"}, json={}, headers=auth_headers(admin_user))
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid action"


def test_ship_missing_field_names_it(client, db, warehouse_a, admin_user):
    product = make_product(db, warehouse_a, "PK-001", quantity=5)
    response = client.post(
        MOVEMENTS,
        params={"action": "ship"},
        json={"product_ids": [product.id], "from_warehouse_id": warehouse_a.id},
        headers=auth_headers(admin_user)
    )
    assert response.status_code == 400
    assert "to_warehouse_id" in response.json()["detail"]


def test_ship_receive_flow(client, db, warehouse_a, warehouse_b, admin_user):
    product = make_product(db, warehouse_a, "BC-102", quantity=5, bin_number="B-05")

    shipped = _ship(client, admin_user, product, warehouse_a, warehouse_b, quantity=2)
    assert shipped.status_code == 201
    movement = shipped.json()["movements"][0]
    assert movement["status"] == "in_transit"
    assert movement["from_warehouse_name"] == "Toronto Main"
    assert movement["to_warehouse_name"] == "Ottawa Depot"
    assert movement["notes"] == "restock"

    received = client.post(
        MOVEMENTS,
        params={"action": "receive"},
        json={"movement_id": movement["id"], "bin_number": "C-10", "warehouse_id": warehouse_b.id},
        headers=auth_headers(admin_user)
    )
    assert received.status_code == 200
    body = received.json()
    assert body["movement"]["status"] == "completed"
    assert body["product"]["quantity"] == 2
    assert body["product"]["bin_number"] == "C-10"

    again = client.post(
        MOVEMENTS,
        params={"action": "receive"},
        json={"movement_id": movement["id"], "warehouse_id": warehouse_b.id},
        headers=auth_headers(admin_user)
    )
    assert again.status_code == 400
    assert "already received" in again.json()["detail"]

    db.expire_all()
    destination = db.query(Product).filter_by(part_number="BC-102", warehouse_id=warehouse_b.id).one()
    assert destination.quantity == 2


def test_receive_by_wrong_warehouse_is_forbidden(client, db, warehouse_a, warehouse_b, admin_user):
    warehouse_c = make_warehouse(db, name="Montreal")
    operator = make_user(db, warehouse=warehouse_c)
    product = make_product(db, warehouse_a, "PK-001", quantity=5)
    movement_id = _ship(client, admin_user, product, warehouse_a, warehouse_b).json()["movements"][0]["id"]

    response = client.post(
        MOVEMENTS,
        params={"action": "receive"},
        json={"movement_id": movement_id},
        headers=auth_headers(operator)
    )

    assert response.status_code == 403


def test_receive_by_barcode(client, db, warehouse_a, warehouse_b, admin_user):
    operator = make_user(db, warehouse=warehouse_b)
    product = make_product(db, warehouse_a, "PK-001", quantity=5, barcode="PK001")
    _ship(client, admin_user, product, warehouse_a, warehouse_b, quantity=3)

    response = client.post(
        MOVEMENTS,
        params={"action": "receive"},
        json={"barcode": "pk001", "bin_number": "R-1"},
        headers=auth_headers(operator)
    )

    assert response.status_code == 200
    assert response.json()["product"]["quantity"] == 3


def test_add_unexpected_and_assign_bin(client, db, warehouse_b, admin_user):
    added = client.post(
        MOVEMENTS,
        params={"action": "add-unexpected"},
        json={"part_number": "WALK-IN-1", "warehouse_id": warehouse_b.id, "quantity": 2},
        headers=auth_headers(admin_user)
    )
    assert added.status_code == 200
    product_id = added.json()["product"]["product_id"]
    assert added.json()["movement"]["movement_type"] == "unexpected"

    assigned = client.post(
        MOVEMENTS,
        params={"action": "assign-bin"},
        json={"product_id": product_id, "bin_number": "Z-9"},
        headers=auth_headers(admin_user)
    )
    assert assigned.status_code == 200
    assert assigned.json()["product"]["bin_number"] == "Z-9"
    assert assigned.json()["product"]["quantity"] == 2


def test_cancel_and_put_override(client, db, warehouse_a, warehouse_b, admin_user):
    product = make_product(db, warehouse_a, "PK-001", quantity=5)
    first = _ship(client, admin_user, product, warehouse_a, warehouse_b).json()["movements"][0]["id"]
    second = _ship(client, admin_user, product, warehouse_a, warehouse_b).json()["movements"][0]["id"]

    cancelled = client.post(
        MOVEMENTS,
        params={"action": "cancel"},
        json={"movement_id": first, "reason": "duplicate"},
        headers=auth_headers(admin_user)
    )
    assert cancelled.status_code == 200
    assert cancelled.json()["movement"]["status"] == "cancelled"

    forced = client.put(MOVEMENTS, json={"id": second, "status": "completed"}, headers=auth_headers(admin_user))
    assert forced.status_code == 400

    noted = client.put(MOVEMENTS, json={"id": second, "notes": "held at customs"}, headers=auth_headers(admin_user))
    assert noted.status_code == 200
    assert noted.json()["movement"]["notes"] == "held at customs"

    db.expire_all()
    assert db.get(Product, product.id).quantity == 4


def test_put_unknown_movement(client, admin_user):
    response = client.put(MOVEMENTS, json={"id": 999, "notes": "x"}, headers=auth_headers(admin_user))
    assert response.status_code == 404


def test_history_filters(client, db, warehouse_a, warehouse_b, admin_user):
    product = make_product(db, warehouse_a, "PK-001", quantity=5)
    _ship(client, admin_user, product, warehouse_a, warehouse_b)
    _ship(client, admin_user, product, warehouse_a, warehouse_b)

    response = client.get(
        MOVEMENTS,
        params={"status": "in_transit", "warehouse_id": warehouse_b.id, "limit": 1},
        headers=auth_headers(admin_user)
    )
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["movements"][0]["part_number"] == "PK-001"

    completed = client.get(MOVEMENTS, params={"status": "completed"}, headers=auth_headers(admin_user))
    assert completed.json()["total"] == 0


def test_history_rejects_unknown_status(client, admin_user):
    response = client.get(MOVEMENTS, params={"status": "lost"}, headers=auth_headers(admin_user))
    assert response.status_code == 400
