"""HTTP surface: request context headers, payload validation, error translation."""

from atelier.models import Store


def _headers(employee, store=None):
    headers = {"X-Employee-Id": str(employee.id)}
    if store:
        headers["X-Store"] = store
    return headers


def test_health(client, db_session):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.get_json()["checks"]["database"]["status"] == "healthy"


def test_employees_roundtrip(client, db_session):
    res = client.post("/api/employees", json={"name": "Hadeel"})
    assert res.status_code == 201

    res = client.get("/api/employees")
    assert [e["name"] for e in res.get_json()["employees"]] == ["Hadeel"]

    assert client.post("/api/employees", json={"name": ""}).status_code == 400
    assert client.post("/api/employees", json={}).status_code == 400


def test_unknown_store_is_400(client, db_session):
    assert client.get("/api/warehouse/inventory").status_code == 400
    assert client.get("/api/warehouse/products").status_code == 400
    assert client.get("/api/warehouse/dashboard").status_code == 400


def test_product_crud(client, db_session):
    payload = {
        "model_number": "ABY-777",
        "brand": "Lamsa",
        "product_type": "Abaya",
        "store_price_cents": 40000,
        "online_price_cents": 38000,
    }
    res = client.post("/api/products", json=payload)
    assert res.status_code == 201
    product_id = res.get_json()["product"]["id"]

    assert client.post("/api/products", json=payload).status_code == 409
    assert client.post("/api/products", json=dict(payload, model_number="X", store_price_cents=-5)).status_code == 400
    assert client.post("/api/products", json=dict(payload, model_number="Y", sku="nope")).status_code == 400

    res = client.put(f"/api/products/{product_id}", json={"brand": "Lamsa Couture"})
    assert res.status_code == 200
    assert res.get_json()["product"]["brand"] == "Lamsa Couture"

    res = client.post(f"/api/products/{product_id}/colors", json={"color_name": "Olive"})
    assert res.status_code == 201
    color_id = res.get_json()["color"]["id"]
    assert client.post(f"/api/products/{product_id}/colors", json={"color_name": "Olive"}).status_code == 200

    res = client.put("/api/inventory", json={
        "product_color_id": color_id, "store": "boutique", "size": 42, "quantity": 6,
    })
    assert res.status_code == 200
    assert res.get_json()["entry"]["size"] == "42"

    res = client.get(f"/api/products/{product_id}?store=boutique")
    colors = res.get_json()["product"]["colors"]
    assert colors[0]["inventory"][0]["quantity"] == 6

    res = client.get("/api/boutique/products?search=lamsa")
    assert [p["model_number"] for p in res.get_json()["products"]] == ["ABY-777"]
    assert client.get("/api/online/products").get_json()["products"] == []

    assert client.delete(f"/api/colors/{color_id}").status_code == 200
    assert client.delete(f"/api/products/{product_id}").status_code == 200
    assert client.get(f"/api/products/{product_id}").status_code == 404


def test_set_stock_validation(client, black):
    base = {"product_color_id": black.id, "store": "boutique", "size": "42", "quantity": 1}

    assert client.put("/api/inventory", json=dict(base, quantity=-1)).status_code == 400
    assert client.put("/api/inventory", json=dict(base, size="41")).status_code == 400
    assert client.put("/api/inventory", json=dict(base, store="warehouse")).status_code == 400
    assert client.put("/api/inventory", json=dict(base, product_color_id=9999)).status_code == 404


def test_availability(client, stock, black):
    stock(black, Store.ONLINE, "44", 2)

    res = client.get(f"/api/online/inventory/availability?product_color_id={black.id}&size=44&quantity=2")
    body = res.get_json()
    assert res.status_code == 200
    assert body["available"] is True
    assert body["quantity_on_hand"] == 2

    res = client.get(f"/api/boutique/inventory/availability?product_color_id={black.id}&size=44")
    assert res.get_json()["available"] is False

    assert client.get(f"/api/online/inventory/availability?product_color_id={black.id}").status_code == 400


def test_availability_echoes_ledger_size(client, stock, black):
    stock(black, Store.ONLINE, "44", 1)

    res = client.get(f"/api/online/inventory/availability?product_color_id={black.id}&size=44.0")
    body = res.get_json()
    assert res.status_code == 200
    assert body["size"] == "44"
    assert body["quantity_on_hand"] == 1

    res = client.get(f"/api/online/inventory/availability?product_color_id={black.id}&size=47")
    assert res.status_code == 400


def test_sale_flow(client, employee, stock, on_hand, black):
    stock(black, Store.BOUTIQUE, "42", 10)

    res = client.post(
        "/api/boutique/sales",
        json={"product_color_id": black.id, "size": "42", "quantity": 3, "payment_method": "card",
              "unit_price_cents": 10000},
        headers=_headers(employee),
    )
    assert res.status_code == 201
    sale = res.get_json()["sale"]
    assert sale["total_cents"] == 31500
    assert sale["employee_name"] == "Heba"
    assert on_hand(black, Store.BOUTIQUE, "42") == 7

    assert client.get(f"/api/sales/{sale['sale_id']}").status_code == 200
    assert client.get("/api/sales/S-B-424242").status_code == 404
    assert len(client.get("/api/boutique/sales").get_json()["sales"]) == 1


def test_sale_errors(client, employee, stock, black):
    stock(black, Store.BOUTIQUE, "42", 1)
    body = {"product_color_id": black.id, "size": "42", "quantity": 2, "payment_method": "cash"}

    res = client.post("/api/boutique/sales", json=body, headers=_headers(employee))
    assert res.status_code == 400
    assert res.get_json()["error"] == "Insufficient inventory"
    assert res.get_json()["details"]["on_hand"] == 1

    assert client.post("/api/boutique/sales", json=body).status_code == 400
    assert client.post("/api/boutique/sales", json=body, headers={"X-Employee-Id": "999"}).status_code == 400
    assert client.post(
        "/api/boutique/sales", json=dict(body, quantity=1, payment_method="bank_transfer"), headers=_headers(employee),
    ).status_code == 400
    assert client.post(
        "/api/boutique/sales", json=dict(body, quantity=1.5), headers=_headers(employee),
    ).status_code == 400
    assert client.post(
        "/api/boutique/sales", json=dict(body, product_color_id=9999, quantity=1), headers=_headers(employee),
    ).status_code == 404


def test_order_flow(client, employee, stock, on_hand, black):
    stock(black, Store.ONLINE, "42", 2)
    body = {
        "product_color_id": black.id,
        "size": "42",
        "quantity": 1,
        "payment_method": "cash_on_delivery",
        "customer_name": "Mariam",
        "customer_phone": "0509999999",
        "customer_emirate": "Abu Dhabi",
        "customer_address": "Khalifa City",
    }

    res = client.post("/api/orders", json=body, headers=_headers(employee))
    assert res.status_code == 201
    order_id = res.get_json()["order"]["order_id"]
    assert on_hand(black, Store.ONLINE, "42") == 1

    assert client.post("/api/orders", json=dict(body, customer_emirate="Doha"),
                       headers=_headers(employee)).status_code == 400
    assert client.post("/api/orders", json={k: v for k, v in body.items() if k != "customer_address"},
                       headers=_headers(employee)).status_code == 400

    res = client.put(f"/api/orders/{order_id}/status", json={"status": "in_delivery"})
    assert res.status_code == 200
    assert res.get_json()["order"]["status"] == "in_delivery"
    assert client.put(f"/api/orders/{order_id}/status", json={"status": "pending"}).status_code == 400
    assert client.put("/api/orders/ORD-O-999999/status", json={"status": "cancelled"}).status_code == 404

    assert [o["order_id"] for o in client.get("/api/orders?status=in_delivery").get_json()["orders"]] == [order_id]
    assert client.get("/api/orders?status=lost").status_code == 400
    assert client.get(f"/api/orders/{order_id}").status_code == 200


def test_return_flow(client, employee, stock, on_hand, black, navy):
    stock(navy, Store.BOUTIQUE, "42", 1)

    res = client.post(
        "/api/boutique/returns",
        json={
            "return_type": "exchange_color",
            "original_product_color_id": black.id,
            "original_size": "42",
            "original_quantity": 1,
            "new_product_color_id": navy.id,
            "new_size": "42",
            "new_quantity": 1,
            "reason": "Prefers navy",
        },
        headers=_headers(employee),
    )
    assert res.status_code == 201
    assert res.get_json()["return"]["price_difference_cents"] == 0
    assert on_hand(black, Store.BOUTIQUE, "42") == 1
    assert on_hand(navy, Store.BOUTIQUE, "42") == 0

    res = client.post(
        "/api/boutique/returns",
        json={
            "return_type": "exchange_color",
            "original_product_color_id": black.id,
            "original_size": "42",
            "original_quantity": 1,
            "new_product_color_id": navy.id,
            "new_size": "42",
            "new_quantity": 1,
        },
        headers=_headers(employee),
    )
    assert res.status_code == 400
    assert res.get_json()["error"] == "Insufficient inventory"
    assert on_hand(black, Store.BOUTIQUE, "42") == 1

    assert len(client.get("/api/boutique/returns").get_json()["returns"]) == 1


def test_dashboard(client, stock, black):
    stock(black, Store.BOUTIQUE, "42", 3)

    res = client.get("/api/boutique/dashboard")
    body = res.get_json()
    assert res.status_code == 200
    assert body["metrics"]["total_products"] == 1
    assert body["metrics"]["low_stock_items"] == 1
    assert body["top_products"] == []


def test_return_accepts_numeric_strings(client, employee, on_hand, black):
    res = client.post(
        "/api/boutique/returns",
        json={
            "return_type": "refund",
            "original_product_color_id": str(black.id),
            "original_size": "42",
            "original_quantity": "2",
        },
        headers=_headers(employee),
    )
    assert res.status_code == 201
    assert res.get_json()["return"]["original_quantity"] == 2
    assert on_hand(black, Store.BOUTIQUE, "42") == 2
