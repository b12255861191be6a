def test_adding_to_cart_needs_session(client, make_product):
    product_id = make_product()
    response = client.post("/api/cart/items", json={"product_id": product_id})
    assert response.status_code == 401
    assert response.get_json()["error"] == "Debes iniciar sesión para agregar al carrito"


def test_cart_count_without_session_is_zero(client):
    assert client.get("/api/cart/count").get_json() == {"count": 0}


def test_cart_unit_price_includes_size(client, customer, make_product, make_size):
    _, headers = customer
    product_id = make_product(price=65.0)
    size_id = make_size(additional_price=25.0)

    response = client.post(
        "/api/cart/items", json={"product_id": product_id, "size_id": size_id, "quantity": 2}, headers=headers,
    )
    assert response.status_code == 201
    item = response.get_json()
    assert item["unit_price"] == 90.0
    assert item["subtotal"] == 180.0

    client.post("/api/cart/items", json={"product_id": product_id, "size_id": size_id}, headers=headers)
    cart = client.get("/api/cart", headers=headers).get_json()
    assert len(cart["items"]) == 1
    assert cart["total_items"] == 3
    assert cart["total"] == 270.0


def test_cart_uses_offer_price(client, customer, make_product):
    _, headers = customer
    product_id = make_product(price=65.0, is_offer=True, offer_price=50.0)
    item = client.post("/api/cart/items", json={"product_id": product_id}, headers=headers).get_json()
    assert item["unit_price"] == 50.0


def test_cart_rejects_zero_quantity(client, customer, make_product):
    _, headers = customer
    response = client.post(
        "/api/cart/items", json={"product_id": make_product(), "quantity": 0}, headers=headers,
    )
    assert response.status_code == 400


def test_updating_quantity_to_zero_removes_item(client, customer, make_product):
    _, headers = customer
    item = client.post("/api/cart/items", json={"product_id": make_product()}, headers=headers).get_json()

    response = client.put(f"/api/cart/items/{item['id']}", json={"quantity": 0}, headers=headers)
    assert response.get_json()["message"] == "Producto eliminado del carrito"
    assert client.get("/api/cart/count", headers=headers).get_json() == {"count": 0}


def test_empty_order_is_rejected(client, customer):
    _, headers = customer
    response = client.post("/api/orders", json={}, headers=headers)
    assert response.status_code == 400
    assert response.get_json()["error"] == "El pedido debe tener al menos un producto"


def test_order_from_cart_empties_cart(client, customer, make_product):
    user_id, headers = customer
    product_id = make_product(price=65.0)
    client.post("/api/cart/items", json={"product_id": product_id, "quantity": 2}, headers=headers)

    response = client.post("/api/orders", json={"payment_method": "card"}, headers=headers)
    assert response.status_code == 201
    order = response.get_json()
    assert order["customer_id"] == user_id
    assert order["total_amount"] == 130.0
    assert order["status"] == "pending"
    assert order["payment_status"] == "pending"
    assert len(order["items"]) == 1
    assert client.get("/api/cart/count", headers=headers).get_json() == {"count": 0}


def test_order_with_explicit_items_prices_missing_unit_price(client, customer, make_product, make_size):
    _, headers = customer
    product_id = make_product(price=65.0)
    size_id = make_size(additional_price=25.0)

    payload = {"items": [{"product_id": product_id, "size_id": size_id, "quantity": 1}]}
    order = client.post("/api/orders", json=payload, headers=headers).get_json()
    assert order["total_amount"] == 90.0


def test_status_change_notifies_customer(client, customer, admin_headers, make_product):
    _, headers = customer
    payload = {"items": [{"product_id": make_product(), "quantity": 2, "unit_price": 65}]}
    order = client.post("/api/orders", json=payload, headers=headers).get_json()

    response = client.put(f"/api/orders/{order['id']}/status", json={"status": "confirmed"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()["status"] == "confirmed"

    notifications = client.get("/api/notifications", headers=headers).get_json()
    assert len(notifications) == 1
    assert notifications[0]["type"] == "order_confirmed"
    assert notifications[0]["related_id"] == order["id"]
    assert "Torta de Chocolate" in notifications[0]["message"]
    assert "Total: S/ 130.00" in notifications[0]["message"]


def test_invalid_status_is_rejected(client, customer, admin_headers, make_product):
    _, headers = customer
    payload = {"items": [{"product_id": make_product(), "quantity": 1}]}
    order = client.post("/api/orders", json=payload, headers=headers).get_json()

    response = client.put(f"/api/orders/{order['id']}/status", json={"status": "lost"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()["error"] == "Estado inválido: lost"


def test_customer_cannot_see_other_orders(client, make_user, auth_header, make_product):
    owner = auth_header(make_user())
    other = auth_header(make_user())
    payload = {"items": [{"product_id": make_product(), "quantity": 1}]}
    order = client.post("/api/orders", json=payload, headers=owner).get_json()

    assert client.get(f"/api/orders/{order['id']}", headers=owner).status_code == 200
    assert client.get(f"/api/orders/{order['id']}", headers=other).status_code == 404
    assert client.get("/api/orders", headers=other).status_code == 403
