FUTURE = "2099-06-15"


def reserve(client, headers, product_id, **fields):
    payload = {"product_id": product_id, "reservation_date": FUTURE, "reservation_time": "10:00", **fields}
    return client.post("/api/reservations", json=payload, headers=headers)


def test_past_dates_are_rejected(client, customer, make_product):
    _, headers = customer
    response = reserve(client, headers, make_product(), reservation_date="2020-01-01")
    assert response.status_code == 400
    assert response.get_json()["error"] == "No se pueden hacer reservaciones en fechas pasadas"


def test_date_and_time_are_required(client, customer, make_product):
    _, headers = customer
    response = reserve(client, headers, make_product(), reservation_time="")
    assert response.get_json()["error"] == "La fecha y hora de la reservación son requeridas"


def test_unknown_product(client, customer):
    _, headers = customer
    response = reserve(client, headers, 999)
    assert response.status_code == 404
    assert response.get_json()["error"] == "Error al obtener información del producto"


def test_reservation_total_uses_size(client, customer, make_product, make_size):
    _, headers = customer
    response = reserve(
        client, headers, make_product(price=65.0), size_id=make_size(additional_price=25.0),
        quantity=2, customer_phone="987654321",
    )
    assert response.status_code == 201
    reservation = response.get_json()
    assert reservation["total_amount"] == 180.0
    assert reservation["status"] == "pending"

    me = client.get("/api/users/me", headers=headers).get_json()
    assert me["phone"] == "987654321"


def test_multiple_reservation_forms_one_group(client, customer, admin_headers, make_product):
    user_id, headers = customer
    cake = make_product(name="Torta de Chocolate", price=65.0)
    pie = make_product(name="Pie de Limón", price=40.0)

    payload = {
        "reservation_date": FUTURE,
        "reservation_time": "10:00",
        "special_requests": "Sin nueces",
        "items": [
            {"product_id": cake, "quantity": 1, "size_name": "Grande", "total_price": 115},
            {"product_id": pie, "quantity": 2},
        ],
    }
    response = client.post("/api/reservations/multiple", json=payload, headers=headers)
    assert response.status_code == 201
    created = response.get_json()
    assert created[0]["special_requests"] == "Sin nueces\n[Tamaño: Grande]"
    assert created[0]["total_amount"] == 115.0
    assert created[1]["total_amount"] == 80.0

    groups = client.get("/api/reservations", headers=admin_headers).get_json()
    assert len(groups) == 1
    assert groups[0]["customer_id"] == user_id
    assert len(groups[0]["items"]) == 2
    assert groups[0]["total_amount_combined"] == 195.0

    mine = client.get("/api/reservations/mine", headers=headers).get_json()
    assert [g["id"] for g in mine] == [created[0]["id"]]


def test_status_change_updates_group_and_notifies_once(client, customer, admin_headers, make_product):
    _, headers = customer
    cake = make_product(name="Torta de Chocolate")
    pie = make_product(name="Pie de Limón")
    first = reserve(client, headers, cake).get_json()
    reserve(client, headers, pie)

    response = client.put(
        f"/api/reservations/{first['id']}/status", json={"status": "confirmed"}, headers=admin_headers,
    )
    assert response.status_code == 200
    assert [r["status"] for r in response.get_json()] == ["confirmed", "confirmed"]

    notifications = client.get("/api/notifications", headers=headers).get_json()
    assert len(notifications) == 1
    assert notifications[0]["type"] == "reservation_confirmed"
    assert notifications[0]["message"] == (
        "Tu reservación de Torta de Chocolate, Pie de Limón para el 2099-06-15 a las 10:00 "
        "ha sido confirmada. ¡Te esperamos!"
    )


def test_status_of_missing_reservation(client, admin_headers):
    response = client.put("/api/reservations/999/status", json={"status": "confirmed"}, headers=admin_headers)
    assert response.status_code == 404
    assert response.get_json()["error"] == "No se pudo encontrar la reservación"


def test_available_slots(client, customer, make_product):
    _, headers = customer
    product_id = make_product()

    slots = client.get(f"/api/reservations/available-slots?fecha={FUTURE}&product_id={product_id}").get_json()
    assert len(slots) == 24
    assert slots[0] == "09:00"
    assert slots[-1] == "20:30"

    reserve(client, headers, product_id)
    slots = client.get(f"/api/reservations/available-slots?fecha={FUTURE}&product_id={product_id}").get_json()
    assert "10:00" not in slots
    assert len(slots) == 23

    check = client.get(f"/api/reservations/check?fecha={FUTURE}&hora=10:00&product_id={product_id}")
    assert check.get_json() == {"disponible": False}


def test_cancelled_reservation_frees_slot(client, customer, make_product):
    _, headers = customer
    product_id = make_product()
    reservation = reserve(client, headers, product_id).get_json()

    client.post(f"/api/reservations/{reservation['id']}/cancel", headers=headers)
    check = client.get(f"/api/reservations/check?fecha={FUTURE}&hora=10:00&product_id={product_id}")
    assert check.get_json() == {"disponible": True}


def test_delete_removes_whole_group(client, customer, admin_headers, make_product):
    _, headers = customer
    first = reserve(client, headers, make_product(name="Torta")).get_json()
    reserve(client, headers, make_product(name="Pie"))

    response = client.delete(f"/api/reservations/{first['id']}", headers=admin_headers)
    assert response.get_json() == {"message": "Reservación eliminada", "deleted": 2}
    assert client.get("/api/reservations/stats", headers=admin_headers).get_json()["total_reservaciones"] == 0


def test_customers_only_see_own_reservations(client, make_user, auth_header, make_product):
    owner = auth_header(make_user())
    other = auth_header(make_user())
    reservation = reserve(client, owner, make_product()).get_json()

    assert client.get(f"/api/reservations/{reservation['id']}", headers=other).status_code == 404
    assert client.get("/api/reservations", headers=other).status_code == 403


def test_multiple_reservation_rejects_bad_quantity_and_price(client, customer, make_product):
    _, headers = customer
    product_id = make_product()
    payload = {"reservation_date": FUTURE, "reservation_time": "10:00"}

    response = client.post(
        "/api/reservations/multiple", json={**payload, "items": [{"product_id": product_id, "quantity": -3}]},
        headers=headers,
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "La cantidad debe ser mayor a 0"

    response = client.post(
        "/api/reservations/multiple",
        json={**payload, "items": [{"product_id": product_id, "quantity": 1, "total_price": -10}]},
        headers=headers,
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "El precio no puede ser negativo"
    assert client.get("/api/reservations/mine", headers=headers).get_json() == []


def test_reservation_time_is_zero_padded(client, customer, make_product):
    _, headers = customer
    product_id = make_product()

    reservation = reserve(client, headers, product_id, reservation_time="9:00").get_json()
    assert reservation["reservation_time"] == "09:00"

    slots = client.get(f"/api/reservations/available-slots?fecha={FUTURE}&product_id={product_id}").get_json()
    assert "09:00" not in slots
    check = client.get(f"/api/reservations/check?fecha={FUTURE}&hora=9:00&product_id={product_id}")
    assert check.get_json() == {"disponible": False}

    response = reserve(client, headers, product_id, reservation_time="25:00")
    assert response.status_code == 400
    assert response.get_json()["error"] == "Formato de hora inválido"
