from datetime import datetime

from creepie.api.dashboard import last_months

EXPENSE = {"category": "ingredients", "description": "Harina y azúcar", "amount": 50, "expense_date": "2025-10-15"}
ALL_TIME = "inicio=2000-01-01T00:00:00&fin=2100-01-01T00:00:00"


def place_order(client, headers, product_id, quantity=1, **fields):
    payload = {"items": [{"product_id": product_id, "quantity": quantity}], **fields}
    return client.post("/api/orders", json=payload, headers=headers).get_json()


def test_expense_validation(client, admin_headers):
    cases = [
        ({**EXPENSE, "category": "food"}, "Categoría inválida: food"),
        ({**EXPENSE, "description": ""}, "La descripción es requerida"),
        ({**EXPENSE, "amount": -1}, "El monto debe ser un número mayor o igual a 0"),
        ({**EXPENSE, "expense_date": "15/10/2025"}, "Formato de fecha inválido"),
        ({**EXPENSE, "expense_date": None}, "La fecha del gasto es requerida"),
    ]
    for payload, message in cases:
        response = client.post("/api/expenses", json=payload, headers=admin_headers)
        assert response.status_code == 400
        assert response.get_json()["error"] == message


def test_expense_totals(client, admin_headers):
    client.post("/api/expenses", json=EXPENSE, headers=admin_headers)
    client.post("/api/expenses", json={**EXPENSE, "amount": 30}, headers=admin_headers)
    client.post(
        "/api/expenses",
        json={**EXPENSE, "category": "rent", "amount": 1200, "expense_date": "2025-11-01"},
        headers=admin_headers,
    )

    assert client.get("/api/expenses/total", headers=admin_headers).get_json() == {"total": 1280.0}
    october = client.get(
        "/api/expenses/total?fecha_inicio=2025-10-01&fecha_fin=2025-10-31", headers=admin_headers,
    ).get_json()
    assert october == {"total": 80.0}

    by_category = client.get("/api/expenses/by-category", headers=admin_headers).get_json()
    assert by_category == {"ingredients": 80.0, "rent": 1200.0}

    listed = client.get("/api/expenses?categoria=rent", headers=admin_headers).get_json()
    assert [e["amount"] for e in listed] == [1200.0]


def test_expense_partial_update(client, admin_headers):
    expense = client.post("/api/expenses", json=EXPENSE, headers=admin_headers).get_json()
    response = client.put(f"/api/expenses/{expense['id']}", json={"amount": 75.5}, headers=admin_headers)
    assert response.status_code == 200
    data = response.get_json()
    assert data["amount"] == 75.5
    assert data["description"] == "Harina y azúcar"
    assert data["expense_date"] == "2025-10-15"


def test_expenses_are_admin_only(client, make_user, auth_header):
    headers = auth_header(make_user(role="staff"))
    assert client.get("/api/expenses", headers=headers).status_code == 403


def test_financial_report(client, customer, admin_headers, make_product):
    _, headers = customer
    product_id = make_product(price=65.0)

    paid = place_order(client, headers, product_id, quantity=2, payment_method="card")
    refunded = place_order(client, headers, product_id)
    client.put(f"/api/orders/{paid['id']}/status", json={"status": "completed"}, headers=admin_headers)
    client.put(f"/api/orders/{refunded['id']}/payment-status", json={"payment_status": "refunded"}, headers=admin_headers)

    reservation = client.post(
        "/api/reservations",
        json={"product_id": product_id, "reservation_date": "2099-06-15", "reservation_time": "10:00"},
        headers=headers,
    ).get_json()
    client.put(f"/api/reservations/{reservation['id']}/status", json={"status": "confirmed"}, headers=admin_headers)

    client.post("/api/expenses", json=EXPENSE, headers=admin_headers)

    report = client.get(f"/api/reports/financial?{ALL_TIME}", headers=admin_headers).get_json()
    assert report["ingresos"] == 260.0
    assert report["egresos"] == 50.0
    assert report["reembolsos"] == 65.0
    assert report["ganancia_neta"] == 145.0
    assert report["total_pedidos"] == 2
    assert report["total_reservaciones"] == 1
    assert report["pedidos_completados"] == 1
    assert report["ventas_por_categoria"] == {"Tortas": 195.0}
    assert report["metodos_pago"] == {"card": 1, "No especificado": 1}
    assert report["productos_mas_vendidos"][0]["cantidad"] == 3
    assert report["comparacion_anterior"]["ingresos_cambio"] == 100


def test_financial_report_rejects_unknown_period(client, admin_headers):
    response = client.get("/api/reports/financial?periodo=decade", headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()["error"] == "Período inválido: decade"


def test_chart_points_per_period(client, admin_headers):
    week = client.get("/api/reports/chart?periodo=week", headers=admin_headers).get_json()
    assert len(week) == 7
    assert set(week[0]) == {"fecha", "ingresos", "egresos"}

    year = client.get("/api/reports/chart?periodo=year", headers=admin_headers).get_json()
    assert len(year) == 12


def test_dashboard(client, customer, admin_headers, make_product):
    _, headers = customer
    product_id = make_product(price=65.0)
    first = place_order(client, headers, product_id, quantity=2)
    place_order(client, headers, product_id)
    client.put(f"/api/orders/{first['id']}/status", json={"status": "completed"}, headers=admin_headers)

    data = client.get("/api/dashboard", headers=admin_headers).get_json()

    metrics = data["metricas"]
    assert metrics["ventasTotales"] == 130.0
    assert metrics["ventasHoy"] == 130.0
    assert metrics["pedidosPendientes"] == 1
    assert metrics["tasaConversion"] == 50.0
    assert metrics["totalProductos"] == 1

    recent = data["pedidosRecientes"]
    assert len(recent) == 2
    assert recent[-1]["id"] == f"ORD-{first['id']:04d}"
    assert recent[-1]["cliente"] == "Ana Quispe"

    assert data["productosPopulares"] == [{"id": product_id, "nombre": "Torta de Chocolate", "ventas": 3}]
    assert len(data["ventasMensuales"]) == 8
    assert data["productosPorCategoria"] == [{"categoria": "Tortas", "cantidad": 1, "color": "#6366f1"}]


def test_last_months_wraps_year():
    months = last_months(datetime(2025, 3, 10))
    assert months[0] == (2024, 8)
    assert months[-1] == (2025, 3)
    assert len(months) == 8
