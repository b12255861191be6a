def test_login_returns_token_and_redirect(client, make_user):
    make_user(role="admin", email="jefa@creepie.pe", password="secret123")
    response = client.post("/api/auth/login", json={"email": "JEFA@creepie.pe ", "password": "secret123"})
    assert response.status_code == 200
    data = response.get_json()
    assert data["token"]
    assert data["user"]["role"] == "admin"
    assert data["redirect_to"] == "/dashboard"
    assert "password" not in data["user"]


def test_customer_login_redirects_to_store(client, make_user):
    make_user(email="cliente@example.com")
    data = client.post("/api/auth/login", json={"email": "cliente@example.com", "password": "secret123"}).get_json()
    assert data["redirect_to"] == "/"


def test_login_with_wrong_password(client, make_user):
    make_user(email="cliente@example.com")
    response = client.post("/api/auth/login", json={"email": "cliente@example.com", "password": "nope"})
    assert response.status_code == 401
    assert response.get_json()["error"] == "Email o contraseña incorrectos"


def test_register_creates_customer(client):
    payload = {
        "email": "nuevo@example.com", "password": "secret123", "role": "admin",
        "first_name": "Luis", "last_name": "Rojas", "dni_ruc": "87654321",
    }
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201
    data = response.get_json()
    assert data["user"]["role"] == "customer"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert me.get_json()["email"] == "nuevo@example.com"


def test_register_validations(client, make_user):
    make_user(email="usado@example.com")
    base = {"email": "x@example.com", "password": "secret123", "first_name": "A", "last_name": "B", "dni_ruc": "12345678"}

    cases = [
        ({**base, "password": ""}, "Email y contraseña son requeridos"),
        ({**base, "password": "123"}, "La contraseña debe tener al menos 6 caracteres"),
        ({**base, "dni_ruc": ""}, "Nombre, apellido y DNI son requeridos"),
        ({**base, "email": "usado@example.com"}, "El email usado@example.com ya está registrado en el sistema"),
    ]
    for payload, message in cases:
        response = client.post("/api/auth/register", json=payload)
        assert response.status_code == 400
        assert response.get_json()["error"] == message


def test_verify_rejects_bad_token(client):
    assert client.get("/api/auth/verify", headers={"Authorization": "Bearer nope"}).status_code == 401
    assert client.get("/api/auth/verify").status_code == 401


def test_protected_route_without_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.get_json()["error"] == "Usuario no autenticado"


def test_route_access_for_staff(client, make_user, auth_header):
    headers = auth_header(make_user(role="staff"))

    denied = client.get("/api/auth/route-access?path=/dashboard/gastos", headers=headers).get_json()
    assert denied["allowed"] is False
    assert denied["redirect_to"] == "/dashboard/pedidos"

    allowed = client.get("/api/auth/route-access?path=/dashboard/pedidos", headers=headers).get_json()
    assert allowed["allowed"] is True
    assert allowed["redirect_to"] is None


def test_admin_creates_staff_user(client, admin_headers):
    payload = {
        "email": "staff@creepie.pe", "password": "secret123", "role": "staff",
        "first_name": "Rosa", "last_name": "Huamán", "dni_ruc": "44556677",
    }
    response = client.post("/api/users", json=payload, headers=admin_headers)
    assert response.status_code == 201
    assert response.get_json()["role"] == "staff"

    response = client.post("/api/users", json={**payload, "email": "otro@creepie.pe", "role": "chef"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()["error"] == "Rol inválido: chef"


def test_user_admin_routes_need_admin(client, customer):
    _, headers = customer
    assert client.get("/api/users", headers=headers).status_code == 403


def test_update_own_profile_checks_dni(client, customer):
    _, headers = customer
    response = client.put("/api/users/me", json={"dni_ruc": "123"}, headers=headers)
    assert response.status_code == 400
    assert response.get_json()["error"] == "El DNI debe tener al menos 8 dígitos"

    response = client.put("/api/users/me", json={"phone": "987654321", "birth_date": "1990-05-20"}, headers=headers)
    assert response.status_code == 200
    assert response.get_json()["phone"] == "987654321"
    assert response.get_json()["birth_date"] == "1990-05-20"


def test_admin_cannot_delete_own_account(client, make_user, auth_header):
    admin_id = make_user(role="admin")
    response = client.delete(f"/api/users/{admin_id}", headers=auth_header(admin_id))
    assert response.status_code == 400
    assert response.get_json()["error"] == "No puedes eliminar tu propia cuenta"


def test_delete_user_removes_related_data(client, customer, admin_headers, make_product):
    user_id, headers = customer
    product_id = make_product()
    client.post("/api/cart/items", json={"product_id": product_id}, headers=headers)
    client.post("/api/orders", json={"items": [{"product_id": product_id, "quantity": 1}]}, headers=headers)

    response = client.delete(f"/api/users/{user_id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()["message"] == "Usuario eliminado"
    assert client.get(f"/api/users/{user_id}", headers=admin_headers).status_code == 404
    assert client.get(f"/api/orders/customer/{user_id}", headers=admin_headers).get_json() == []


def test_user_stats(client, admin_headers, make_user):
    make_user()
    make_user(role="staff")
    stats = client.get("/api/users/stats", headers=admin_headers).get_json()
    assert stats["total_clientes"] == 1
    assert stats["total_staff"] == 1
    # admin del fixture + administrador inicial
    assert stats["total_usuarios"] == 4
