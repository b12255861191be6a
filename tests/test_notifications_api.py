def send(client, admin_headers, user_id, **fields):
    payload = {"user_id": user_id, "title": "Promoción", "message": "2x1 en alfajores", **fields}
    return client.post("/api/notifications", json=payload, headers=admin_headers)


def test_admin_sends_notification(client, admin_headers, customer):
    user_id, headers = customer
    response = send(client, admin_headers, user_id)
    assert response.status_code == 201
    assert response.get_json()["type"] == "info"

    assert client.get("/api/notifications/unread-count", headers=headers).get_json() == {"count": 1}
    assert len(client.get("/api/notifications/recent", headers=headers).get_json()) == 1


def test_send_validation(client, admin_headers):
    response = client.post("/api/notifications", json={"title": "Hola"}, headers=admin_headers)
    assert response.status_code == 400
    assert send(client, admin_headers, 999).status_code == 404


def test_read_and_read_all(client, admin_headers, customer):
    user_id, headers = customer
    first = send(client, admin_headers, user_id).get_json()
    send(client, admin_headers, user_id, type="promo")

    assert client.post(f"/api/notifications/{first['id']}/read", headers=headers).get_json()["is_read"] is True
    assert client.get("/api/notifications/unread-count", headers=headers).get_json() == {"count": 1}

    response = client.post("/api/notifications/read-all", headers=headers)
    assert response.get_json()["updated"] == 1
    assert client.get("/api/notifications/unread-count", headers=headers).get_json() == {"count": 0}

    promos = client.get("/api/notifications/type/promo", headers=headers).get_json()
    assert len(promos) == 1


def test_notifications_are_private(client, admin_headers, make_user, auth_header):
    owner_id = make_user()
    other = auth_header(make_user())
    notification = send(client, admin_headers, owner_id).get_json()

    assert client.post(f"/api/notifications/{notification['id']}/read", headers=other).status_code == 404
    assert client.delete(f"/api/notifications/{notification['id']}", headers=other).status_code == 404
    assert client.get("/api/notifications", headers=other).get_json() == []
