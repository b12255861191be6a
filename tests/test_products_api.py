import io

from creepie.utils.cloud_storage import blob_path_from_url, delete_file


def category_id(client, admin_headers, name="Tortas"):
    return client.post("/api/categories", json={"name": name}, headers=admin_headers).get_json()["id"]


def test_create_product_with_ingredients(client, admin_headers):
    payload = {
        "name": "Torta Tres Leches",
        "price": 60,
        "category_id": category_id(client, admin_headers),
        "ingredients": ["Leche evaporada", " ", "Canela"],
        "preparation_time": 24,
    }
    response = client.post("/api/products", json=payload, headers=admin_headers)
    assert response.status_code == 201
    product = response.get_json()
    assert [i["name"] for i in product["ingredients"]] == ["Leche evaporada", "Canela"]
    assert product["category"]["name"] == "Tortas"
    assert product["sizes"] == []


def test_product_requires_name_price_and_category(client, admin_headers):
    response = client.post("/api/products", json={"name": "Pie"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()["error"] == "Nombre, precio y categoría son requeridos"

    response = client.post("/api/products", json={"name": "Pie", "price": 10, "category_id": 99}, headers=admin_headers)
    assert response.get_json()["error"] == "Categoría no encontrada"


def test_product_by_slug(client, make_product):
    product_id = make_product(name="Pie de Limón")
    response = client.get("/api/products/slug/pie-de-limon")
    assert response.status_code == 200
    assert response.get_json()["id"] == product_id

    assert client.get("/api/products/slug/no-existe").status_code == 404


def test_delete_is_soft_by_default(client, admin_headers, make_product):
    product_id = make_product()
    response = client.delete(f"/api/products/{product_id}", headers=admin_headers)
    assert response.get_json()["message"] == "Producto desactivado"
    assert client.get("/api/products").get_json() == []
    assert client.get(f"/api/products/{product_id}").get_json()["is_active"] is False

    response = client.delete(f"/api/products/{product_id}?permanent=true", headers=admin_headers)
    assert response.get_json()["message"] == "Producto eliminado"
    assert client.get(f"/api/products/{product_id}").status_code == 404


def test_offers_and_search(client, make_product):
    make_product(name="Torta de Chocolate")
    make_product(name="Alfajores", is_offer=True, offer_price=12.0)

    offers = client.get("/api/products/offers").get_json()
    assert [p["name"] for p in offers] == ["Alfajores"]

    found = client.get("/api/products/search?q=choco").get_json()
    assert [p["name"] for p in found] == ["Torta de Chocolate"]
    assert client.get("/api/products/search").get_json() == []


def test_stock_update_by_staff(client, make_user, auth_header, make_product):
    product_id = make_product()
    headers = auth_header(make_user(role="staff"))

    response = client.put(f"/api/products/{product_id}/stock", json={"stock": -1}, headers=headers)
    assert response.status_code == 400

    response = client.put(f"/api/products/{product_id}/stock", json={"stock": 4}, headers=headers)
    assert response.get_json()["stock"] == 4


def test_image_upload_falls_back_to_local_disk(app, client, admin_headers, make_product, tmp_path):
    app.config["UPLOAD_FOLDER"] = str(tmp_path)
    product_id = make_product()

    response = client.post(
        f"/api/products/{product_id}/images",
        data={"file": (io.BytesIO(b"fake-png"), "torta.png", "image/png")},
        content_type="multipart/form-data",
        headers=admin_headers,
    )
    assert response.status_code == 201
    image = response.get_json()
    assert image["image_url"].startswith(f"/uploads/products/{product_id}/")
    assert image["image_order"] == 0

    served = client.get(image["image_url"])
    assert served.data == b"fake-png"


def test_image_upload_rejects_other_types(client, admin_headers, make_product):
    response = client.post(
        f"/api/products/{make_product()}/images",
        data={"file": (io.BytesIO(b"%PDF"), "menu.pdf", "application/pdf")},
        content_type="multipart/form-data",
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "Tipo de archivo no válido. Solo se permiten JPG, PNG y WebP"


def test_images_endpoint_without_bucket(client):
    response = client.get("/api/images/products/1/torta.png")
    assert response.status_code == 404


def test_blob_path_from_url():
    assert blob_path_from_url("/api/images/products/1/a.png", "creepie") == "products/1/a.png"
    assert blob_path_from_url("gs://creepie/products/1/a.png", "creepie") == "products/1/a.png"
    assert blob_path_from_url("https://storage.googleapis.com/creepie/products/a.png", "creepie") == "products/a.png"


def test_permanent_delete_keeps_products_with_orders(client, admin_headers, customer, make_product):
    _, headers = customer
    product_id = make_product()
    client.post("/api/orders", json={"items": [{"product_id": product_id, "quantity": 1}]}, headers=headers)

    response = client.delete(f"/api/products/{product_id}?permanent=true", headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()["error"] == (
        "No se puede eliminar un producto con pedidos o reservaciones. Desactívalo en su lugar."
    )
    assert client.get(f"/api/products/{product_id}").status_code == 200


def test_image_upload_checks_extension(client, admin_headers, make_product):
    response = client.post(
        f"/api/products/{make_product()}/images",
        data={"file": (io.BytesIO(b"GIF89a"), "torta.gif", "image/png")},
        content_type="multipart/form-data",
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_attached_image_url_cannot_leave_uploads(client, admin_headers, make_product):
    response = client.post(
        f"/api/products/{make_product()}/images", json={"image_url": "/uploads/../victim.txt"}, headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "URL de imagen inválida"


def test_delete_file_stays_inside_upload_folder(app, tmp_path):
    uploads = tmp_path / "uploads"
    uploads.mkdir()
    inside = uploads / "torta.png"
    inside.write_bytes(b"fake-png")
    outside = tmp_path / "victim.txt"
    outside.write_text("keep me")
    app.config["UPLOAD_FOLDER"] = str(uploads)

    with app.app_context():
        assert delete_file("/uploads/../victim.txt") is False
        assert delete_file("/uploads/torta.png") is True

    assert outside.exists()
    assert not inside.exists()
