"""
API: Productos
CRUD de postres + imágenes, ingredientes y consultas del catálogo
"""
import logging
from flask import Blueprint, request, jsonify, current_app
from sqlalchemy import func, or_
from ..db import db
from ..models import (
    Product, ProductImage, ProductIngredient, Category, CartItem, OrderItem, Reservation,
)
from ..utils.auth import roles_required
from ..utils.cloud_storage import store_image, delete_file
from ..utils.parsing import parse_bool, parse_int, parse_float, parse_datetime
from ..utils.text import slugify

logger = logging.getLogger(__name__)

bp = Blueprint("products", __name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}


def allowed_file(filename):
    return "." in filename and filename.rsplit(".", 1)[1].lower() in current_app.config["ALLOWED_EXTENSIONS"]


def apply_product_fields(product, data):
    """Copia los campos del payload al producto; devuelve un error o None"""
    name = (data.get("name") or "").strip()
    price = parse_float(data.get("price"))
    category_id = parse_int(data.get("category_id"))

    if not name or price is None or not category_id:
        return "Nombre, precio y categoría son requeridos"

    if not Category.query.get(category_id):
        return "Categoría no encontrada"

    product.name = name
    product.price = price
    product.category_id = category_id
    product.description = data.get("description", product.description)
    product.is_offer = parse_bool(data.get("is_offer"), default=bool(product.is_offer))
    product.offer_price = parse_float(data.get("offer_price", product.offer_price))
    product.offer_end_date = parse_datetime(data.get("offer_end_date")) if product.is_offer else None
    product.stock = parse_int(data.get("stock"), default=product.stock or 0)
    product.preparation_time = parse_int(data.get("preparation_time"), default=product.preparation_time)
    if "is_active" in data:
        product.is_active = parse_bool(data.get("is_active"), default=True)
    return None


def has_sales_history(product_id):
    """True si el producto aparece en algún pedido o reservación"""
    return bool(
        OrderItem.query.filter_by(product_id=product_id).first()
        or Reservation.query.filter_by(product_id=product_id).first()
    )


def remove_product(product):
    """
    Borra el producto junto con sus líneas de carrito.
    Imágenes, ingredientes y tamaños se van en cascada.

    Returns:
        list: URLs de las imágenes, para borrarlas del storage después del commit
    """
    image_urls = [img.image_url for img in product.images]
    CartItem.query.filter_by(product_id=product.id).delete()
    db.session.delete(product)
    return image_urls


@bp.route("", methods=["GET"])
def get_products():
    """
    Lista los productos activos
    Filtros: categoria_id, solo_ofertas, buscar (nombre), limit
    """
    query = Product.query

    if parse_bool(request.args.get("active"), default=True):
        query = query.filter_by(is_active=True)

    category_id = parse_int(request.args.get("categoria_id"))
    if category_id:
        query = query.filter_by(category_id=category_id)

    if parse_bool(request.args.get("solo_ofertas")):
        query = query.filter_by(is_offer=True)

    search = (request.args.get("buscar") or "").strip()
    if search:
        query = query.filter(Product.name.ilike(f"%{search}%"))

    query = query.order_by(Product.name)

    limit = parse_int(request.args.get("limit"))
    if limit:
        query = query.limit(limit)

    return jsonify([p.to_dict() for p in query.all()])


@bp.route("/offers", methods=["GET"])
def get_offers():
    """Productos en oferta, los más recientes primero"""
    products = (
        Product.query.filter_by(is_active=True, is_offer=True)
        .order_by(Product.created_at.desc())
        .all()
    )
    return jsonify([p.to_dict() for p in products])


@bp.route("/category/<int:category_id>", methods=["GET"])
def get_products_by_category(category_id):
    products = (
        Product.query.filter_by(is_active=True, category_id=category_id)
        .order_by(Product.name)
        .all()
    )
    return jsonify([p.to_dict() for p in products])


@bp.route("/search", methods=["GET"])
def search_products():
    """Busca en nombre y descripción"""
    term = (request.args.get("q") or "").strip()
    limit = parse_int(request.args.get("limit"), default=10)

    if not term:
        return jsonify([])

    products = (
        Product.query.filter(
            Product.is_active.is_(True),
            or_(Product.name.ilike(f"%{term}%"), Product.description.ilike(f"%{term}%")),
        )
        .order_by(Product.name)
        .limit(limit)
        .all()
    )
    return jsonify([p.to_dict() for p in products])


@bp.route("/best-sellers", methods=["GET"])
def get_best_sellers():
    """Productos más vendidos según la cantidad en pedidos"""
    limit = parse_int(request.args.get("limit"), default=8)

    rows = (
        db.session.query(Product, func.sum(OrderItem.quantity).label("sold"))
        .join(OrderItem, OrderItem.product_id == Product.id)
        .filter(Product.is_active.is_(True))
        .group_by(Product.id)
        .order_by(func.sum(OrderItem.quantity).desc())
        .limit(limit)
        .all()
    )

    result = []
    for product, sold in rows:
        product_dict = product.to_dict()
        product_dict["total_sold"] = int(sold or 0)
        result.append(product_dict)
    return jsonify(result)


@bp.route("/slug/<slug>", methods=["GET"])
def get_product_by_slug(slug):
    for product in Product.query.filter_by(is_active=True).all():
        if slugify(product.name) == slug:
            return jsonify(product.to_detail())
    return jsonify({"error": "Producto no encontrado"}), 404


@bp.route("/<int:id>", methods=["GET"])
def get_product(id):
    """Producto con categoría, tamaños, imágenes e ingredientes"""
    product = Product.query.get_or_404(id)
    return jsonify(product.to_detail())


@bp.route("/<int:id>/related", methods=["GET"])
def get_related_products(id):
    """Otros productos de la misma categoría"""
    product = Product.query.get_or_404(id)
    limit = parse_int(request.args.get("limit"), default=3)

    related = (
        Product.query.filter(
            Product.category_id == product.category_id,
            Product.id != product.id,
            Product.is_active.is_(True),
        )
        .limit(limit)
        .all()
    )
    return jsonify([p.to_dict() for p in related])


@bp.route("", methods=["POST"])
@roles_required("admin")
def create_product():
    """Crea un nuevo producto (opcionalmente con ingredientes)"""
    data = request.json or {}

    product = Product(is_active=True)
    error = apply_product_fields(product, data)
    if error:
        return jsonify({"error": error}), 400

    try:
        db.session.add(product)
        db.session.flush()

        for name in data.get("ingredients") or []:
            if name and str(name).strip():
                db.session.add(ProductIngredient(product_id=product.id, name=str(name).strip()))

        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error creando producto: {e}")
        return jsonify({"error": f"Error al crear producto: {str(e)}"}), 500

    logger.info(f"✅ Producto creado: {product.name}")
    return jsonify(product.to_detail()), 201


@bp.route("/<int:id>", methods=["PUT"])
@roles_required("admin")
def update_product(id):
    """Actualiza un producto"""
    product = Product.query.get_or_404(id)
    data = request.json or {}

    error = apply_product_fields(product, data)
    if error:
        db.session.rollback()
        return jsonify({"error": error}), 400

    db.session.commit()
    return jsonify(product.to_detail())


@bp.route("/<int:id>", methods=["DELETE"])
@roles_required("admin")
def delete_product(id):
    """
    Desactiva el producto, o lo borra con sus dependencias si ?permanent=true.
    Un producto con pedidos o reservaciones solo puede desactivarse.
    """
    product = Product.query.get_or_404(id)

    if not parse_bool(request.args.get("permanent")):
        product.is_active = False
        db.session.commit()
        return jsonify({"message": "Producto desactivado"})

    if has_sales_history(id):
        return jsonify({
            "error": "No se puede eliminar un producto con pedidos o reservaciones. Desactívalo en su lugar."
        }), 400

    try:
        image_urls = remove_product(product)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error eliminando producto {id}: {e}")
        return jsonify({"error": f"Error al eliminar producto: {str(e)}"}), 500

    for url in image_urls:
        delete_file(url)

    return jsonify({"message": "Producto eliminado"})


@bp.route("/<int:id>/stock", methods=["PUT"])
@roles_required("admin", "staff")
def update_stock(id):
    product = Product.query.get_or_404(id)
    stock = parse_int((request.json or {}).get("stock"))

    if stock is None or stock < 0:
        return jsonify({"error": "El stock debe ser un número mayor o igual a 0"}), 400

    product.stock = stock
    db.session.commit()
    return jsonify(product.to_dict())


# --- Imágenes ---------------------------------------------------------------

@bp.route("/<int:id>/images", methods=["GET"])
def get_product_images(id):
    Product.query.get_or_404(id)
    images = ProductImage.query.filter_by(product_id=id).order_by(ProductImage.image_order).all()
    return jsonify([img.to_dict() for img in images])


@bp.route("/<int:id>/images", methods=["POST"])
@roles_required("admin")
def add_product_image(id):
    """
    Agrega una imagen al final de la galería.
    Acepta un archivo (multipart, campo "file") o JSON con image_url.
    """
    product = Product.query.get_or_404(id)

    if "file" in request.files:
        file = request.files["file"]

        if file.filename == "":
            return jsonify({"error": "No se proporcionó ningún archivo"}), 400

        if file.mimetype not in ALLOWED_IMAGE_TYPES or not allowed_file(file.filename):
            return jsonify({"error": "Tipo de archivo no válido. Solo se permiten JPG, PNG y WebP"}), 400

        file.seek(0, 2)
        size = file.tell()
        file.seek(0)
        if size > current_app.config["MAX_IMAGE_SIZE"]:
            return jsonify({"error": "El archivo es demasiado grande. Máximo 5MB"}), 400

        image_url = store_image(file, folder=f"products/{product.id}")
    else:
        image_url = (request.get_json(silent=True) or {}).get("image_url")
        if not image_url:
            return jsonify({"error": "No se proporcionó ningún archivo"}), 400
        if ".." in image_url:
            return jsonify({"error": "URL de imagen inválida"}), 400

    last_order = db.session.query(func.max(ProductImage.image_order)).filter_by(product_id=id).scalar()
    next_order = last_order + 1 if last_order is not None else 0

    try:
        image = ProductImage(product_id=id, image_url=image_url, image_order=next_order)
        db.session.add(image)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        delete_file(image_url)
        logger.error(f"❌ Error guardando imagen del producto {id}: {e}")
        return jsonify({"error": str(e)}), 500

    return jsonify(image.to_dict()), 201


@bp.route("/images/<int:image_id>", methods=["DELETE"])
@roles_required("admin")
def delete_product_image(image_id):
    image = ProductImage.query.get(image_id)
    if not image:
        return jsonify({"error": "Imagen no encontrada"}), 404

    if not delete_file(image.image_url):
        # La fila se elimina igual
        logger.warning(f"⚠️ No se pudo eliminar del storage: {image.image_url}")

    db.session.delete(image)
    db.session.commit()
    return jsonify({"message": "Imagen eliminada"})


@bp.route("/images/<int:image_id>/order", methods=["PUT"])
@roles_required("admin")
def update_image_order(image_id):
    image = ProductImage.query.get_or_404(image_id)
    new_order = parse_int((request.json or {}).get("image_order"))
    if new_order is None:
        return jsonify({"error": "image_order es requerido"}), 400

    image.image_order = new_order
    db.session.commit()
    return jsonify(image.to_dict())


@bp.route("/images/<int:image_id>/main", methods=["POST"])
@roles_required("admin")
def set_main_image(image_id):
    """Deja la imagen en la posición 0 y corre las demás un lugar"""
    image = ProductImage.query.get_or_404(image_id)

    for other in ProductImage.query.filter_by(product_id=image.product_id).all():
        other.image_order = (other.image_order or 0) + 1
    image.image_order = 0

    db.session.commit()
    return jsonify(image.to_dict())


# --- Ingredientes -----------------------------------------------------------

@bp.route("/<int:id>/ingredients", methods=["POST"])
@roles_required("admin")
def add_ingredient(id):
    Product.query.get_or_404(id)
    name = ((request.json or {}).get("name") or "").strip()

    if not name:
        return jsonify({"error": "El nombre del ingrediente es requerido"}), 400

    ingredient = ProductIngredient(product_id=id, name=name)
    db.session.add(ingredient)
    db.session.commit()
    return jsonify(ingredient.to_dict()), 201


@bp.route("/ingredients/<int:ingredient_id>", methods=["DELETE"])
@roles_required("admin")
def delete_ingredient(ingredient_id):
    ingredient = ProductIngredient.query.get_or_404(ingredient_id)
    db.session.delete(ingredient)
    db.session.commit()
    return jsonify({"message": "Ingrediente eliminado"})
