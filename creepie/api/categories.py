"""
API: Categorías
CRUD de categorías; no se eliminan si tienen productos activos
"""
import logging
from flask import Blueprint, jsonify, request
from sqlalchemy import func
from ..models import Category, Product
from ..db import db
from ..utils.auth import roles_required
from ..utils.cloud_storage import delete_file
from ..utils.parsing import parse_bool
from .products import has_sales_history, remove_product

logger = logging.getLogger(__name__)

bp = Blueprint("categories", __name__)


@bp.route("", methods=["GET"])
def get_categories():
    """Obtiene todas las categorías activas ordenadas por nombre"""
    categories = Category.query.filter_by(is_active=True).order_by(Category.name).all()
    return jsonify([c.to_dict() for c in categories])


@bp.route("/with-counts", methods=["GET"])
@roles_required("admin")
def get_categories_with_counts():
    """Todas las categorías con la cantidad de productos de cada una"""
    counts = dict(
        db.session.query(Product.category_id, func.count(Product.id))
        .group_by(Product.category_id)
        .all()
    )
    categories = Category.query.order_by(Category.name).all()

    result = []
    for category in categories:
        category_dict = category.to_dict()
        category_dict["product_count"] = counts.get(category.id, 0)
        result.append(category_dict)
    return jsonify(result)


@bp.route("/<int:id>", methods=["GET"])
def get_category(id):
    category = Category.query.get_or_404(id)
    return jsonify(category.to_dict())


@bp.route("", methods=["POST"])
@roles_required("admin")
def create_category():
    """Crea una nueva categoría"""
    data = request.json or {}
    name = (data.get("name") or "").strip()

    if not name:
        return jsonify({"error": "El nombre de la categoría es requerido"}), 400

    category = Category(
        name=name,
        description=data.get("description"),
        is_active=parse_bool(data.get("is_active"), default=True),
    )

    db.session.add(category)
    db.session.commit()

    return jsonify(category.to_dict()), 201


@bp.route("/<int:id>", methods=["PUT"])
@roles_required("admin")
def update_category(id):
    """Actualiza una categoría"""
    category = Category.query.get_or_404(id)
    data = request.json or {}
    name = (data.get("name") or "").strip()

    if not name:
        return jsonify({"error": "El nombre de la categoría es requerido"}), 400

    category.name = name
    category.description = data.get("description", category.description)
    category.is_active = parse_bool(data.get("is_active"), default=category.is_active)

    db.session.commit()

    return jsonify(category.to_dict())


@bp.route("/<int:id>", methods=["DELETE"])
@roles_required("admin")
def delete_category(id):
    """
    Elimina una categoría solo si no tiene productos activos.
    Sus productos inactivos se borran con ella, salvo que tengan ventas.
    """
    category = Category.query.get_or_404(id)
    name = category.name

    active_products = Product.query.filter_by(category_id=id, is_active=True).count()
    if active_products > 0:
        return jsonify({
            "error": (
                f'No se puede eliminar la categoría "{name}" porque tiene '
                f"{active_products} producto(s) activo(s) asociado(s). "
                "Primero mueve o desactiva los productos."
            )
        }), 400

    inactive_products = Product.query.filter_by(category_id=id).all()
    if any(has_sales_history(product.id) for product in inactive_products):
        return jsonify({
            "error": (
                f'No se puede eliminar la categoría "{name}" porque tiene '
                "productos con pedidos o reservaciones. Primero mueve los productos a otra categoría."
            )
        }), 400

    image_urls = []
    try:
        for product in inactive_products:
            image_urls.extend(remove_product(product))
        db.session.flush()

        db.session.delete(category)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error eliminando categoría {id}: {e}")
        return jsonify({"error": f"Error al eliminar categoría: {str(e)}"}), 500

    for url in image_urls:
        delete_file(url)

    logger.info(f"🗑️ Categoría eliminada: {name} ({len(inactive_products)} producto(s) inactivo(s))")
    return jsonify({"message": "Categoría eliminada"})
