"""
API: Tamaños por producto
Qué tamaños ofrece cada producto y cuál viene seleccionado por defecto
"""
import logging
from flask import Blueprint, request, jsonify
from ..db import db
from ..models import Product, ProductSize, ProductSizeOption
from ..utils.auth import roles_required
from ..utils.parsing import parse_bool, parse_int

logger = logging.getLogger(__name__)

bp = Blueprint("size_options", __name__)


def clear_defaults(product_id, except_id=None):
    query = ProductSizeOption.query.filter_by(product_id=product_id, is_default=True)
    for option in query.all():
        if option.id != except_id:
            option.is_default = False


@bp.route("/<int:product_id>/sizes", methods=["GET"])
def get_product_sizes(product_id):
    """Tamaños del producto, el predeterminado primero"""
    Product.query.get_or_404(product_id)
    options = (
        ProductSizeOption.query.filter_by(product_id=product_id)
        .order_by(ProductSizeOption.is_default.desc(), ProductSizeOption.id)
        .all()
    )
    return jsonify([o.to_dict() for o in options])


@bp.route("/<int:product_id>/sizes", methods=["POST"])
@roles_required("admin")
def add_product_size(product_id):
    Product.query.get_or_404(product_id)
    data = request.json or {}
    size_id = parse_int(data.get("size_id"))

    if not size_id or not ProductSize.query.get(size_id):
        return jsonify({"error": "Tamaño no encontrado"}), 400

    if ProductSizeOption.query.filter_by(product_id=product_id, size_id=size_id).first():
        return jsonify({"error": "Este tamaño ya está asignado al producto"}), 400

    is_default = parse_bool(data.get("is_default"))
    if is_default:
        clear_defaults(product_id)

    option = ProductSizeOption(product_id=product_id, size_id=size_id, is_default=is_default)
    db.session.add(option)
    db.session.commit()
    return jsonify(option.to_dict()), 201


@bp.route("/<int:product_id>/sizes/<int:size_id>", methods=["DELETE"])
@roles_required("admin")
def remove_product_size(product_id, size_id):
    option = ProductSizeOption.query.filter_by(product_id=product_id, size_id=size_id).first_or_404()
    db.session.delete(option)
    db.session.commit()
    return jsonify({"message": "Tamaño removido del producto"})


@bp.route("/<int:product_id>/sizes/<int:size_id>/default", methods=["PUT"])
@roles_required("admin")
def set_default_size(product_id, size_id):
    option = ProductSizeOption.query.filter_by(product_id=product_id, size_id=size_id).first_or_404()
    clear_defaults(product_id, except_id=option.id)
    option.is_default = True
    db.session.commit()
    return jsonify(option.to_dict())


@bp.route("/<int:product_id>/sizes", methods=["PUT"])
@roles_required("admin")
def replace_product_sizes(product_id):
    """Reemplaza todos los tamaños del producto por la lista enviada"""
    Product.query.get_or_404(product_id)
    data = request.json or {}
    size_ids = [parse_int(s) for s in data.get("size_ids") or []]
    size_ids = [s for s in dict.fromkeys(size_ids) if s]
    default_size_id = parse_int(data.get("default_size_id"))

    try:
        ProductSizeOption.query.filter_by(product_id=product_id).delete()
        for size_id in size_ids:
            db.session.add(ProductSizeOption(
                product_id=product_id,
                size_id=size_id,
                is_default=size_id == default_size_id,
            ))
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error actualizando tamaños del producto {product_id}: {e}")
        return jsonify({"error": f"Error al actualizar tamaños del producto: {str(e)}"}), 500

    options = ProductSizeOption.query.filter_by(product_id=product_id).all()
    return jsonify([o.to_dict() for o in options])
