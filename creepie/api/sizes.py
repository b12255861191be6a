"""
API: Tamaños
Porciones disponibles para los productos (capacidad de personas + precio adicional)
"""
import logging
from flask import Blueprint, jsonify, request
from sqlalchemy import func
from ..db import db
from ..models import ProductSize, ProductSizeOption
from ..utils.auth import roles_required
from ..utils.parsing import parse_bool, parse_float, parse_int

logger = logging.getLogger(__name__)

bp = Blueprint("sizes", __name__)


def validate_size(data):
    """Devuelve el mensaje de error o None si los datos son válidos"""
    name = (data.get("name") or "").strip()
    capacity = data.get("person_capacity")

    if not name or capacity in (None, ""):
        return "Nombre y capacidad de personas son requeridos"

    capacity = parse_int(capacity)
    if capacity is None or capacity <= 0:
        return "La capacidad de personas debe ser mayor a 0"

    additional_price = parse_float(data.get("additional_price") or 0)
    if additional_price is None or additional_price < 0:
        return "El precio adicional no puede ser negativo"

    return None


@bp.route("", methods=["GET"])
def get_sizes():
    """Lista de tamaños por display_order (?active=true solo activos)"""
    query = ProductSize.query
    if parse_bool(request.args.get("active")):
        query = query.filter_by(is_active=True)
    sizes = query.order_by(ProductSize.display_order, ProductSize.id).all()
    return jsonify([s.to_dict() for s in sizes])


@bp.route("/with-counts", methods=["GET"])
@roles_required("admin")
def get_sizes_with_counts():
    counts = dict(
        db.session.query(ProductSizeOption.size_id, func.count(ProductSizeOption.id))
        .group_by(ProductSizeOption.size_id)
        .all()
    )
    sizes = ProductSize.query.order_by(ProductSize.display_order, ProductSize.id).all()

    result = []
    for size in sizes:
        size_dict = size.to_dict()
        size_dict["product_count"] = counts.get(size.id, 0)
        result.append(size_dict)
    return jsonify(result)


@bp.route("/<int:id>", methods=["GET"])
def get_size(id):
    return jsonify(ProductSize.query.get_or_404(id).to_dict())


@bp.route("", methods=["POST"])
@roles_required("admin")
def create_size():
    data = request.json or {}

    error = validate_size(data)
    if error:
        return jsonify({"error": error}), 400

    size = ProductSize(
        name=data["name"].strip(),
        person_capacity=int(data["person_capacity"]),
        additional_price=float(data.get("additional_price") or 0),
        description=data.get("description"),
        is_active=parse_bool(data.get("is_active"), default=True),
        display_order=parse_int(data.get("display_order"), default=0),
    )
    db.session.add(size)
    db.session.commit()

    logger.info(f"✅ Tamaño creado: {size.name}")
    return jsonify(size.to_dict()), 201


@bp.route("/<int:id>", methods=["PUT"])
@roles_required("admin")
def update_size(id):
    size = ProductSize.query.get_or_404(id)
    data = request.json or {}

    error = validate_size(data)
    if error:
        return jsonify({"error": error}), 400

    size.name = data["name"].strip()
    size.person_capacity = int(data["person_capacity"])
    size.additional_price = float(data.get("additional_price") or 0)
    size.description = data.get("description", size.description)
    size.is_active = parse_bool(data.get("is_active"), default=size.is_active)
    size.display_order = parse_int(data.get("display_order"), default=size.display_order)

    db.session.commit()
    return jsonify(size.to_dict())


@bp.route("/<int:id>", methods=["DELETE"])
@roles_required("admin")
def delete_size(id):
    """Elimina un tamaño que ningún producto usa"""
    size = ProductSize.query.get_or_404(id)

    if ProductSizeOption.query.filter_by(size_id=id).first():
        return jsonify({"error": "No se puede eliminar un tamaño que tiene productos asociados"}), 400

    db.session.delete(size)
    db.session.commit()
    return jsonify({"message": "Tamaño eliminado"})


@bp.route("/<int:id>/toggle", methods=["POST"])
@roles_required("admin")
def toggle_size(id):
    size = ProductSize.query.get_or_404(id)
    size.is_active = not size.is_active
    db.session.commit()
    return jsonify(size.to_dict())
