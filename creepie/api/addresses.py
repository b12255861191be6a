"""
API: Direcciones de envío
"""
import logging
from flask import Blueprint, request, jsonify
from ..db import db
from ..models import ShippingAddress
from ..utils.auth import get_current_user, login_required
from ..utils.parsing import parse_bool

logger = logging.getLogger(__name__)

bp = Blueprint("addresses", __name__)

REQUIRED_FIELDS = ("address", "department", "province", "district")
EDITABLE_FIELDS = ("address_name", "address", "department", "province", "district", "reference")


def missing_required(data):
    return any(not (data.get(field) or "").strip() for field in REQUIRED_FIELDS)


def own_address_or_404(id):
    return ShippingAddress.query.filter_by(id=id, user_id=get_current_user().id).first_or_404()


def clear_defaults(user_id):
    ShippingAddress.query.filter_by(user_id=user_id, is_default=True).update({"is_default": False})


@bp.route("", methods=["GET"])
@login_required
def get_addresses():
    addresses = (
        ShippingAddress.query.filter_by(user_id=get_current_user().id)
        .order_by(ShippingAddress.is_default.desc(), ShippingAddress.created_at.desc())
        .all()
    )
    return jsonify([a.to_dict() for a in addresses])


@bp.route("/default", methods=["GET"])
@login_required
def get_default_address():
    address = ShippingAddress.query.filter_by(user_id=get_current_user().id, is_default=True).first()
    return jsonify(address.to_dict() if address else None)


@bp.route("", methods=["POST"])
@login_required
def create_address():
    user = get_current_user()
    data = request.json or {}

    if missing_required(data):
        return jsonify({"error": "Todos los campos obligatorios deben ser completados"}), 400

    is_default = parse_bool(data.get("is_default"))
    if is_default:
        clear_defaults(user.id)

    address = ShippingAddress(user_id=user.id, is_default=is_default)
    for field in EDITABLE_FIELDS:
        setattr(address, field, data.get(field))

    db.session.add(address)
    db.session.commit()
    return jsonify(address.to_dict()), 201


@bp.route("/<int:id>", methods=["PUT"])
@login_required
def update_address(id):
    address = own_address_or_404(id)
    data = request.json or {}

    merged = {field: data.get(field, getattr(address, field)) for field in EDITABLE_FIELDS}
    if missing_required(merged):
        return jsonify({"error": "Todos los campos obligatorios deben ser completados"}), 400

    for field, value in merged.items():
        setattr(address, field, value)

    if parse_bool(data.get("is_default")):
        clear_defaults(address.user_id)
        address.is_default = True

    db.session.commit()
    return jsonify(address.to_dict())


@bp.route("/<int:id>/default", methods=["POST"])
@login_required
def set_default_address(id):
    address = own_address_or_404(id)
    clear_defaults(address.user_id)
    address.is_default = True
    db.session.commit()
    return jsonify(address.to_dict())


@bp.route("/<int:id>", methods=["DELETE"])
@login_required
def delete_address(id):
    address = own_address_or_404(id)
    db.session.delete(address)
    db.session.commit()
    return jsonify({"message": "Dirección eliminada"})
