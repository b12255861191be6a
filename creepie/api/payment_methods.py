"""
API: Métodos de pago
Tarjetas guardadas del cliente (validación simulada, sin pasarela real)
"""
import logging
from flask import Blueprint, request, jsonify
from ..db import db
from ..models import PaymentMethod
from ..utils.auth import get_current_user, login_required
from ..utils.cards import validate_card, is_expired
from ..utils.parsing import parse_bool

logger = logging.getLogger(__name__)

bp = Blueprint("payment_methods", __name__)


def own_method_or_404(id):
    return PaymentMethod.query.filter_by(id=id, user_id=get_current_user().id).first_or_404()


def clear_defaults(user_id):
    PaymentMethod.query.filter_by(user_id=user_id, is_default=True).update({"is_default": False})


@bp.route("", methods=["GET"])
@login_required
def get_payment_methods():
    methods = (
        PaymentMethod.query.filter_by(user_id=get_current_user().id)
        .order_by(PaymentMethod.is_default.desc(), PaymentMethod.created_at.desc())
        .all()
    )
    return jsonify([m.to_dict() for m in methods])


@bp.route("/validate", methods=["POST"])
@login_required
def validate():
    data = request.json or {}
    result = validate_card(
        data.get("card_number"), data.get("cvv"), data.get("expiry_month"), data.get("expiry_year"),
    )
    return jsonify(result), 200 if result["valid"] else 400


@bp.route("", methods=["POST"])
@login_required
def add_payment_method():
    """Valida la tarjeta y guarda solo marca, titular, últimos 4 y vencimiento"""
    user = get_current_user()
    data = request.json or {}

    result = validate_card(
        data.get("card_number"), data.get("cvv"), data.get("expiry_month"), data.get("expiry_year"),
    )
    if not result["valid"]:
        return jsonify({"error": result.get("error") or "Tarjeta inválida"}), 400

    holder = (data.get("card_holder_name") or "").strip()
    if not holder:
        return jsonify({"error": "El nombre del titular es requerido"}), 400

    try:
        is_default = parse_bool(data.get("is_default"))
        if is_default:
            clear_defaults(user.id)

        method = PaymentMethod(
            user_id=user.id,
            card_type=result["card_type"],
            card_holder_name=holder,
            card_last_four=result["last_four"],
            expiry_month=str(int(data["expiry_month"])).zfill(2),
            expiry_year=str(data["expiry_year"]),
            is_default=is_default,
        )
        db.session.add(method)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error agregando método de pago: {e}")
        return jsonify({"error": f"Error al agregar método de pago: {str(e)}"}), 500

    return jsonify(method.to_dict()), 201


@bp.route("/<int:id>/default", methods=["POST"])
@login_required
def set_default(id):
    method = own_method_or_404(id)
    clear_defaults(method.user_id)
    method.is_default = True
    db.session.commit()
    return jsonify(method.to_dict())


@bp.route("/<int:id>", methods=["PUT"])
@login_required
def update_payment_method(id):
    """Solo se puede cambiar el titular y la fecha de vencimiento"""
    method = own_method_or_404(id)
    data = request.json or {}

    month = data.get("expiry_month")
    year = data.get("expiry_year")
    if month and year:
        try:
            if not 1 <= int(month) <= 12 or is_expired(month, year):
                return jsonify({"error": "Fecha de expiración inválida"}), 400
        except (TypeError, ValueError):
            return jsonify({"error": "Fecha de expiración inválida"}), 400
        method.expiry_month = str(int(month)).zfill(2)
        method.expiry_year = str(year)

    if data.get("card_holder_name"):
        method.card_holder_name = data["card_holder_name"].strip()

    db.session.commit()
    return jsonify(method.to_dict())


@bp.route("/<int:id>", methods=["DELETE"])
@login_required
def delete_payment_method(id):
    method = own_method_or_404(id)
    db.session.delete(method)
    db.session.commit()
    return jsonify({"message": "Método de pago eliminado"})
