"""
API: Gastos
"""
import logging
from flask import Blueprint, request, jsonify
from sqlalchemy import func
from ..db import db
from ..models import Expense, EXPENSE_CATEGORIES
from ..utils.auth import get_current_user, roles_required
from ..utils.parsing import parse_float, parse_date
from ..utils.text import format_price

logger = logging.getLogger(__name__)

bp = Blueprint("expenses", __name__)


def validate_expense(data):
    """Devuelve (campos, error)"""
    category = data.get("category")
    if category not in EXPENSE_CATEGORIES:
        return None, f"Categoría inválida: {category}"

    description = (data.get("description") or "").strip()
    if not description:
        return None, "La descripción es requerida"

    amount = parse_float(data.get("amount"))
    if amount is None or amount < 0:
        return None, "El monto debe ser un número mayor o igual a 0"

    try:
        expense_date = parse_date(data.get("expense_date"))
    except ValueError:
        return None, "Formato de fecha inválido"
    if not expense_date:
        return None, "La fecha del gasto es requerida"

    return {
        "category": category,
        "description": description,
        "amount": amount,
        "expense_date": expense_date,
        "notes": data.get("notes") or "",
    }, None


def date_filters(query, start_arg, end_arg):
    start = parse_date(request.args.get(start_arg))
    end = parse_date(request.args.get(end_arg))
    if start:
        query = query.filter(Expense.expense_date >= start)
    if end:
        query = query.filter(Expense.expense_date <= end)
    return query


@bp.route("", methods=["GET"])
@roles_required("admin")
def get_expenses():
    """Filtros: fecha_inicio, fecha_fin, categoria"""
    try:
        query = date_filters(Expense.query, "fecha_inicio", "fecha_fin")
    except ValueError:
        return jsonify({"error": "Formato de fecha inválido"}), 400

    category = request.args.get("categoria")
    if category:
        query = query.filter_by(category=category)

    expenses = query.order_by(Expense.expense_date.desc(), Expense.id.desc()).all()
    return jsonify([e.to_dict() for e in expenses])


@bp.route("", methods=["POST"])
@roles_required("admin")
def create_expense():
    fields, error = validate_expense(request.json or {})
    if error:
        return jsonify({"error": error}), 400

    try:
        expense = Expense(created_by=get_current_user().id, **fields)
        db.session.add(expense)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error creando gasto: {e}")
        return jsonify({"error": f"Error al crear gasto: {str(e)}"}), 500

    logger.info(f"💸 Gasto registrado: {expense.category} {format_price(expense.amount)}")
    return jsonify(expense.to_dict()), 201


@bp.route("/<int:id>", methods=["PUT"])
@roles_required("admin")
def update_expense(id):
    expense = Expense.query.get_or_404(id)
    fields, error = validate_expense({**expense.to_dict(), **(request.json or {})})
    if error:
        return jsonify({"error": error}), 400

    try:
        for field, value in fields.items():
            setattr(expense, field, value)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error actualizando gasto {id}: {e}")
        return jsonify({"error": f"Error al actualizar gasto: {str(e)}"}), 500

    return jsonify(expense.to_dict())


@bp.route("/<int:id>", methods=["DELETE"])
@roles_required("admin")
def delete_expense(id):
    expense = Expense.query.get_or_404(id)
    db.session.delete(expense)
    db.session.commit()
    return jsonify({"message": "Gasto eliminado"})


@bp.route("/total", methods=["GET"])
@roles_required("admin")
def get_total_expenses():
    """Total del rango ?fecha_inicio=&fecha_fin="""
    try:
        query = date_filters(db.session.query(func.coalesce(func.sum(Expense.amount), 0)), "fecha_inicio", "fecha_fin")
    except ValueError:
        return jsonify({"error": "Formato de fecha inválido"}), 400

    return jsonify({"total": float(query.scalar() or 0)})


@bp.route("/by-category", methods=["GET"])
@roles_required("admin")
def get_expenses_by_category():
    try:
        query = date_filters(
            db.session.query(Expense.category, func.sum(Expense.amount)),
            "fecha_inicio", "fecha_fin",
        )
    except ValueError:
        return jsonify({"error": "Formato de fecha inválido"}), 400

    rows = query.group_by(Expense.category).all()
    return jsonify({category: float(total or 0) for category, total in rows})
