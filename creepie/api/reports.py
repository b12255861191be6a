"""
API: Reportes financieros
Ingresos, egresos y ganancia por período con comparación contra el
período anterior, y serie para el gráfico de ingresos vs egresos
"""
import logging
from flask import Blueprint, request, jsonify
from sqlalchemy import func
from ..db import db
from ..models import Order, OrderItem, Reservation, Expense
from ..utils.auth import roles_required
from ..utils.parsing import parse_datetime
from ..utils.reports import (
    PERIODS, get_period_range, get_previous_range, chart_points, split_range,
    percent_change, chart_label,
)

logger = logging.getLogger(__name__)

bp = Blueprint("reports", __name__)


def expenses_between(start_date, end_date, inclusive=True):
    query = db.session.query(func.coalesce(func.sum(Expense.amount), 0)).filter(
        Expense.expense_date >= start_date,
    )
    if inclusive:
        query = query.filter(Expense.expense_date <= end_date)
    else:
        query = query.filter(Expense.expense_date < end_date)
    return float(query.scalar() or 0)


def orders_between(start, end):
    return Order.query.filter(Order.created_at >= start, Order.created_at <= end).all()


def sales_breakdown(order_ids):
    """Ventas por categoría y top 10 de productos por cantidad"""
    by_category = {}
    by_product = {}
    if not order_ids:
        return by_category, []

    items = OrderItem.query.filter(OrderItem.order_id.in_(order_ids)).all()
    for item in items:
        amount = (item.quantity or 0) * (item.unit_price or 0)
        product = item.product

        category = product.category.name if product and product.category else "Sin categoría"
        by_category[category] = by_category.get(category, 0) + amount

        key = product.id if product else "unknown"
        entry = by_product.setdefault(key, {
            "product_id": key,
            "product_name": product.name if product else "Producto desconocido",
            "cantidad": 0,
            "total": 0,
        })
        entry["cantidad"] += item.quantity or 0
        entry["total"] += amount

    top = sorted(by_product.values(), key=lambda p: p["cantidad"], reverse=True)[:10]
    return by_category, top


def build_financial_report(start, end, previous_start, previous_end):
    orders = orders_between(start, end)

    order_income = sum(o.total_amount or 0 for o in orders)
    refunds = sum(o.total_amount or 0 for o in orders if o.payment_status == "refunded")

    payment_methods = {}
    for order in orders:
        method = order.payment_method or "No especificado"
        payment_methods[method] = payment_methods.get(method, 0) + 1

    reservations = Reservation.query.filter(
        Reservation.created_at >= start,
        Reservation.created_at <= end,
        Reservation.status == "confirmed",
    ).all()
    reservation_income = sum(r.total_amount or 0 for r in reservations)

    income = order_income + reservation_income
    expenses = expenses_between(start.date(), end.date())
    by_category, top_products = sales_breakdown([o.id for o in orders])

    previous_income = sum(o.total_amount or 0 for o in orders_between(previous_start, previous_end))
    previous_expenses = expenses_between(previous_start.date(), previous_end.date())

    profit = income - expenses - refunds
    previous_profit = previous_income - previous_expenses

    return {
        "ingresos": income,
        "egresos": expenses,
        "reembolsos": refunds,
        "ganancia_neta": profit,
        "total_pedidos": len(orders),
        "total_reservaciones": len(reservations),
        "pedidos_completados": sum(1 for o in orders if o.status == "completed"),
        "pedidos_cancelados": sum(1 for o in orders if o.status == "cancelled"),
        "ventas_por_categoria": by_category,
        "metodos_pago": payment_methods,
        "productos_mas_vendidos": top_products,
        "comparacion_anterior": {
            "ingresos_cambio": percent_change(income, previous_income),
            "egresos_cambio": percent_change(expenses, previous_expenses),
            "ganancia_cambio": percent_change(profit, previous_profit),
        },
        "periodo": {"inicio": start.isoformat(), "fin": end.isoformat()},
    }


def build_chart(period):
    start, end = get_period_range(period)
    data = []
    for bucket_start, bucket_end in split_range(start, end, chart_points(period)):
        income = (
            db.session.query(func.coalesce(func.sum(Order.total_amount), 0))
            .filter(Order.created_at >= bucket_start, Order.created_at < bucket_end)
            .scalar()
        )
        data.append({
            "fecha": chart_label(bucket_start),
            "ingresos": float(income or 0),
            "egresos": expenses_between(bucket_start.date(), bucket_end.date(), inclusive=False),
        })
    return data


@bp.route("/financial", methods=["GET"])
@roles_required("admin")
def get_financial_report():
    """
    Reporte del período (?periodo=day|week|month|year, por defecto month)
    o de un rango personalizado (?inicio=&fin=)
    """
    period = request.args.get("periodo", "month")

    try:
        custom_start = parse_datetime(request.args.get("inicio"))
        custom_end = parse_datetime(request.args.get("fin"))
    except ValueError:
        return jsonify({"error": "Formato de fecha inválido"}), 400

    if custom_start and custom_end:
        start, end = custom_start, custom_end
    elif period in PERIODS:
        start, end = get_period_range(period)
    else:
        return jsonify({"error": f"Período inválido: {period}"}), 400

    previous_start, previous_end = get_previous_range(start, end)

    try:
        report = build_financial_report(start, end, previous_start, previous_end)
    except Exception as e:
        logger.error(f"❌ Error generando reporte financiero: {e}")
        return jsonify({"error": f"Error al generar reporte: {str(e)}"}), 500

    return jsonify(report)


@bp.route("/chart", methods=["GET"])
@roles_required("admin")
def get_chart_data():
    period = request.args.get("periodo", "month")
    if period not in PERIODS:
        return jsonify({"error": f"Período inválido: {period}"}), 400

    return jsonify(build_chart(period))
