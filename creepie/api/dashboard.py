"""
API: Dashboard
Métricas y gráficos de la página principal del panel de administración
"""
import logging
from datetime import datetime, timedelta
from flask import Blueprint, request, jsonify
from sqlalchemy import func
from ..db import db
from ..models import Order, OrderItem, Product, Profile
from ..utils.auth import roles_required
from ..utils.parsing import parse_int
from ..utils.reports import MONTH_ABBR

logger = logging.getLogger(__name__)

bp = Blueprint("dashboard", __name__)

CATEGORY_COLORS = ["#6366f1", "#ec4899", "#f59e0b", "#10b981", "#8b5cf6", "#f97316"]


def get_metrics():
    today = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
    tomorrow = today + timedelta(days=1)

    total_sales = (
        db.session.query(func.coalesce(func.sum(Order.total_amount), 0))
        .filter(Order.status == "completed")
        .scalar()
    )
    sales_today = (
        db.session.query(func.coalesce(func.sum(Order.total_amount), 0))
        .filter(Order.status == "completed", Order.created_at >= today, Order.created_at < tomorrow)
        .scalar()
    )

    total_orders = Order.query.count()
    completed_orders = Order.query.filter_by(status="completed").count()
    conversion = completed_orders / total_orders * 100 if total_orders else 0

    return {
        "ventasTotales": float(total_sales or 0),
        "ventasHoy": float(sales_today or 0),
        "totalUsuarios": Profile.query.count(),
        "totalProductos": Product.query.filter_by(is_active=True).count(),
        "pedidosPendientes": Order.query.filter_by(status="pending").count(),
        "tasaConversion": round(conversion, 1),
    }


def get_recent_orders(limit=5):
    orders = Order.query.order_by(Order.created_at.desc(), Order.id.desc()).limit(limit).all()
    return [
        {
            "id": f"ORD-{order.id:04d}",
            "order_id": order.id,
            "cliente": (order.customer.full_name if order.customer else "") or "Cliente",
            "total": order.total_amount or 0,
            "fecha": order.created_at.isoformat() if order.created_at else None,
            "estado": order.status or "pending",
        }
        for order in orders
    ]


def get_popular_products(limit=4):
    rows = (
        db.session.query(Product.id, Product.name, func.sum(OrderItem.quantity).label("ventas"))
        .join(OrderItem, OrderItem.product_id == Product.id)
        .group_by(Product.id, Product.name)
        .order_by(func.sum(OrderItem.quantity).desc())
        .limit(limit)
        .all()
    )
    return [{"id": id, "nombre": name, "ventas": int(ventas or 0)} for id, name, ventas in rows]


def last_months(now, count=8):
    """(año, mes) de los últimos `count` meses, del más antiguo al actual"""
    months = []
    year, month = now.year, now.month
    for _ in range(count):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


def get_monthly_sales(now=None):
    """Pedidos pagados de los últimos 8 meses agrupados por mes"""
    now = now or datetime.utcnow()
    months = last_months(now)
    first_year, first_month = months[0]
    since = datetime(first_year, first_month, 1)

    totals = {}
    orders = Order.query.filter(Order.payment_status == "paid", Order.created_at >= since).all()
    for order in orders:
        key = (order.created_at.year, order.created_at.month)
        totals[key] = totals.get(key, 0) + (order.total_amount or 0)

    return [
        {"mes": MONTH_ABBR[month - 1], "ventas": round(totals.get((year, month), 0))}
        for year, month in months
    ]


def get_products_by_category():
    counts = {}
    for product in Product.query.filter_by(is_active=True).order_by(Product.id).all():
        name = product.category.name if product.category else "Sin categoría"
        counts[name] = counts.get(name, 0) + 1

    return [
        {"categoria": name, "cantidad": count, "color": CATEGORY_COLORS[index % len(CATEGORY_COLORS)]}
        for index, (name, count) in enumerate(counts.items())
    ]


@bp.route("/metrics", methods=["GET"])
@roles_required("admin")
def metrics():
    return jsonify(get_metrics())


@bp.route("/recent-orders", methods=["GET"])
@roles_required("admin")
def recent_orders():
    return jsonify(get_recent_orders(parse_int(request.args.get("limit"), default=5)))


@bp.route("/popular-products", methods=["GET"])
@roles_required("admin")
def popular_products():
    return jsonify(get_popular_products(parse_int(request.args.get("limit"), default=4)))


@bp.route("/monthly-sales", methods=["GET"])
@roles_required("admin")
def monthly_sales():
    return jsonify(get_monthly_sales())


@bp.route("/products-by-category", methods=["GET"])
@roles_required("admin")
def products_by_category():
    return jsonify(get_products_by_category())


@bp.route("", methods=["GET"])
@roles_required("admin")
def dashboard_data():
    """Todo lo que necesita la página principal del panel en una sola llamada"""
    try:
        data = {
            "metricas": get_metrics(),
            "pedidosRecientes": get_recent_orders(5),
            "productosPopulares": get_popular_products(4),
            "ventasMensuales": get_monthly_sales(),
            "productosPorCategoria": get_products_by_category(),
        }
    except Exception as e:
        logger.error(f"❌ Error obteniendo datos del dashboard: {e}")
        return jsonify({"error": f"Error al obtener datos del dashboard: {str(e)}"}), 500

    return jsonify(data)
