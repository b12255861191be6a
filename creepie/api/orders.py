"""
API: Pedidos
Checkout, seguimiento de estado y pago, estadísticas para el panel
"""
import logging
from datetime import datetime, timedelta
from flask import Blueprint, request, jsonify
from sqlalchemy import func
from ..db import db
from ..models import Order, OrderItem, Product, ProductSize, Cart, CartItem, ORDER_STATUSES, PAYMENT_STATUSES
from ..utils.auth import get_current_user, login_required, roles_required, is_staff_member
from ..utils.parsing import parse_int, parse_float, parse_datetime
from ..utils.text import format_price, products_text
from .cart import calculate_unit_price
from .notifications import create_notification

logger = logging.getLogger(__name__)

bp = Blueprint("orders", __name__)

STAFF_ROLES = ("admin", "staff", "supervisor")

# estado -> (tipo, título, plantilla del mensaje)
ORDER_NOTIFICATIONS = {
    "confirmed": (
        "order_confirmed", "Pedido Confirmado",
        "Tu pedido de {products} ha sido confirmado. Pronto comenzaremos a prepararlo. Total: {total}",
    ),
    "preparing": (
        "order_preparing", "Pedido en Preparación",
        "Tu pedido de {products} está siendo preparado con mucho cuidado. ¡Pronto estará listo!",
    ),
    "on_the_way": (
        "order_on_the_way", "Pedido en Camino",
        "¡Tu pedido de {products} está en camino! Llegará aproximadamente a las {eta}",
    ),
    "completed": (
        "order_completed", "Pedido Entregado",
        "¡Tu pedido ha sido entregado! Gracias por tu compra de {products}. ¡Esperamos que lo disfrutes!",
    ),
    "cancelled": (
        "order_cancelled", "Pedido Cancelado",
        "Tu pedido de {products} ha sido cancelado. Si tienes alguna duda, contáctanos.",
    ),
}


def notify_status_change(order):
    if order.status not in ORDER_NOTIFICATIONS:
        return None

    type, title, template = ORDER_NOTIFICATIONS[order.status]
    message = template.format(
        products=products_text([item.product.name for item in order.items if item.product]),
        total=format_price(order.total_amount),
        eta=order.estimated_delivery.strftime("%H:%M") if order.estimated_delivery else "pronto",
    )
    return create_notification(order.customer_id, type, title, message, related_id=order.id)


def items_from_payload(raw_items):
    """Normaliza los items del request; devuelve (items, error)"""
    items = []
    for raw in raw_items:
        product = Product.query.get(parse_int(raw.get("product_id"), default=0))
        if not product:
            return None, "Producto no encontrado"

        quantity = parse_int(raw.get("quantity"), default=0)
        if quantity <= 0:
            return None, "La cantidad debe ser mayor a 0"

        size_id = parse_int(raw.get("size_id"))
        unit_price = parse_float(raw.get("unit_price"))
        if unit_price is None:
            size = ProductSize.query.get(size_id) if size_id else None
            unit_price = calculate_unit_price(product, size)

        items.append({
            "product_id": product.id,
            "size_id": size_id,
            "quantity": quantity,
            "unit_price": unit_price,
        })
    return items, None


def can_see_order(user, order):
    return is_staff_member(user) or order.customer_id == user.id


@bp.route("", methods=["POST"])
@login_required
def create_order():
    """
    Crea un pedido. Sin "items" se usa el carrito del usuario y se vacía.
    total = Σ cantidad × precio unitario; entrega estimada en 1 hora.
    """
    user = get_current_user()
    data = request.json or {}

    customer_id = user.id
    if user.role == "admin" and data.get("customer_id"):
        customer_id = parse_int(data.get("customer_id"), default=user.id)

    cart = None
    if data.get("items"):
        items, error = items_from_payload(data["items"])
        if error:
            return jsonify({"error": error}), 400
    else:
        cart = Cart.query.filter_by(user_id=user.id).first()
        items = [
            {
                "product_id": ci.product_id,
                "size_id": ci.size_id,
                "quantity": ci.quantity,
                "unit_price": ci.unit_price,
            }
            for ci in (cart.items if cart else [])
        ]

    if not items:
        return jsonify({"error": "El pedido debe tener al menos un producto"}), 400

    try:
        order = Order(
            customer_id=customer_id,
            total_amount=round(sum(i["quantity"] * i["unit_price"] for i in items), 2),
            status="pending",
            payment_status="pending",
            payment_method=data.get("payment_method"),
            address=data.get("address"),
            notes=data.get("notes") or "",
            estimated_delivery=datetime.utcnow() + timedelta(hours=1),
        )
        db.session.add(order)
        db.session.flush()

        for i in items:
            db.session.add(OrderItem(
                order_id=order.id,
                product_id=i["product_id"],
                size_id=i["size_id"],
                quantity=i["quantity"],
                unit_price=i["unit_price"],
                subtotal=round(i["quantity"] * i["unit_price"], 2),
            ))

        if cart:
            CartItem.query.filter_by(cart_id=cart.id).delete()

        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error creando pedido: {e}")
        return jsonify({"error": f"Error al crear pedido: {str(e)}"}), 500

    logger.info(f"🧁 Pedido {order.id} creado por {customer_id}: {format_price(order.total_amount)}")
    return jsonify(order.to_dict(include_items=True)), 201


@bp.route("", methods=["GET"])
@roles_required(*STAFF_ROLES)
def get_orders():
    """Todos los pedidos (filtros: status, fecha_inicio, fecha_fin)"""
    query = Order.query

    status = request.args.get("status")
    if status:
        query = query.filter_by(status=status)

    try:
        start = parse_datetime(request.args.get("fecha_inicio"))
        end = parse_datetime(request.args.get("fecha_fin"))
    except ValueError:
        return jsonify({"error": "Formato de fecha inválido"}), 400

    if start:
        query = query.filter(Order.created_at >= start)
    if end:
        query = query.filter(Order.created_at <= end)

    orders = query.order_by(Order.created_at.desc()).all()
    return jsonify([o.to_dict(include_items=True, include_customer=True) for o in orders])


@bp.route("/mine", methods=["GET"])
@login_required
def get_my_orders():
    orders = (
        Order.query.filter_by(customer_id=get_current_user().id)
        .order_by(Order.created_at.desc())
        .all()
    )
    return jsonify([o.to_dict(include_items=True) for o in orders])


@bp.route("/customer/<int:customer_id>", methods=["GET"])
@roles_required(*STAFF_ROLES)
def get_customer_orders(customer_id):
    orders = Order.query.filter_by(customer_id=customer_id).order_by(Order.created_at.desc()).all()
    return jsonify([o.to_dict(include_items=True) for o in orders])


@bp.route("/stats", methods=["GET"])
@roles_required(*STAFF_ROLES)
def get_order_stats():
    """Total de pedidos, pendientes e ingresos pagados de hoy"""
    today = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
    tomorrow = today + timedelta(days=1)

    revenue_today = (
        db.session.query(func.coalesce(func.sum(Order.total_amount), 0))
        .filter(
            Order.created_at >= today,
            Order.created_at < tomorrow,
            Order.payment_status == "paid",
        )
        .scalar()
    )

    return jsonify({
        "total_pedidos": Order.query.count(),
        "pedidos_pendientes": Order.query.filter_by(status="pending").count(),
        "ingresos_hoy": float(revenue_today or 0),
    })


@bp.route("/recent", methods=["GET"])
@roles_required(*STAFF_ROLES)
def get_recent_orders():
    orders = Order.query.order_by(Order.created_at.desc()).limit(10).all()
    return jsonify([o.to_dict(include_customer=True) for o in orders])


@bp.route("/<int:id>", methods=["GET"])
@login_required
def get_order(id):
    order = Order.query.get_or_404(id)
    if not can_see_order(get_current_user(), order):
        return jsonify({"error": "Pedido no encontrado"}), 404
    return jsonify(order.to_dict(include_items=True, include_customer=True))


@bp.route("/<int:id>/status", methods=["PUT"])
@roles_required(*STAFF_ROLES)
def update_order_status(id):
    """Cambia el estado y avisa al cliente"""
    order = Order.query.get_or_404(id)
    status = (request.json or {}).get("status")

    if status not in ORDER_STATUSES:
        return jsonify({"error": f"Estado inválido: {status}"}), 400

    try:
        order.status = status
        notify_status_change(order)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error actualizando estado del pedido {id}: {e}")
        return jsonify({"error": f"Error al actualizar estado del pedido: {str(e)}"}), 500

    return jsonify(order.to_dict(include_items=True, include_customer=True))


@bp.route("/<int:id>/payment-status", methods=["PUT"])
@roles_required(*STAFF_ROLES)
def update_payment_status(id):
    order = Order.query.get_or_404(id)
    payment_status = (request.json or {}).get("payment_status")

    if payment_status not in PAYMENT_STATUSES:
        return jsonify({"error": f"Estado de pago inválido: {payment_status}"}), 400

    order.payment_status = payment_status
    db.session.commit()
    return jsonify(order.to_dict())


@bp.route("/<int:id>/cancel", methods=["POST"])
@login_required
def cancel_order(id):
    order = Order.query.get_or_404(id)
    if not can_see_order(get_current_user(), order):
        return jsonify({"error": "Pedido no encontrado"}), 404

    order.status = "cancelled"
    db.session.commit()
    return jsonify(order.to_dict())
