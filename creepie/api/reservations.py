"""
API: Reservaciones
Pedidos programados para una fecha y hora. Las reservaciones de un mismo
cliente, fecha y hora forman un grupo: se listan, cambian de estado y se
eliminan juntas.
"""
import logging
from datetime import datetime
from flask import Blueprint, request, jsonify
from ..db import db
from ..models import Reservation, Product, ProductSize, Profile, RESERVATION_STATUSES
from ..utils.auth import get_current_user, login_required, roles_required, is_staff_member
from ..utils.parsing import parse_int, parse_float, parse_date
from .notifications import create_notification

logger = logging.getLogger(__name__)

bp = Blueprint("reservations", __name__)

STAFF_ROLES = ("admin", "staff", "supervisor")
OPEN_STATUSES = ("pending", "confirmed")

# Horarios de atención: cada 30 minutos de 09:00 a 20:30
SLOT_START_HOUR = 9
SLOT_END_HOUR = 21

RESERVATION_NOTIFICATIONS = {
    "confirmed": (
        "reservation_confirmed", "Reservación Confirmada",
        "Tu reservación de {products} para el {date} a las {time} ha sido confirmada. ¡Te esperamos!",
    ),
    "preparing": (
        "reservation_preparing", "Reservación en Preparación",
        "Tu reservación de {products} esta siendo preparada.",
    ),
    "on_the_way": (
        "reservation_on_the_way", "Reservación En Camino",
        "Tu reservación de {products} esta en camino a ser entregado.",
    ),
    "completed": (
        "reservation_completed", "Reservación Completada",
        "Gracias por tu compra de {products}. ¡Esperamos que lo hayas disfrutado!",
    ),
    "cancelled": (
        "reservation_cancelled", "Reservación Cancelada",
        "Tu reservación de {products} para el {date} ha sido cancelada.",
    ),
}


def time_slots():
    return [
        f"{hour:02d}:{minute:02d}"
        for hour in range(SLOT_START_HOUR, SLOT_END_HOUR)
        for minute in (0, 30)
    ]


def normalize_time(value):
    """"9:00" o "09:00:00" -> "09:00"; ValueError si no es una hora válida"""
    hour_minute = ":".join(str(value).strip().split(":")[:2])
    return datetime.strptime(hour_minute, "%H:%M").strftime("%H:%M")


def is_past(reservation_date, reservation_time):
    hour, minute = (int(part) for part in reservation_time.split(":")[:2])
    moment = datetime(reservation_date.year, reservation_date.month, reservation_date.day, hour, minute)
    return moment < datetime.utcnow()


def parse_schedule(data):
    """Fecha y hora de la reservación; devuelve (fecha, hora, error)"""
    try:
        reservation_date = parse_date(data.get("reservation_date"))
    except ValueError:
        return None, None, "Formato de fecha inválido"

    raw_time = (data.get("reservation_time") or "").strip()
    if not reservation_date or not raw_time:
        return None, None, "La fecha y hora de la reservación son requeridas"

    try:
        reservation_time = normalize_time(raw_time)
        past = is_past(reservation_date, reservation_time)
    except ValueError:
        return None, None, "Formato de hora inválido"

    if past:
        return None, None, "No se pueden hacer reservaciones en fechas pasadas"
    return reservation_date, reservation_time, None


def resolve_customer(user, data):
    """El personal puede reservar a nombre de otro cliente"""
    customer_id = parse_int(data.get("customer_id"))
    if customer_id and is_staff_member(user):
        return Profile.query.get(customer_id)
    return user


def update_phone(customer, phone):
    if phone and customer.phone != phone:
        customer.phone = phone


def group_reservations(reservations):
    """Agrupa por (cliente, fecha, hora) conservando el orden de llegada"""
    groups = {}
    for r in reservations:
        group = groups.get(r.group_key)
        if group is None:
            group = groups[r.group_key] = {
                "id": r.id,
                "customer_id": r.customer_id,
                "customer": r.customer.to_summary() if r.customer else None,
                "reservation_date": r.reservation_date.isoformat(),
                "reservation_time": r.reservation_time,
                "status": r.status,
                "created_at": r.created_at.isoformat() if r.created_at else None,
                "items": [],
                "total_amount_combined": 0,
            }
        group["items"].append({
            "id": r.id,
            "product_id": r.product_id,
            "size_id": r.size_id,
            "quantity": r.quantity,
            "special_requests": r.special_requests,
            "total_amount": r.total_amount,
            "product": r.to_dict()["product"],
            "size": r.size.to_summary() if r.size else None,
        })
        group["total_amount_combined"] += r.total_amount or 0
    return list(groups.values())


def group_of(reservation):
    return Reservation.query.filter_by(
        customer_id=reservation.customer_id,
        reservation_date=reservation.reservation_date,
        reservation_time=reservation.reservation_time,
    ).order_by(Reservation.id).all()


def notify_group_status(group, status):
    if not group or status not in RESERVATION_NOTIFICATIONS:
        return None

    first = group[0]
    type, title, template = RESERVATION_NOTIFICATIONS[status]
    message = template.format(
        products=", ".join(r.product.name for r in group if r.product),
        date=first.reservation_date.isoformat(),
        time=first.reservation_time,
    )
    return create_notification(first.customer_id, type, title, message, related_id=first.id)


# ============================================
# CREACIÓN
# ============================================

@bp.route("", methods=["POST"])
@login_required
def create_reservation():
    """
    Reserva un producto. total = (precio + adicional del tamaño) × cantidad
    """
    data = request.json or {}

    reservation_date, reservation_time, error = parse_schedule(data)
    if error:
        return jsonify({"error": error}), 400

    product = Product.query.get(parse_int(data.get("product_id"), default=0))
    if not product:
        return jsonify({"error": "Error al obtener información del producto"}), 404

    quantity = parse_int(data.get("quantity"), default=1)
    if quantity <= 0:
        return jsonify({"error": "La cantidad debe ser mayor a 0"}), 400

    customer = resolve_customer(get_current_user(), data)
    if not customer:
        return jsonify({"error": "Cliente no encontrado"}), 404

    size_id = parse_int(data.get("size_id"))
    size = ProductSize.query.get(size_id) if size_id else None
    unit_price = (product.price or 0) + (size.additional_price or 0 if size else 0)

    try:
        update_phone(customer, data.get("customer_phone"))
        reservation = Reservation(
            customer_id=customer.id,
            product_id=product.id,
            size_id=size.id if size else None,
            reservation_date=reservation_date,
            reservation_time=reservation_time,
            quantity=quantity,
            special_requests=data.get("special_requests") or "",
            status="pending",
            total_amount=round(unit_price * quantity, 2),
        )
        db.session.add(reservation)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error creando reservación: {e}")
        return jsonify({"error": f"Error al crear reservación: {str(e)}"}), 500

    logger.info(f"📆 Reservación {reservation.id} para {reservation_date} {reservation_time}")
    return jsonify(reservation.to_dict()), 201


@bp.route("/multiple", methods=["POST"])
@login_required
def create_multiple_reservations():
    """Checkout del carrito como reservación: una fila por producto"""
    data = request.json or {}
    items = data.get("items") or []

    reservation_date, reservation_time, error = parse_schedule(data)
    if error:
        return jsonify({"error": error}), 400

    if not items:
        return jsonify({"error": "La reservación debe tener al menos un producto"}), 400

    customer = resolve_customer(get_current_user(), data)
    if not customer:
        return jsonify({"error": "Cliente no encontrado"}), 404

    base_requests = data.get("special_requests") or ""
    created = []
    try:
        update_phone(customer, data.get("customer_phone"))

        for item in items:
            product = Product.query.get(parse_int(item.get("product_id"), default=0))
            if not product:
                db.session.rollback()
                return jsonify({"error": "Producto no encontrado"}), 404

            quantity = parse_int(item.get("quantity"), default=1)
            if quantity <= 0:
                db.session.rollback()
                return jsonify({"error": "La cantidad debe ser mayor a 0"}), 400

            size_id = parse_int(item.get("size_id"))
            size = ProductSize.query.get(size_id) if size_id else None

            total = parse_float(item.get("total_price"))
            if total is None:
                unit_price = parse_float(item.get("unit_price"))
                if unit_price is None:
                    unit_price = (product.price or 0) + (size.additional_price or 0 if size else 0)
                total = unit_price * quantity

            if total < 0:
                db.session.rollback()
                return jsonify({"error": "El precio no puede ser negativo"}), 400

            size_name = item.get("size_name") or (size.name if size else None)
            requests = base_requests + (f"\n[Tamaño: {size_name}]" if size_name else "")

            reservation = Reservation(
                customer_id=customer.id,
                product_id=product.id,
                size_id=size.id if size else None,
                reservation_date=reservation_date,
                reservation_time=reservation_time,
                quantity=quantity,
                special_requests=requests,
                status="pending",
                total_amount=round(total, 2),
            )
            db.session.add(reservation)
            created.append(reservation)

        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error creando reservaciones: {e}")
        return jsonify({"error": f"Error al crear reservaciones: {str(e)}"}), 500

    return jsonify([r.to_dict() for r in created]), 201


# ============================================
# CONSULTAS
# ============================================

@bp.route("", methods=["GET"])
@roles_required(*STAFF_ROLES)
def get_reservations():
    """Agrupadas. Filtros: status, fecha, customer_id"""
    query = Reservation.query

    status = request.args.get("status")
    if status:
        query = query.filter_by(status=status)

    try:
        fecha = parse_date(request.args.get("fecha"))
    except ValueError:
        return jsonify({"error": "Formato de fecha inválido"}), 400
    if fecha:
        query = query.filter_by(reservation_date=fecha)

    customer_id = parse_int(request.args.get("customer_id"))
    if customer_id:
        query = query.filter_by(customer_id=customer_id)

    reservations = query.order_by(
        Reservation.reservation_date.asc(), Reservation.reservation_time.asc(), Reservation.id.asc(),
    ).all()
    return jsonify(group_reservations(reservations))


def customer_groups(customer_id):
    reservations = (
        Reservation.query.filter_by(customer_id=customer_id)
        .order_by(Reservation.reservation_date.desc(), Reservation.reservation_time.desc(), Reservation.id.asc())
        .all()
    )
    return group_reservations(reservations)


@bp.route("/mine", methods=["GET"])
@login_required
def get_my_reservations():
    return jsonify(customer_groups(get_current_user().id))


@bp.route("/customer/<int:customer_id>", methods=["GET"])
@roles_required(*STAFF_ROLES)
def get_customer_reservations(customer_id):
    return jsonify(customer_groups(customer_id))


@bp.route("/today", methods=["GET"])
@roles_required(*STAFF_ROLES)
def get_today_reservations():
    reservations = (
        Reservation.query.filter(
            Reservation.reservation_date == datetime.utcnow().date(),
            Reservation.status.in_(OPEN_STATUSES),
        )
        .order_by(Reservation.reservation_time.asc())
        .all()
    )
    return jsonify([r.to_dict() for r in reservations])


@bp.route("/range", methods=["GET"])
@roles_required(*STAFF_ROLES)
def get_reservations_by_range():
    try:
        start = parse_date(request.args.get("fecha_inicio"))
        end = parse_date(request.args.get("fecha_fin"))
    except ValueError:
        return jsonify({"error": "Formato de fecha inválido"}), 400

    if not start or not end:
        return jsonify({"error": "fecha_inicio y fecha_fin son requeridos"}), 400

    reservations = (
        Reservation.query.filter(Reservation.reservation_date >= start, Reservation.reservation_date <= end)
        .order_by(Reservation.reservation_date.asc(), Reservation.reservation_time.asc())
        .all()
    )
    return jsonify([r.to_dict() for r in reservations])


@bp.route("/stats", methods=["GET"])
@roles_required(*STAFF_ROLES)
def get_reservation_stats():
    return jsonify({
        "total_reservaciones": Reservation.query.count(),
        "reservaciones_pendientes": Reservation.query.filter_by(status="pending").count(),
        "reservaciones_hoy": Reservation.query.filter(
            Reservation.reservation_date == datetime.utcnow().date(),
            Reservation.status.in_(OPEN_STATUSES),
        ).count(),
    })


def taken_slots(reservation_date, product_id):
    rows = Reservation.query.filter(
        Reservation.reservation_date == reservation_date,
        Reservation.product_id == product_id,
        Reservation.status.in_(OPEN_STATUSES),
    ).all()
    return {r.reservation_time for r in rows}


@bp.route("/available-slots", methods=["GET"])
def get_available_slots():
    """Horarios libres para un producto en una fecha (?fecha=&product_id=)"""
    try:
        reservation_date = parse_date(request.args.get("fecha"))
    except ValueError:
        return jsonify({"error": "Formato de fecha inválido"}), 400

    product_id = parse_int(request.args.get("product_id"))
    if not reservation_date or not product_id:
        return jsonify({"error": "fecha y product_id son requeridos"}), 400

    taken = taken_slots(reservation_date, product_id)
    return jsonify([slot for slot in time_slots() if slot not in taken])


@bp.route("/check", methods=["GET"])
def check_availability():
    try:
        reservation_date = parse_date(request.args.get("fecha"))
    except ValueError:
        return jsonify({"error": "Formato de fecha inválido"}), 400

    slot = (request.args.get("hora") or "").strip()
    product_id = parse_int(request.args.get("product_id"))
    if not reservation_date or not slot or not product_id:
        return jsonify({"error": "fecha, hora y product_id son requeridos"}), 400

    try:
        slot = normalize_time(slot)
    except ValueError:
        return jsonify({"error": "Formato de hora inválido"}), 400

    return jsonify({"disponible": slot not in taken_slots(reservation_date, product_id)})


@bp.route("/products", methods=["GET"])
def get_reservable_products():
    """Productos activos con sus tamaños disponibles"""
    products = Product.query.filter_by(is_active=True).order_by(Product.name).all()
    return jsonify([
        {
            "id": p.id,
            "name": p.name,
            "price": p.price,
            "preparation_time": p.preparation_time,
            "description": p.description,
            "available_sizes": [option.to_dict() for option in p.size_options],
        }
        for p in products
    ])


@bp.route("/<int:id>", methods=["GET"])
@login_required
def get_reservation(id):
    reservation = Reservation.query.get_or_404(id)
    user = get_current_user()
    if not is_staff_member(user) and reservation.customer_id != user.id:
        return jsonify({"error": "Reservación no encontrada"}), 404
    return jsonify(reservation.to_dict())


# ============================================
# ESTADO
# ============================================

@bp.route("/<int:id>/status", methods=["PUT"])
@roles_required(*STAFF_ROLES)
def update_reservation_status(id):
    """Aplica el estado a todo el grupo y avisa al cliente una sola vez"""
    reservation = Reservation.query.get(id)
    if not reservation:
        return jsonify({"error": "No se pudo encontrar la reservación"}), 404

    status = (request.json or {}).get("status")
    if status not in RESERVATION_STATUSES:
        return jsonify({"error": f"Estado inválido: {status}"}), 400

    try:
        group = group_of(reservation)
        for r in group:
            r.status = status
        notify_group_status(group, status)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error actualizando reservación {id}: {e}")
        return jsonify({"error": f"Error al actualizar estado de reservación: {str(e)}"}), 500

    logger.info(f"📆 Grupo de reservación {id} -> {status} ({len(group)} items)")
    return jsonify([r.to_dict() for r in group])


@bp.route("/<int:id>/cancel", methods=["POST"])
@login_required
def cancel_reservation(id):
    reservation = Reservation.query.get_or_404(id)
    user = get_current_user()
    if not is_staff_member(user) and reservation.customer_id != user.id:
        return jsonify({"error": "Reservación no encontrada"}), 404

    reservation.status = "cancelled"
    db.session.commit()
    return jsonify(reservation.to_dict())


@bp.route("/<int:id>", methods=["DELETE"])
@roles_required(*STAFF_ROLES)
def delete_reservation(id):
    """Elimina todo el grupo de la reservación"""
    reservation = Reservation.query.get(id)
    if not reservation:
        return jsonify({"error": "No se pudo encontrar la reservación"}), 404

    try:
        group = group_of(reservation)
        for r in group:
            db.session.delete(r)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error eliminando reservación {id}: {e}")
        return jsonify({"error": f"Error al eliminar reservación: {str(e)}"}), 500

    return jsonify({"message": "Reservación eliminada", "deleted": len(group)})
