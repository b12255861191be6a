"""
API: Usuarios
Gestión de perfiles desde el dashboard (clientes, personal, supervisores
y administradores), permisos del personal y perfil propio
"""
import logging
from datetime import datetime
from flask import Blueprint, request, jsonify
from sqlalchemy import or_
from ..db import db
from ..models import (
    Profile, ROLES, StaffRole, PERMISSION_FIELDS, Cart, CartItem, Order, Reservation,
    Notification, ShippingAddress, PaymentMethod, StaffAttendance, StaffSchedule,
)
from ..utils.auth import get_current_user, login_required, roles_required
from ..utils.parsing import parse_int, parse_bool, parse_date

logger = logging.getLogger(__name__)

bp = Blueprint("users", __name__)

PROFILE_FIELDS = (
    "first_name", "last_name", "dni_ruc", "phone",
    "address", "department", "province", "district",
)


def validate_new_user(data):
    """Mensaje de error para un alta inválida, o None"""
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if not email or not password:
        return "Email y contraseña son requeridos"
    if len(password) < 6:
        return "La contraseña debe tener al menos 6 caracteres"
    if not data.get("first_name") or not data.get("last_name") or not data.get("dni_ruc"):
        return "Nombre, apellido y DNI son requeridos"
    if Profile.query.filter_by(email=email).first():
        return f"El email {email} ya está registrado en el sistema"
    return None


def apply_profile_fields(user, data):
    """Copia los datos personales presentes en el payload"""
    for field in PROFILE_FIELDS:
        if field in data:
            value = data.get(field)
            setattr(user, field, value.strip() if isinstance(value, str) else value)
    if "birth_date" in data:
        user.birth_date = parse_date(data.get("birth_date"))


def validate_profile_update(data):
    dni = data.get("dni_ruc")
    if dni and len(str(dni).strip()) < 8:
        return "El DNI debe tener al menos 8 dígitos"
    return None


def best_effort_delete(label, query):
    """Borra filas relacionadas; si falla se registra y se sigue"""
    try:
        with db.session.begin_nested():
            rows = query.all()
            for row in rows:
                db.session.delete(row)
        logger.info(f"🗑️ {label}: {len(rows)} eliminados")
    except Exception as e:
        logger.warning(f"⚠️ No se pudo eliminar {label}: {e}")


# ============================================
# PERFIL PROPIO
# ============================================

@bp.route("/me", methods=["GET"])
@login_required
def get_my_profile():
    return jsonify(get_current_user().to_dict())


@bp.route("/me", methods=["PUT"])
@login_required
def update_my_profile():
    """El usuario edita sus datos personales (no rol ni email)"""
    user = get_current_user()
    data = request.json or {}

    error = validate_profile_update(data)
    if error:
        return jsonify({"error": error}), 400

    try:
        apply_profile_fields(user, data)
        db.session.commit()
    except ValueError:
        db.session.rollback()
        return jsonify({"error": "Formato de fecha inválido"}), 400
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error actualizando perfil {user.id}: {e}")
        return jsonify({"error": f"Error al actualizar perfil: {str(e)}"}), 500

    return jsonify(user.to_dict())


# ============================================
# ADMINISTRACIÓN
# ============================================

@bp.route("", methods=["GET"])
@roles_required("admin")
def get_users():
    """Filtros: role, buscar (nombre, apellido o email)"""
    query = Profile.query

    role = request.args.get("role")
    if role:
        query = query.filter_by(role=role)

    term = (request.args.get("buscar") or "").strip()
    if term:
        like = f"%{term}%"
        query = query.filter(or_(
            Profile.first_name.ilike(like),
            Profile.last_name.ilike(like),
            Profile.email.ilike(like),
        ))

    users = query.order_by(Profile.created_at.desc(), Profile.id.desc()).all()
    return jsonify([u.to_dict() for u in users])


@bp.route("/search", methods=["GET"])
@roles_required("admin", "staff", "supervisor")
def search_users():
    term = (request.args.get("q") or "").strip()
    limit = parse_int(request.args.get("limit"), default=10)
    if not term:
        return jsonify([])

    like = f"%{term}%"
    users = (
        Profile.query.filter(or_(
            Profile.first_name.ilike(like),
            Profile.last_name.ilike(like),
            Profile.email.ilike(like),
            Profile.phone.ilike(like),
        ))
        .limit(limit)
        .all()
    )
    return jsonify([u.to_dict() for u in users])


@bp.route("/staff", methods=["GET"])
@roles_required("admin")
def get_staff():
    staff = Profile.query.filter_by(role="staff").order_by(Profile.first_name).all()
    return jsonify([
        {**s.to_dict(), "permissions": s.permissions.to_dict() if s.permissions else None}
        for s in staff
    ])


@bp.route("/stats", methods=["GET"])
@roles_required("admin")
def get_user_stats():
    month_start = datetime.utcnow().replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return jsonify({
        "total_usuarios": Profile.query.count(),
        "total_clientes": Profile.query.filter_by(role="customer").count(),
        "total_staff": Profile.query.filter_by(role="staff").count(),
        "total_supervisores": Profile.query.filter_by(role="supervisor").count(),
        "nuevos_este_mes": Profile.query.filter(Profile.created_at >= month_start).count(),
    })


@bp.route("", methods=["POST"])
@roles_required("admin")
def create_user():
    data = request.json or {}

    error = validate_new_user(data)
    if error:
        return jsonify({"error": error}), 400

    role = data.get("role") or "customer"
    if role not in ROLES:
        return jsonify({"error": f"Rol inválido: {role}"}), 400

    try:
        user = Profile(email=data["email"].strip().lower(), role=role)
        user.set_password(data["password"])
        apply_profile_fields(user, data)
        db.session.add(user)
        db.session.commit()
    except ValueError:
        db.session.rollback()
        return jsonify({"error": "Formato de fecha inválido"}), 400
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error creando usuario: {e}")
        return jsonify({"error": f"Error al crear usuario: {str(e)}"}), 500

    logger.info(f"✅ Usuario creado: {user.email} ({user.role})")
    return jsonify(user.to_dict()), 201


@bp.route("/<int:id>", methods=["GET"])
@roles_required("admin")
def get_user(id):
    return jsonify(Profile.query.get_or_404(id).to_dict())


@bp.route("/<int:id>", methods=["PUT"])
@roles_required("admin")
def update_user(id):
    user = Profile.query.get_or_404(id)
    data = request.json or {}

    error = validate_profile_update(data)
    if error:
        return jsonify({"error": error}), 400

    if data.get("role") and data["role"] not in ROLES:
        return jsonify({"error": f"Rol inválido: {data['role']}"}), 400

    try:
        apply_profile_fields(user, data)
        if data.get("role"):
            user.role = data["role"]
        db.session.commit()
    except ValueError:
        db.session.rollback()
        return jsonify({"error": "Formato de fecha inválido"}), 400
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error actualizando usuario {id}: {e}")
        return jsonify({"error": f"Error al actualizar usuario: {str(e)}"}), 500

    return jsonify(user.to_dict())


@bp.route("/<int:id>/role", methods=["PUT"])
@roles_required("admin")
def update_user_role(id):
    user = Profile.query.get_or_404(id)
    role = (request.json or {}).get("role")

    if role not in ROLES:
        return jsonify({"error": f"Rol inválido: {role}"}), 400

    user.role = role
    db.session.commit()
    logger.info(f"🔐 Rol de {user.email} cambiado a {role}")
    return jsonify(user.to_dict())


@bp.route("/<int:id>/permissions", methods=["GET"])
@roles_required("admin")
def get_staff_permissions(id):
    user = Profile.query.get_or_404(id)
    return jsonify(user.permissions.to_dict() if user.permissions else None)


@bp.route("/<int:id>/permissions", methods=["PUT"])
@roles_required("admin")
def update_staff_permissions(id):
    """Crea o actualiza la fila de permisos del trabajador"""
    Profile.query.get_or_404(id)
    data = request.json or {}

    try:
        permissions = StaffRole.query.filter_by(staff_id=id).first()
        if not permissions:
            permissions = StaffRole(staff_id=id)
            db.session.add(permissions)

        for field in PERMISSION_FIELDS:
            if field in data:
                setattr(permissions, field, parse_bool(data.get(field)))

        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error actualizando permisos de {id}: {e}")
        return jsonify({"error": f"Error al actualizar permisos: {str(e)}"}), 500

    return jsonify(permissions.to_dict())


@bp.route("/<int:id>", methods=["DELETE"])
@roles_required("admin")
def delete_user(id):
    """
    Elimina el perfil y, en lo posible, sus datos relacionados.
    Cada limpieza es independiente: si una falla se registra y se continúa.
    """
    user = Profile.query.get_or_404(id)
    if user.id == get_current_user().id:
        return jsonify({"error": "No puedes eliminar tu propia cuenta"}), 400

    best_effort_delete("items del carrito", CartItem.query.join(Cart).filter(Cart.user_id == id))
    best_effort_delete("carrito", Cart.query.filter_by(user_id=id))
    best_effort_delete("pedidos", Order.query.filter_by(customer_id=id))
    best_effort_delete("reservaciones", Reservation.query.filter_by(customer_id=id))
    best_effort_delete("notificaciones", Notification.query.filter_by(user_id=id))
    best_effort_delete("direcciones", ShippingAddress.query.filter_by(user_id=id))
    best_effort_delete("métodos de pago", PaymentMethod.query.filter_by(user_id=id))
    best_effort_delete("asistencia", StaffAttendance.query.filter_by(staff_id=id))
    best_effort_delete("horarios asignados", StaffSchedule.query.filter_by(staff_id=id))
    best_effort_delete("permisos", StaffRole.query.filter_by(staff_id=id))

    try:
        db.session.delete(user)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error eliminando perfil {id}: {e}")
        return jsonify({"error": f"Error al eliminar perfil: {str(e)}"}), 500

    logger.info(f"🗑️ Usuario {id} eliminado")
    return jsonify({"message": "Usuario eliminado"})
