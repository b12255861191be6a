"""
API: Notificaciones
Avisos al cliente (cambios de estado de pedidos y reservaciones)
"""
import logging
from datetime import datetime, timedelta
from flask import Blueprint, request, jsonify
from ..db import db
from ..models import Notification, Profile
from ..utils.auth import get_current_user, login_required, roles_required
from ..utils.parsing import parse_int

logger = logging.getLogger(__name__)

bp = Blueprint("notifications", __name__)


def create_notification(user_id, type, title, message, related_id=None):
    """
    Agrega una notificación a la sesión actual; el commit queda a cargo
    de quien llama para que viaje junto con el cambio que la originó.
    """
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        related_id=related_id,
    )
    db.session.add(notification)
    logger.info(f"🔔 Notificación {type} para usuario {user_id}")
    return notification


def own_notification_or_404(id):
    return Notification.query.filter_by(id=id, user_id=get_current_user().id).first_or_404()


@bp.route("", methods=["GET"])
@login_required
def get_notifications():
    limit = parse_int(request.args.get("limit"), default=10)
    notifications = (
        Notification.query.filter_by(user_id=get_current_user().id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
        .all()
    )
    return jsonify([n.to_dict() for n in notifications])


@bp.route("/unread-count", methods=["GET"])
@login_required
def get_unread_count():
    count = Notification.query.filter_by(user_id=get_current_user().id, is_read=False).count()
    return jsonify({"count": count})


@bp.route("/<int:id>/read", methods=["POST"])
@login_required
def mark_as_read(id):
    notification = own_notification_or_404(id)
    notification.is_read = True
    db.session.commit()
    return jsonify(notification.to_dict())


@bp.route("/read-all", methods=["POST"])
@login_required
def mark_all_as_read():
    updated = (
        Notification.query.filter_by(user_id=get_current_user().id, is_read=False)
        .update({"is_read": True})
    )
    db.session.commit()
    return jsonify({"message": "Notificaciones marcadas como leídas", "updated": updated})


@bp.route("", methods=["POST"])
@roles_required("admin")
def post_notification():
    data = request.json or {}
    user_id = parse_int(data.get("user_id"))

    if not user_id or not data.get("title") or not data.get("message"):
        return jsonify({"error": "user_id, title y message son requeridos"}), 400

    if not Profile.query.get(user_id):
        return jsonify({"error": "Usuario no encontrado"}), 404

    notification = create_notification(
        user_id=user_id,
        type=data.get("type", "info"),
        title=data["title"],
        message=data["message"],
        related_id=parse_int(data.get("related_id")),
    )
    db.session.commit()
    return jsonify(notification.to_dict()), 201


@bp.route("/<int:id>", methods=["DELETE"])
@login_required
def delete_notification(id):
    notification = own_notification_or_404(id)
    db.session.delete(notification)
    db.session.commit()
    return jsonify({"message": "Notificación eliminada"})


@bp.route("/type/<type>", methods=["GET"])
@login_required
def get_notifications_by_type(type):
    notifications = (
        Notification.query.filter_by(user_id=get_current_user().id, type=type)
        .order_by(Notification.created_at.desc())
        .all()
    )
    return jsonify([n.to_dict() for n in notifications])


@bp.route("/recent", methods=["GET"])
@login_required
def get_recent_notifications():
    """Últimos 7 días"""
    since = datetime.utcnow() - timedelta(days=7)
    notifications = (
        Notification.query.filter(
            Notification.user_id == get_current_user().id,
            Notification.created_at >= since,
        )
        .order_by(Notification.created_at.desc())
        .all()
    )
    return jsonify([n.to_dict() for n in notifications])
