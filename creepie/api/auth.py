"""
API: Autenticación
Login con email y contraseña (JWT), registro de clientes y acceso al dashboard
"""
import logging
from flask import Blueprint, request, jsonify
from ..db import db
from ..models import Profile
from ..utils.auth import create_token, decode_token, get_current_user, login_required
from ..utils.permissions import is_route_allowed, default_route_for_role
from .users import validate_new_user, apply_profile_fields

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__)


@bp.route("/login", methods=["POST"])
def login():
    """Login de cualquier usuario registrado"""
    data = request.json or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    user = Profile.query.filter_by(email=email).first()

    if user and user.check_password(password):
        logger.info(f"🔑 Login: {email} ({user.role})")
        return jsonify({
            "token": create_token(user),
            "user": user.to_dict(),
            "redirect_to": default_route_for_role(user.role) if user.role != "customer" else "/",
        })

    logger.info(f"⚠️ Login fallido para {email}")
    return jsonify({"error": "Email o contraseña incorrectos"}), 401


@bp.route("/register", methods=["POST"])
def register():
    """Registro público: siempre crea un cliente"""
    data = request.json or {}

    error = validate_new_user(data)
    if error:
        return jsonify({"error": error}), 400

    try:
        user = Profile(email=data["email"].strip().lower(), role="customer")
        user.set_password(data["password"])
        apply_profile_fields(user, data)
        db.session.add(user)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error registrando usuario: {e}")
        return jsonify({"error": f"Error al crear usuario: {str(e)}"}), 500

    return jsonify({"token": create_token(user), "user": user.to_dict()}), 201


@bp.route("/verify", methods=["GET"])
def verify():
    """Verifica si el token es válido"""
    auth_header = request.headers.get("Authorization", "")

    if not auth_header.startswith("Bearer "):
        return jsonify({"valid": False}), 401

    payload = decode_token(auth_header.split(" ", 1)[1])
    if not payload:
        return jsonify({"valid": False}), 401

    user = get_current_user()
    if user is None:
        return jsonify({"valid": False}), 401

    return jsonify({"valid": True, "user": user.to_dict()})


@bp.route("/me", methods=["GET"])
@login_required
def me():
    return jsonify(get_current_user().to_dict())


@bp.route("/route-access", methods=["GET"])
@login_required
def route_access():
    """Indica si el usuario actual puede entrar a una ruta del dashboard"""
    user = get_current_user()
    path = request.args.get("path", "/dashboard")
    allowed = is_route_allowed(path, user.role)
    return jsonify({
        "path": path,
        "role": user.role,
        "allowed": allowed,
        "redirect_to": None if allowed else default_route_for_role(user.role),
    })
