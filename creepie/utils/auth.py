"""
Utilidad: Autenticación con JWT
Emisión/lectura de tokens Bearer y decoradores de acceso por rol
"""
import datetime
import logging
from functools import wraps

import jwt
from flask import current_app, g, jsonify, request

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = "Usuario no autenticado"
FORBIDDEN = "No tienes permisos para realizar esta acción"


def create_token(profile):
    """Genera un token JWT firmado para el perfil"""
    days = current_app.config.get("JWT_EXPIRATION_DAYS", 7)
    payload = {
        "sub": str(profile.id),
        "email": profile.email,
        "role": profile.role,
        "exp": datetime.datetime.utcnow() + datetime.timedelta(days=days),
    }
    return jwt.encode(payload, current_app.config.get("SECRET_KEY"), algorithm="HS256")


def decode_token(token):
    """Devuelve el payload o None si el token es inválido o expiró"""
    try:
        return jwt.decode(token, current_app.config.get("SECRET_KEY"), algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        logger.info("⚠️ Token expirado")
    except jwt.InvalidTokenError as e:
        logger.info(f"⚠️ Token inválido: {e}")
    return None


def get_current_user():
    """Perfil asociado al header Authorization, o None"""
    from ..models import Profile

    user = None
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        payload = decode_token(auth_header.split(" ", 1)[1])
        if payload and payload.get("sub"):
            user = Profile.query.get(int(payload["sub"]))

    g.current_user = user
    return user


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if get_current_user() is None:
            return jsonify({"error": NOT_AUTHENTICATED}), 401
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles, message=FORBIDDEN):
    """Solo deja pasar a usuarios autenticados con alguno de los roles"""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = get_current_user()
            if user is None:
                return jsonify({"error": NOT_AUTHENTICATED}), 401
            if user.role not in roles:
                return jsonify({"error": message}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


def is_staff_member(user):
    return user is not None and user.role in ("admin", "staff", "supervisor")
