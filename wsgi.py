"""
Creepie - Aplicación Flask Principal
Tienda online de la pastelería y panel de administración
"""
import logging
import os
from flask import Flask, jsonify, send_from_directory
from flask_cors import CORS
from sqlalchemy.exc import SQLAlchemyError
from creepie.config import get_config
from creepie.db import db, init_db

logger = logging.getLogger(__name__)


def create_app(config_object=None):
    """Factory para crear la aplicación Flask"""
    app = Flask(__name__)

    # Cargar configuración
    app.config.from_object(config_object or get_config())

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"📍 Database URI: {app.config['SQLALCHEMY_DATABASE_URI']}")

    # Habilitar CORS
    allowed_origins = os.getenv("ALLOWED_ORIGINS", "*").split(",")
    if "*" in allowed_origins:
        CORS(app, resources={r"/api/*": {
            "origins": "*",
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
        }})
    else:
        CORS(app, resources={r"/api/*": {
            "origins": allowed_origins,
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
            "supports_credentials": True,
        }})

    # Inicializar base de datos
    if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///") and ":memory:" not in app.config["SQLALCHEMY_DATABASE_URI"]:
        os.makedirs(os.path.join(os.path.dirname(os.path.abspath(__file__)), "instance"), exist_ok=True)
    init_db(app)

    with app.app_context():
        ensure_admin(app)

        if app.config.get("SEED_DEV_DATA") and app.config["FLASK_ENV"] == "development":
            init_dev_data()

    register_blueprints(app)
    register_error_handlers(app)

    @app.route("/health")
    def health():
        return {"status": "ok", "message": "Creepie is running! 🧁"}

    @app.route("/uploads/<path:filename>")
    def serve_upload(filename):
        return send_from_directory(app.config["UPLOAD_FOLDER"], filename)

    return app


def register_blueprints(app):
    from creepie.api import (
        auth_bp, categories_bp, sizes_bp, products_bp, size_options_bp, cart_bp,
        orders_bp, payment_methods_bp, addresses_bp, notifications_bp,
        reservations_bp, attendance_bp, schedules_bp, expenses_bp, reports_bp,
        users_bp, dashboard_bp, images_bp,
    )

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(categories_bp, url_prefix="/api/categories")
    app.register_blueprint(sizes_bp, url_prefix="/api/sizes")
    app.register_blueprint(products_bp, url_prefix="/api/products")
    app.register_blueprint(size_options_bp, url_prefix="/api/products")
    app.register_blueprint(cart_bp, url_prefix="/api/cart")
    app.register_blueprint(orders_bp, url_prefix="/api/orders")
    app.register_blueprint(payment_methods_bp, url_prefix="/api/payment-methods")
    app.register_blueprint(addresses_bp, url_prefix="/api/addresses")
    app.register_blueprint(notifications_bp, url_prefix="/api/notifications")
    app.register_blueprint(reservations_bp, url_prefix="/api/reservations")
    app.register_blueprint(attendance_bp, url_prefix="/api/attendance")
    app.register_blueprint(schedules_bp, url_prefix="/api/schedules")
    app.register_blueprint(expenses_bp, url_prefix="/api/expenses")
    app.register_blueprint(reports_bp, url_prefix="/api/reports")
    app.register_blueprint(users_bp, url_prefix="/api/users")
    app.register_blueprint(dashboard_bp, url_prefix="/api/dashboard")
    app.register_blueprint(images_bp, url_prefix="/api/images")


def register_error_handlers(app):
    """Todas las respuestas de error son {"error": ...}"""

    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({"error": str(e.description)}), 400

    @app.errorhandler(401)
    def unauthorized(e):
        return jsonify({"error": "Usuario no autenticado"}), 401

    @app.errorhandler(403)
    def forbidden(e):
        return jsonify({"error": "No tienes permisos para realizar esta acción"}), 403

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Recurso no encontrado"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Método no permitido"}), 405

    @app.errorhandler(413)
    def too_large(e):
        return jsonify({"error": "El archivo es demasiado grande"}), 413

    @app.errorhandler(SQLAlchemyError)
    def db_error(e):
        db.session.rollback()
        logger.error(f"❌ Error de base de datos: {e}")
        return jsonify({"error": "Ocurrió un error en la base de datos"}), 500

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({"error": "Ocurrió un error interno del servidor"}), 500


def ensure_admin(app):
    """Crea la cuenta de administrador inicial si no existe"""
    from creepie.models import Profile

    email = (app.config.get("ADMIN_EMAIL") or "").strip().lower()
    password = app.config.get("ADMIN_PASSWORD")
    if not email or not password or Profile.query.filter_by(email=email).first():
        return

    admin = Profile(email=email, role="admin", first_name="Administrador", last_name="Creepie")
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()
    logger.info(f"✅ Administrador inicial creado: {email}")


def init_dev_data():
    """Inicializa datos de desarrollo"""
    from creepie.models import Category, Product, ProductSize, ProductSizeOption

    # Verificar si ya hay datos
    if Category.query.first():
        return

    logger.info("🌱 Inicializando datos de desarrollo...")

    categories = [
        Category(name="Tortas", description="Tortas enteras para toda ocasión"),
        Category(name="Postres", description="Postres individuales"),
        Category(name="Galletas", description="Galletas y alfajores"),
    ]
    db.session.add_all(categories)

    sizes = [
        ProductSize(name="Pequeña", person_capacity=8, additional_price=0, display_order=1),
        ProductSize(name="Mediana", person_capacity=15, additional_price=25, display_order=2),
        ProductSize(name="Grande", person_capacity=25, additional_price=50, display_order=3),
    ]
    db.session.add_all(sizes)
    db.session.flush()

    products = [
        Product(name="Torta de Chocolate", category_id=categories[0].id, price=65, stock=10, preparation_time=24,
                description="Bizcocho húmedo de chocolate con fudge"),
        Product(name="Torta Tres Leches", category_id=categories[0].id, price=60, stock=8, preparation_time=24,
                description="Clásica torta tres leches con merengue"),
        Product(name="Cheesecake de Fresa", category_id=categories[1].id, price=12, stock=20, preparation_time=2),
        Product(name="Alfajores x6", category_id=categories[2].id, price=15, stock=30, preparation_time=1),
    ]
    db.session.add_all(products)
    db.session.flush()

    for product in products[:2]:
        for index, size in enumerate(sizes):
            db.session.add(ProductSizeOption(product_id=product.id, size_id=size.id, is_default=index == 0))

    db.session.commit()
    logger.info("✅ Datos de desarrollo inicializados (3 categorías, 3 tamaños, 4 productos)")


# Crear instancia de la app para gunicorn
app = create_app()

if __name__ == "__main__":
    app.run(debug=True, host="0.0.0.0", port=5000)
