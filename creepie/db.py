"""
Configuración de base de datos
"""
import logging
from flask_sqlalchemy import SQLAlchemy

logger = logging.getLogger(__name__)

db = SQLAlchemy()


def init_db(app):
    """Inicializa la base de datos con la app Flask y crea las tablas"""
    db.init_app(app)

    with app.app_context():
        from . import models  # noqa: F401  registra las tablas en el metadata
        db.create_all()
        logger.info("✅ Base de datos inicializada")
