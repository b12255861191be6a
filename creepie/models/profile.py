"""
Modelo: Perfil de usuario
Clientes, personal, supervisores y administradores comparten esta tabla
"""
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from ..db import db

ROLES = ("customer", "staff", "admin", "supervisor")


class Profile(db.Model):
    __tablename__ = "profiles"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # customer | staff | admin | supervisor
    role = db.Column(db.String(20), nullable=False, default="customer")

    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    dni_ruc = db.Column(db.String(20), nullable=True)
    birth_date = db.Column(db.Date, nullable=True)
    phone = db.Column(db.String(30), nullable=True)

    # Dirección principal
    address = db.Column(db.Text, nullable=True)
    department = db.Column(db.String(100), nullable=True)
    province = db.Column(db.String(100), nullable=True)
    district = db.Column(db.String(100), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    @property
    def full_name(self):
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    def to_summary(self):
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
        }

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "dni_ruc": self.dni_ruc,
            "birth_date": self.birth_date.isoformat() if self.birth_date else None,
            "phone": self.phone,
            "address": self.address,
            "department": self.department,
            "province": self.province,
            "district": self.district,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
