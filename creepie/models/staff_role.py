"""
Modelo: Permisos del personal
Una fila por trabajador con los módulos que puede gestionar
"""
from datetime import datetime
from ..db import db

PERMISSION_FIELDS = (
    "can_manage_products",
    "can_manage_orders",
    "can_manage_reservations",
    "can_manage_staff",
    "can_view_reports",
)


class StaffRole(db.Model):
    __tablename__ = "staff_roles"

    id = db.Column(db.Integer, primary_key=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=False, unique=True)

    can_manage_products = db.Column(db.Boolean, default=False)
    can_manage_orders = db.Column(db.Boolean, default=False)
    can_manage_reservations = db.Column(db.Boolean, default=False)
    can_manage_staff = db.Column(db.Boolean, default=False)
    can_view_reports = db.Column(db.Boolean, default=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    staff = db.relationship("Profile", backref=db.backref("permissions", uselist=False))

    def to_dict(self):
        data = {"id": self.id, "staff_id": self.staff_id}
        for field in PERMISSION_FIELDS:
            data[field] = bool(getattr(self, field))
        return data
