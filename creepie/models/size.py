"""
Modelo: Tamaño de producto
Porciones (personas) con un precio adicional sobre el precio base
"""
from datetime import datetime
from ..db import db


class ProductSize(db.Model):
    __tablename__ = "product_sizes"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    person_capacity = db.Column(db.Integer, nullable=False)
    additional_price = db.Column(db.Float, nullable=False, default=0)
    description = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, default=True)
    display_order = db.Column(db.Integer, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_summary(self):
        return {
            "id": self.id,
            "name": self.name,
            "person_capacity": self.person_capacity,
            "additional_price": self.additional_price,
        }

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "person_capacity": self.person_capacity,
            "additional_price": self.additional_price,
            "description": self.description,
            "is_active": self.is_active,
            "display_order": self.display_order,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class ProductSizeOption(db.Model):
    """Tamaño disponible para un producto concreto"""
    __tablename__ = "product_size_options"
    __table_args__ = (db.UniqueConstraint("product_id", "size_id", name="uq_product_size"),)

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    size_id = db.Column(db.Integer, db.ForeignKey("product_sizes.id"), nullable=False)
    is_default = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    product = db.relationship("Product", backref=db.backref("size_options", cascade="all, delete-orphan"))
    size = db.relationship("ProductSize", backref="options")

    def to_dict(self):
        return {
            "id": self.id,
            "product_id": self.product_id,
            "size_id": self.size_id,
            "is_default": self.is_default,
            "size": self.size.to_dict() if self.size else None,
        }
