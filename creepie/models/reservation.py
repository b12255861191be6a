"""
Modelo: Reservación
Pedido programado para una fecha y hora. Las filas de un mismo cliente,
fecha y hora forman un grupo que se gestiona en conjunto.
"""
from datetime import datetime
from ..db import db

RESERVATION_STATUSES = (
    "pending", "confirmed", "preparing", "on_the_way", "completed", "cancelled", "no_show",
)


class Reservation(db.Model):
    __tablename__ = "reservations"

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    size_id = db.Column(db.Integer, db.ForeignKey("product_sizes.id"), nullable=True)

    reservation_date = db.Column(db.Date, nullable=False)
    # HH:MM
    reservation_time = db.Column(db.String(5), nullable=False)

    quantity = db.Column(db.Integer, nullable=False, default=1)
    special_requests = db.Column(db.Text, default="")
    status = db.Column(db.String(20), nullable=False, default="pending")
    total_amount = db.Column(db.Float, nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer = db.relationship("Profile", backref="reservations")
    product = db.relationship("Product", backref="reservations")
    size = db.relationship("ProductSize")

    @property
    def group_key(self):
        return (self.customer_id, self.reservation_date, self.reservation_time)

    def to_dict(self):
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "product_id": self.product_id,
            "size_id": self.size_id,
            "reservation_date": self.reservation_date.isoformat() if self.reservation_date else None,
            "reservation_time": self.reservation_time,
            "quantity": self.quantity,
            "special_requests": self.special_requests,
            "status": self.status,
            "total_amount": self.total_amount,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "customer": self.customer.to_summary() if self.customer else None,
            "product": {
                "id": self.product.id,
                "name": self.product.name,
                "price": self.product.price,
                "preparation_time": self.product.preparation_time,
                "images": [img.to_dict() for img in self.product.images],
            } if self.product else None,
            "size": self.size.to_summary() if self.size else None,
        }
