"""
Modelo: Pedido
Compra de un cliente con su estado de preparación y de pago
"""
from datetime import datetime
from ..db import db

ORDER_STATUSES = ("pending", "confirmed", "preparing", "on_the_way", "completed", "cancelled")
PAYMENT_STATUSES = ("pending", "paid", "failed", "refunded")


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=False)
    total_amount = db.Column(db.Float, nullable=False, default=0)

    status = db.Column(db.String(20), nullable=False, default="pending")
    # pending | confirmed | preparing | on_the_way | completed | cancelled

    payment_status = db.Column(db.String(20), nullable=False, default="pending")
    # pending | paid | failed | refunded

    payment_method = db.Column(db.String(50), nullable=True)
    address = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    estimated_delivery = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer = db.relationship("Profile", backref="orders")
    items = db.relationship("OrderItem", backref="order", cascade="all, delete-orphan", order_by="OrderItem.id")

    def to_dict(self, include_items=False, include_customer=False):
        data = {
            "id": self.id,
            "customer_id": self.customer_id,
            "total_amount": self.total_amount,
            "status": self.status,
            "payment_status": self.payment_status,
            "payment_method": self.payment_method,
            "address": self.address,
            "notes": self.notes,
            "estimated_delivery": self.estimated_delivery.isoformat() if self.estimated_delivery else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        if include_customer:
            data["customer"] = self.customer.to_summary() if self.customer else None
        return data
