"""
Modelo: Método de pago
Solo se guardan los últimos 4 dígitos, nunca el número completo ni el CVV
"""
from datetime import datetime
from ..db import db


class PaymentMethod(db.Model):
    __tablename__ = "payment_methods"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=False)
    card_type = db.Column(db.String(20), nullable=False)
    card_holder_name = db.Column(db.String(150), nullable=False)
    card_last_four = db.Column(db.String(4), nullable=False)
    expiry_month = db.Column(db.String(2), nullable=False)
    expiry_year = db.Column(db.String(4), nullable=False)
    is_default = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "card_type": self.card_type,
            "card_holder_name": self.card_holder_name,
            "card_last_four": self.card_last_four,
            "expiry_month": self.expiry_month,
            "expiry_year": self.expiry_year,
            "is_default": self.is_default,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
