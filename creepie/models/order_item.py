"""
Modelo: Item de pedido
"""
from datetime import datetime
from ..db import db


class OrderItem(db.Model):
    __tablename__ = "order_items"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    size_id = db.Column(db.Integer, db.ForeignKey("product_sizes.id"), nullable=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Float, nullable=False)
    subtotal = db.Column(db.Float, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    product = db.relationship("Product", backref="order_items")
    size = db.relationship("ProductSize")

    def size_info(self):
        """Tamaño del item; si la relación no resuelve se devuelve el id como respaldo"""
        if self.size:
            return {
                "id": self.size.id,
                "name": self.size.name,
                "person_capacity": self.size.person_capacity,
            }
        if self.size_id:
            return {"id": self.size_id, "name": str(self.size_id), "person_capacity": 0}
        return None

    def to_dict(self):
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "size_id": self.size_id,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "subtotal": self.subtotal,
            "product": {
                "id": self.product.id,
                "name": self.product.name,
                "description": self.product.description,
                "images": [img.to_dict() for img in self.product.images],
            } if self.product else None,
            "size": self.size_info(),
        }
