"""
Modelo: Carrito
Un carrito por usuario, creado la primera vez que se usa
"""
from datetime import datetime
from ..db import db


class Cart(db.Model):
    __tablename__ = "carts"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=False, unique=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = db.relationship("CartItem", backref="cart", cascade="all, delete-orphan", order_by="CartItem.id")

    def to_dict(self):
        items = [item.to_dict() for item in self.items]
        return {
            "id": self.id,
            "user_id": self.user_id,
            "items": items,
            "total_items": sum(item["quantity"] for item in items),
            "total": round(sum(item["subtotal"] for item in items), 2),
        }


class CartItem(db.Model):
    __tablename__ = "cart_items"

    id = db.Column(db.Integer, primary_key=True)
    cart_id = db.Column(db.Integer, db.ForeignKey("carts.id"), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    size_id = db.Column(db.Integer, db.ForeignKey("product_sizes.id"), nullable=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    # Precio unitario congelado al agregar (oferta + adicional del tamaño)
    unit_price = db.Column(db.Float, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    product = db.relationship("Product")
    size = db.relationship("ProductSize")

    def to_dict(self):
        return {
            "id": self.id,
            "cart_id": self.cart_id,
            "product_id": self.product_id,
            "size_id": self.size_id,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "subtotal": round(self.quantity * self.unit_price, 2),
            "product": {
                "id": self.product.id,
                "name": self.product.name,
                "image_url": self.product.main_image,
            } if self.product else None,
            "size": self.size.to_summary() if self.size else None,
        }
