"""
Modelo: Producto
Precio base, oferta opcional, stock y tiempo de preparación
"""
from datetime import datetime
from ..db import db


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False)

    price = db.Column(db.Float, nullable=False)

    # Oferta: offer_end_date solo se guarda si is_offer
    is_offer = db.Column(db.Boolean, default=False)
    offer_price = db.Column(db.Float, nullable=True)
    offer_end_date = db.Column(db.DateTime, nullable=True)

    stock = db.Column(db.Integer, default=0)
    # Horas
    preparation_time = db.Column(db.Integer, nullable=True)

    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = db.relationship("Category", backref="products")
    images = db.relationship(
        "ProductImage", backref="product", cascade="all, delete-orphan",
        order_by="ProductImage.image_order",
    )
    ingredients = db.relationship("ProductIngredient", backref="product", cascade="all, delete-orphan")

    @property
    def effective_price(self):
        """Precio de venta vigente (oferta si aplica)"""
        if self.is_offer and self.offer_price:
            return self.offer_price
        return self.price

    @property
    def main_image(self):
        return self.images[0].image_url if self.images else None

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category_id": self.category_id,
            "category": self.category.to_dict() if self.category else None,
            "price": self.price,
            "is_offer": self.is_offer,
            "offer_price": self.offer_price,
            "offer_end_date": self.offer_end_date.isoformat() if self.offer_end_date else None,
            "stock": self.stock,
            "preparation_time": self.preparation_time,
            "is_active": self.is_active,
            "images": [img.to_dict() for img in self.images],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def to_detail(self):
        data = self.to_dict()
        data["ingredients"] = [ing.to_dict() for ing in self.ingredients]
        data["sizes"] = [
            opt.to_dict()
            for opt in sorted(self.size_options, key=lambda o: (not o.is_default, o.id))
        ]
        return data


class ProductImage(db.Model):
    __tablename__ = "product_images"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    image_url = db.Column(db.Text, nullable=False)
    image_order = db.Column(db.Integer, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "product_id": self.product_id,
            "image_url": self.image_url,
            "image_order": self.image_order,
        }


class ProductIngredient(db.Model):
    __tablename__ = "product_ingredients"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    name = db.Column(db.String(150), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {"id": self.id, "product_id": self.product_id, "name": self.name}
