"""
API: Carrito de compras
Un carrito por usuario; el precio unitario se fija al agregar el producto
"""
import logging
from flask import Blueprint, request, jsonify
from ..db import db
from ..models import Cart, CartItem, Product, ProductSize
from ..utils.auth import get_current_user, login_required
from ..utils.parsing import parse_int

logger = logging.getLogger(__name__)

bp = Blueprint("cart", __name__)


def get_or_create_cart(user_id):
    cart = Cart.query.filter_by(user_id=user_id).first()
    if not cart:
        cart = Cart(user_id=user_id)
        db.session.add(cart)
        db.session.flush()
    return cart


def calculate_unit_price(product, size=None):
    """Precio de oferta si corresponde, más el adicional del tamaño"""
    price = product.effective_price or 0
    if size:
        price += size.additional_price or 0
    return round(price, 2)


def own_item_or_404(item_id):
    user = get_current_user()
    return (
        CartItem.query.join(Cart)
        .filter(CartItem.id == item_id, Cart.user_id == user.id)
        .first_or_404()
    )


@bp.route("", methods=["GET"])
@login_required
def get_cart():
    cart = get_or_create_cart(get_current_user().id)
    db.session.commit()
    return jsonify(cart.to_dict())


@bp.route("/count", methods=["GET"])
def get_cart_count():
    """Suma de cantidades (0 si no hay sesión)"""
    user = get_current_user()
    if user is None:
        return jsonify({"count": 0})

    cart = Cart.query.filter_by(user_id=user.id).first()
    count = sum(item.quantity for item in cart.items) if cart else 0
    return jsonify({"count": count})


@bp.route("/items", methods=["POST"])
def add_to_cart():
    user = get_current_user()
    if user is None:
        return jsonify({"error": "Debes iniciar sesión para agregar al carrito"}), 401

    data = request.json or {}
    quantity = parse_int(data.get("quantity"), default=1)
    if quantity <= 0:
        return jsonify({"error": "La cantidad debe ser mayor a 0"}), 400

    product = Product.query.get(parse_int(data.get("product_id"), default=0))
    if not product or not product.is_active:
        return jsonify({"error": "Producto no encontrado"}), 404

    size = None
    size_id = parse_int(data.get("size_id"))
    if size_id:
        size = ProductSize.query.get(size_id)
        if not size:
            return jsonify({"error": "Tamaño no encontrado"}), 404

    try:
        cart = get_or_create_cart(user.id)

        item = CartItem.query.filter_by(cart_id=cart.id, product_id=product.id, size_id=size_id).first()
        if item:
            item.quantity += quantity
        else:
            item = CartItem(
                cart_id=cart.id,
                product_id=product.id,
                size_id=size_id,
                quantity=quantity,
                unit_price=calculate_unit_price(product, size),
            )
            db.session.add(item)

        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error agregando al carrito: {e}")
        return jsonify({"error": f"Error al agregar al carrito: {str(e)}"}), 500

    return jsonify(item.to_dict()), 201


@bp.route("/items/<int:item_id>", methods=["PUT"])
@login_required
def update_cart_item(item_id):
    """Cambia la cantidad; 0 o menos elimina el item"""
    item = own_item_or_404(item_id)
    quantity = parse_int((request.json or {}).get("quantity"))

    if quantity is None:
        return jsonify({"error": "La cantidad es requerida"}), 400

    if quantity <= 0:
        db.session.delete(item)
        db.session.commit()
        return jsonify({"message": "Producto eliminado del carrito"})

    item.quantity = quantity
    db.session.commit()
    return jsonify(item.to_dict())


@bp.route("/items/<int:item_id>", methods=["DELETE"])
@login_required
def remove_cart_item(item_id):
    item = own_item_or_404(item_id)
    db.session.delete(item)
    db.session.commit()
    return jsonify({"message": "Producto eliminado del carrito"})


@bp.route("", methods=["DELETE"])
@login_required
def clear_cart():
    cart = Cart.query.filter_by(user_id=get_current_user().id).first()
    if cart:
        CartItem.query.filter_by(cart_id=cart.id).delete()
        db.session.commit()
    return jsonify({"message": "Carrito vaciado"})
