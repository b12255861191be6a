"""
Modelos de base de datos
"""
from .profile import Profile, ROLES
from .staff_role import StaffRole, PERMISSION_FIELDS
from .category import Category
from .size import ProductSize, ProductSizeOption
from .product import Product, ProductImage, ProductIngredient
from .cart import Cart, CartItem
from .order import Order, ORDER_STATUSES, PAYMENT_STATUSES
from .order_item import OrderItem
from .payment_method import PaymentMethod
from .address import ShippingAddress
from .notification import Notification
from .reservation import Reservation, RESERVATION_STATUSES
from .attendance import StaffAttendance
from .schedule import WorkSchedule, StaffSchedule
from .expense import Expense, EXPENSE_CATEGORIES

__all__ = [
    "Profile",
    "ROLES",
    "StaffRole",
    "PERMISSION_FIELDS",
    "Category",
    "ProductSize",
    "ProductSizeOption",
    "Product",
    "ProductImage",
    "ProductIngredient",
    "Cart",
    "CartItem",
    "Order",
    "ORDER_STATUSES",
    "PAYMENT_STATUSES",
    "OrderItem",
    "PaymentMethod",
    "ShippingAddress",
    "Notification",
    "Reservation",
    "RESERVATION_STATUSES",
    "StaffAttendance",
    "WorkSchedule",
    "StaffSchedule",
    "Expense",
    "EXPENSE_CATEGORIES",
]
