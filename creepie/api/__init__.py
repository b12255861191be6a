"""
APIs REST de Creepie
"""
from .auth import bp as auth_bp
from .categories import bp as categories_bp
from .sizes import bp as sizes_bp
from .products import bp as products_bp
from .size_options import bp as size_options_bp
from .cart import bp as cart_bp
from .orders import bp as orders_bp
from .payment_methods import bp as payment_methods_bp
from .addresses import bp as addresses_bp
from .notifications import bp as notifications_bp
from .reservations import bp as reservations_bp
from .attendance import bp as attendance_bp
from .schedules import bp as schedules_bp
from .expenses import bp as expenses_bp
from .reports import bp as reports_bp
from .users import bp as users_bp
from .dashboard import bp as dashboard_bp
from .images import bp as images_bp

__all__ = [
    "auth_bp",
    "categories_bp",
    "sizes_bp",
    "products_bp",
    "size_options_bp",
    "cart_bp",
    "orders_bp",
    "payment_methods_bp",
    "addresses_bp",
    "notifications_bp",
    "reservations_bp",
    "attendance_bp",
    "schedules_bp",
    "expenses_bp",
    "reports_bp",
    "users_bp",
    "dashboard_bp",
    "images_bp",
]
