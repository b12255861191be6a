from creepie.utils.permissions import is_route_allowed, default_route_for_role, normalize_path
from creepie.utils.text import slugify, format_price, products_text


def test_slugify_strips_accents_and_symbols():
    assert slugify("Torta de Chocolate Clásica") == "torta-de-chocolate-clasica"
    assert slugify("  Pie de Limón!!  ") == "pie-de-limon"
    assert slugify("Tres  --  Leches") == "tres-leches"


def test_format_price():
    assert format_price(1234.5) == "S/ 1,234.50"
    assert format_price(None) == "S/ 0.00"


def test_products_text():
    assert products_text([]) == "tus productos"
    assert products_text(["Alfajores"]) == "Alfajores"
    assert products_text(["Torta", "Pie", "Alfajores"]) == "Torta, Pie..."


def test_normalize_path():
    assert normalize_path("/dashboard/pedidos/?estado=pending") == "/dashboard/pedidos"
    assert normalize_path("") == "/"


def test_admin_only_routes():
    assert is_route_allowed("/dashboard/gastos", "admin")
    assert not is_route_allowed("/dashboard/gastos", "staff")
    assert not is_route_allowed("/dashboard", "supervisor")


def test_shared_routes():
    for role in ("admin", "staff", "supervisor"):
        assert is_route_allowed("/dashboard/pedidos", role)
    assert is_route_allowed("/dashboard/gestion-asistencia", "supervisor")
    assert not is_route_allowed("/dashboard/gestion-asistencia", "staff")


def test_nested_route_uses_parent_entry():
    assert is_route_allowed("/dashboard/reservaciones/12", "staff")
    assert not is_route_allowed("/dashboard/productos/12/editar", "staff")


def test_unknown_route_is_admin_only():
    assert is_route_allowed("/dashboard/nueva-seccion", "admin")
    assert not is_route_allowed("/dashboard/nueva-seccion", "supervisor")


def test_customers_and_missing_roles_are_rejected():
    assert not is_route_allowed("/dashboard/pedidos", "customer")
    assert not is_route_allowed("/dashboard/pedidos", None)


def test_default_routes():
    assert default_route_for_role("admin") == "/dashboard"
    assert default_route_for_role("supervisor") == "/dashboard/gestion-asistencia"
    assert default_route_for_role("staff") == "/dashboard/pedidos"
