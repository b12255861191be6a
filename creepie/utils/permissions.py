"""
Utilidad: Permisos del panel de administración
Tabla estática rol -> ruta del dashboard
"""

ROUTE_PERMISSIONS = {
    "/dashboard": ["admin"],
    "/dashboard/reportes": ["admin"],
    "/dashboard/productos": ["admin"],
    "/dashboard/categorias": ["admin"],
    "/dashboard/tamanos": ["admin"],
    "/dashboard/usuarios": ["admin"],
    "/dashboard/gastos": ["admin"],
    "/dashboard/horarios": ["admin"],
    "/dashboard/reportes-asistencia": ["admin"],
    "/dashboard/pedidos": ["admin", "staff", "supervisor"],
    "/dashboard/reservaciones": ["admin", "staff", "supervisor"],
    "/dashboard/gestion-asistencia": ["admin", "supervisor"],
}

DEFAULT_ROUTES = {
    "admin": "/dashboard",
    "supervisor": "/dashboard/gestion-asistencia",
}


def normalize_path(path):
    """Quita query string y slash final: /dashboard/pedidos/?x=1 -> /dashboard/pedidos"""
    path = (path or "").split("?", 1)[0].split("#", 1)[0]
    if len(path) > 1:
        path = path.rstrip("/")
    return path or "/"


def allowed_roles_for(path):
    """
    Roles permitidos para una ruta. Busca la entrada exacta y si no existe
    la ruta padre más cercana (/dashboard/productos/12 -> /dashboard/productos).

    Returns:
        list | None: None si ninguna entrada cubre la ruta
    """
    normalized = normalize_path(path)
    if normalized in ROUTE_PERMISSIONS:
        return ROUTE_PERMISSIONS[normalized]

    parts = [p for p in normalized.split("/") if p]
    for i in range(len(parts), 0, -1):
        parent = "/" + "/".join(parts[:i])
        if parent in ROUTE_PERMISSIONS:
            return ROUTE_PERMISSIONS[parent]
    return None


def is_route_allowed(path, role):
    if not role:
        return False
    roles = allowed_roles_for(path)
    if roles is None:
        # Ruta sin entrada: solo admin
        return role == "admin"
    return role in roles


def default_route_for_role(role):
    return DEFAULT_ROUTES.get(role, "/dashboard/pedidos")
