"""
Utilidad: Texto
Slugs para URLs de productos y formato de precios en soles
"""
import re
import unicodedata


def slugify(text):
    """
    "Torta de Chocolate Clásica" -> "torta-de-chocolate-clasica"
    """
    text = unicodedata.normalize("NFD", (text or "").lower())
    text = "".join(c for c in text if unicodedata.category(c) != "Mn")
    text = re.sub(r"[^a-z0-9\s-]", "", text)
    text = text.strip()
    text = re.sub(r"\s+", "-", text)
    return re.sub(r"-+", "-", text)


def format_price(amount):
    """S/ 1,234.50"""
    return f"S/ {float(amount or 0):,.2f}"


def products_text(names, limit=2):
    """Texto corto con los productos de un pedido para las notificaciones"""
    names = [n for n in names if n]
    if not names:
        return "tus productos"
    text = ", ".join(names[:limit])
    if len(names) > limit:
        text += "..."
    return text
