"""
Utilidad: Validación de tarjetas
Checksum de Luhn, detección de marca y validación completa (simulada,
no hay pasarela de pago real)
"""
import re
from datetime import date

CARD_PATTERNS = [
    ("visa", re.compile(r"^4")),
    ("mastercard", re.compile(r"^(5[1-5]|2[2-7])")),
    ("amex", re.compile(r"^3[47]")),
    ("dinersclub", re.compile(r"^(3[068]|30[0-5])")),
]

DIGITS = re.compile(r"[0-9]+")


def clean_card_number(card_number):
    return re.sub(r"[\s-]", "", str(card_number or ""))


def is_ascii_digits(value):
    return DIGITS.fullmatch(value) is not None


def luhn_valid(card_number):
    """
    Algoritmo de Luhn: desde la derecha se duplica uno de cada dos dígitos
    (restando 9 si pasa de 9) y la suma total debe ser múltiplo de 10.
    """
    digits = clean_card_number(card_number)
    if not is_ascii_digits(digits):
        return False

    total = 0
    for i, char in enumerate(reversed(digits)):
        digit = int(char)
        if i % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def detect_card_type(card_number):
    """visa | mastercard | amex | dinersclub | None"""
    digits = clean_card_number(card_number)
    for card_type, pattern in CARD_PATTERNS:
        if pattern.match(digits):
            return card_type
    return None


def is_expired(expiry_month, expiry_year, today=None):
    today = today or date.today()
    month = int(expiry_month)
    year = int(expiry_year)
    return year < today.year or (year == today.year and month < today.month)


def validate_card(card_number, cvv, expiry_month, expiry_year, today=None):
    """
    Valida los datos de una tarjeta en el mismo orden que se muestran los errores

    Returns:
        dict: {"valid": True, "card_type", "last_four"} o {"valid": False, "error"}
    """
    digits = clean_card_number(card_number)

    if len(digits) < 13 or len(digits) > 19:
        return {"valid": False, "error": "Número de tarjeta inválido"}

    if not is_ascii_digits(digits):
        return {"valid": False, "error": "El número de tarjeta solo debe contener dígitos"}

    if not luhn_valid(digits):
        return {"valid": False, "error": "Número de tarjeta inválido"}

    card_type = detect_card_type(digits)
    if not card_type:
        return {"valid": False, "error": "Tipo de tarjeta no soportado"}

    expected_cvv = 4 if card_type == "amex" else 3
    cvv = str(cvv or "")
    if len(cvv) != expected_cvv or not is_ascii_digits(cvv):
        return {"valid": False, "error": f"CVV debe tener {expected_cvv} dígitos para {card_type}"}

    try:
        month = int(expiry_month)
        int(expiry_year)
    except (TypeError, ValueError):
        return {"valid": False, "error": "Mes de expiración inválido"}

    if month < 1 or month > 12:
        return {"valid": False, "error": "Mes de expiración inválido"}

    if is_expired(expiry_month, expiry_year, today):
        return {"valid": False, "error": "Tarjeta expirada"}

    return {"valid": True, "card_type": card_type, "last_four": digits[-4:]}
