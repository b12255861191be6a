from datetime import date

from creepie.utils.cards import luhn_valid, detect_card_type, validate_card, is_expired

TODAY = date(2025, 10, 15)


def test_luhn_accepts_known_test_numbers():
    assert luhn_valid("4111111111111111")
    assert luhn_valid("5555 5555 5555 4444")
    assert luhn_valid("3782-822463-10005")


def test_luhn_rejects_altered_number():
    assert not luhn_valid("4111111111111112")
    assert not luhn_valid("4111a11111111111")


def test_detect_card_type():
    assert detect_card_type("4111111111111111") == "visa"
    assert detect_card_type("5555555555554444") == "mastercard"
    assert detect_card_type("2223003122003222") == "mastercard"
    assert detect_card_type("378282246310005") == "amex"
    assert detect_card_type("30569309025904") == "dinersclub"
    assert detect_card_type("6011111111111117") is None


def test_validate_card_ok_returns_type_and_last_four():
    result = validate_card("4111 1111 1111 1111", "123", "12", "2030", today=TODAY)
    assert result == {"valid": True, "card_type": "visa", "last_four": "1111"}


def test_validate_card_rejects_luhn_invalid_number():
    result = validate_card("4111111111111112", "123", "12", "2030", today=TODAY)
    assert result == {"valid": False, "error": "Número de tarjeta inválido"}


def test_validate_card_rejects_short_number():
    result = validate_card("411111", "123", "12", "2030", today=TODAY)
    assert not result["valid"]
    assert result["error"] == "Número de tarjeta inválido"


def test_validate_card_rejects_unsupported_brand():
    result = validate_card("6011111111111117", "123", "12", "2030", today=TODAY)
    assert result["error"] == "Tipo de tarjeta no soportado"


def test_amex_needs_four_digit_cvv():
    assert not validate_card("378282246310005", "123", "12", "2030", today=TODAY)["valid"]
    assert validate_card("378282246310005", "1234", "12", "2030", today=TODAY)["valid"]


def test_validate_card_rejects_bad_month():
    result = validate_card("4111111111111111", "123", "13", "2030", today=TODAY)
    assert result["error"] == "Mes de expiración inválido"


def test_validate_card_rejects_expired_card():
    result = validate_card("4111111111111111", "123", "09", "2025", today=TODAY)
    assert result["error"] == "Tarjeta expirada"


def test_current_month_is_not_expired():
    assert not is_expired("10", "2025", today=TODAY)
    assert is_expired("12", "2024", today=TODAY)


def test_validate_card_rejects_non_ascii_digits():
    result = validate_card("411111111111111²", "123", "7", "2099", today=TODAY)
    assert result == {"valid": False, "error": "El número de tarjeta solo debe contener dígitos"}
    assert luhn_valid("411111111111111²") is False
