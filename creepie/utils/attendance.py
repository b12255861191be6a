"""
Utilidad: Cálculo de horas trabajadas
"""


def break_minutes(break_start, break_end):
    if break_start and break_end:
        return (break_end - break_start).total_seconds() / 60
    return 0


def calculate_hours_worked(check_in, check_out, break_start=None, break_end=None):
    """
    Horas entre entrada y salida menos el refrigerio (si se cerró),
    nunca negativas y redondeadas a 2 decimales.

    Returns:
        float | None: None si falta la entrada o la salida
    """
    if not check_in or not check_out:
        return None

    total_minutes = (check_out - check_in).total_seconds() / 60
    total_minutes -= break_minutes(break_start, break_end)
    return round(max(0.0, total_minutes / 60), 2)


def sum_hours(records):
    """Total de horas de una lista de registros de asistencia"""
    return round(sum(r.hours_worked or 0 for r in records), 2)
