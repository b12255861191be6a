"""
Utilidad: Rangos de fechas para reportes financieros
Períodos (día, semana, mes, año), período anterior y división en puntos
para los gráficos de ingresos vs egresos
"""
from datetime import datetime, timedelta

PERIODS = ("day", "week", "month", "year")

MONTH_ABBR = ["Ene", "Feb", "Mar", "Abr", "May", "Jun", "Jul", "Ago", "Sep", "Oct", "Nov", "Dic"]

ONE_MS = timedelta(milliseconds=1)


def get_period_range(period, now=None):
    """
    Rango [inicio, fin] del período actual.
    El día cubre 00:00 a 23:59:59.999; semana (desde el domingo), mes y año
    terminan en el momento actual.
    """
    now = now or datetime.utcnow()
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if period == "day":
        return midnight, midnight + timedelta(days=1) - ONE_MS
    if period == "week":
        days_since_sunday = (now.weekday() + 1) % 7
        return midnight - timedelta(days=days_since_sunday), now
    if period == "month":
        return midnight.replace(day=1), now
    if period == "year":
        return midnight.replace(month=1, day=1), now
    raise ValueError(f"Período inválido: {period}")


def get_previous_range(start, end):
    """Mismo largo que [start, end], terminando 1 ms antes de start"""
    duration = end - start
    return start - duration, start - ONE_MS


def chart_points(period):
    if period == "year":
        return 12
    if period == "month":
        return 30
    return 7


def split_range(start, end, points):
    """Divide [start, end) en `points` intervalos iguales"""
    interval = (end - start) / points
    return [(start + interval * i, start + interval * (i + 1)) for i in range(points)]


def percent_change(current, previous):
    if previous == 0:
        return 100 if current > 0 else 0
    return (current - previous) / previous * 100


def chart_label(moment):
    """05 Oct"""
    return f"{moment.day:02d} {MONTH_ABBR[moment.month - 1]}"
