"""
API: Asistencia del personal
Marcas de entrada, refrigerio y salida (propias o registradas por un
supervisor), reportes mensuales y corrección manual de registros
"""
import calendar
import logging
from datetime import datetime, date
from flask import Blueprint, request, jsonify
from ..db import db
from ..models import Profile, StaffAttendance, StaffSchedule
from ..utils.auth import get_current_user, login_required, roles_required
from ..utils.attendance import calculate_hours_worked, sum_hours
from ..utils.parsing import parse_int, parse_datetime

logger = logging.getLogger(__name__)

bp = Blueprint("attendance", __name__)

SUPERVISOR_ROLES = ("admin", "supervisor")

# Mensajes para marcas propias y para marcas hechas por un supervisor
SELF_MESSAGES = {
    "no_schedule": "No tienes un horario asignado. Contacta al administrador para que te asigne un horario de trabajo.",
    "already_in": "Ya marcaste entrada hoy",
    "no_check_in": "Debes marcar entrada primero",
    "already_break": "Ya iniciaste el refrigerio",
    "no_break": "Debes iniciar el refrigerio primero",
    "already_break_end": "Ya finalizaste el refrigerio",
    "already_out": "Ya marcaste salida hoy",
}

STAFF_MESSAGES = {
    "no_schedule": "Este trabajador no tiene un horario asignado",
    "already_in": "Este trabajador ya marcó entrada hoy",
    "no_check_in": "El trabajador debe marcar entrada primero",
    "already_break": "El trabajador ya inició el refrigerio",
    "no_break": "El trabajador debe iniciar el refrigerio primero",
    "already_break_end": "El trabajador ya finalizó el refrigerio",
    "already_out": "El trabajador ya marcó salida hoy",
}


def today_record(staff_id):
    return StaffAttendance.query.filter_by(staff_id=staff_id, work_date=datetime.utcnow().date()).first()


def active_assignment(staff_id):
    return StaffSchedule.query.filter_by(staff_id=staff_id, is_active=True).first()


def month_bounds(year, month):
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def records_for_month(year, month, staff_id=None):
    first, last = month_bounds(year, month)
    query = StaffAttendance.query.filter(
        StaffAttendance.work_date >= first,
        StaffAttendance.work_date <= last,
    )
    if staff_id:
        query = query.filter(StaffAttendance.staff_id == staff_id)
    return query.order_by(StaffAttendance.work_date.desc()).all()


# ============================================
# MARCAS (comunes a trabajador y supervisor)
# ============================================

def mark_check_in(staff_id, messages):
    if not active_assignment(staff_id):
        return None, messages["no_schedule"]

    record = today_record(staff_id)
    if record and record.check_in:
        return None, messages["already_in"]

    if not record:
        record = StaffAttendance(staff_id=staff_id, work_date=datetime.utcnow().date())
        db.session.add(record)
    record.check_in = datetime.utcnow()
    return record, None


def mark_break_start(staff_id, messages):
    record = today_record(staff_id)
    if not record or not record.check_in:
        return None, messages["no_check_in"]
    if record.break_start:
        return None, messages["already_break"]

    record.break_start = datetime.utcnow()
    return record, None


def mark_break_end(staff_id, messages):
    record = today_record(staff_id)
    if not record or not record.break_start:
        return None, messages["no_break"]
    if record.break_end:
        return None, messages["already_break_end"]

    record.break_end = datetime.utcnow()
    return record, None


def mark_check_out(staff_id, messages):
    record = today_record(staff_id)
    if not record or not record.check_in:
        return None, messages["no_check_in"]
    if record.check_out:
        return None, messages["already_out"]

    record.check_out = datetime.utcnow()
    record.hours_worked = calculate_hours_worked(
        record.check_in, record.check_out, record.break_start, record.break_end,
    )
    return record, None


MARKS = {
    "check-in": (mark_check_in, "Entrada marcada correctamente"),
    "break-start": (mark_break_start, "Refrigerio iniciado"),
    "break-end": (mark_break_end, "Refrigerio finalizado"),
    "check-out": (mark_check_out, None),
}


def apply_mark(action, staff_id, messages):
    mark, success_message = MARKS[action]
    try:
        record, error = mark(staff_id, messages)
        if error:
            return jsonify({"error": error}), 400
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error en {action} de {staff_id}: {e}")
        return jsonify({"error": f"Error al registrar asistencia: {str(e)}"}), 500

    if success_message is None:
        success_message = f"Salida marcada. Horas trabajadas: {record.hours_worked:.2f}"

    logger.info(f"🕒 {action} registrado para {staff_id}")
    return jsonify({"success": True, "message": success_message, "record": record.to_dict()})


@bp.route("/check-in", methods=["POST"])
@login_required
def check_in():
    return apply_mark("check-in", get_current_user().id, SELF_MESSAGES)


@bp.route("/break-start", methods=["POST"])
@login_required
def break_start():
    return apply_mark("break-start", get_current_user().id, SELF_MESSAGES)


@bp.route("/break-end", methods=["POST"])
@login_required
def break_end():
    return apply_mark("break-end", get_current_user().id, SELF_MESSAGES)


@bp.route("/check-out", methods=["POST"])
@login_required
def check_out():
    return apply_mark("check-out", get_current_user().id, SELF_MESSAGES)


@bp.route("/staff/<int:staff_id>/<action>", methods=["POST"])
@roles_required(*SUPERVISOR_ROLES)
def mark_for_staff(staff_id, action):
    """Estación compartida: el supervisor marca por el trabajador"""
    if action not in MARKS:
        return jsonify({"error": "Acción inválida"}), 404

    Profile.query.get_or_404(staff_id)
    return apply_mark(action, staff_id, STAFF_MESSAGES)


# ============================================
# CONSULTAS
# ============================================

@bp.route("/today", methods=["GET"])
@login_required
def get_today_attendance():
    record = today_record(get_current_user().id)
    return jsonify(record.to_dict() if record else None)


def resolve_staff_id(user):
    """staff_id del query string; solo admin/supervisor pueden ver a otros"""
    staff_id = parse_int(request.args.get("staff_id"), default=user.id)
    if staff_id != user.id and user.role not in SUPERVISOR_ROLES:
        return None
    return staff_id


@bp.route("/monthly", methods=["GET"])
@login_required
def get_monthly_attendance():
    user = get_current_user()
    staff_id = resolve_staff_id(user)
    if staff_id is None:
        return jsonify({"error": "No tienes permisos para ver esta información"}), 403

    now = datetime.utcnow()
    records = records_for_month(now.year, now.month, staff_id)
    return jsonify({"data": [r.to_dict() for r in records], "total_hours": sum_hours(records)})


@bp.route("/month/<int:year>/<int:month>", methods=["GET"])
@login_required
def get_attendance_by_month(year, month):
    if not 1 <= month <= 12:
        return jsonify({"error": "Mes inválido"}), 400

    user = get_current_user()
    staff_id = resolve_staff_id(user)
    if staff_id is None:
        return jsonify({"error": "No tienes permisos para ver esta información"}), 403

    records = records_for_month(year, month, staff_id)
    return jsonify({"data": [r.to_dict() for r in records], "total_hours": sum_hours(records)})


@bp.route("/report", methods=["GET"])
@roles_required("admin", message="No tienes permisos para ver este reporte")
def get_all_staff_attendance():
    """Asistencia de todo el personal en un mes (?month=&year=, por defecto el actual)"""
    now = datetime.utcnow()
    month = parse_int(request.args.get("month"), default=now.month)
    year = parse_int(request.args.get("year"), default=now.year)
    if not 1 <= month <= 12:
        return jsonify({"error": "Mes inválido"}), 400

    records = records_for_month(year, month)
    return jsonify([r.to_dict(include_staff=True) for r in records])


@bp.route("/staff-today", methods=["GET"])
@roles_required(*SUPERVISOR_ROLES, message="No tienes permisos para ver esta información")
def get_staff_with_today_attendance():
    """Trabajadores con horario asignado y su registro de hoy"""
    staff_list = Profile.query.filter_by(role="staff").order_by(Profile.first_name).all()
    today = datetime.utcnow().date()

    result = []
    for staff in staff_list:
        assignment = active_assignment(staff.id)
        if not assignment or not assignment.schedule:
            continue

        record = StaffAttendance.query.filter_by(staff_id=staff.id, work_date=today).first()
        schedule = assignment.schedule
        result.append({
            "id": staff.id,
            "first_name": staff.first_name,
            "last_name": staff.last_name,
            "email": staff.email,
            "schedule": {
                "name": schedule.name,
                "check_in_time": schedule.check_in_time,
                "check_out_time": schedule.check_out_time,
                "daily_hours": schedule.daily_hours,
            },
            "today_attendance": record.to_dict() if record else None,
        })

    return jsonify(result)


@bp.route("/records/<int:id>", methods=["PUT"])
@roles_required("admin")
def update_attendance_record(id):
    """Corrección manual; las horas se recalculan si quedan las cuatro marcas"""
    record = StaffAttendance.query.get_or_404(id)
    data = request.json or {}

    try:
        for field in ("check_in", "break_start", "break_end", "check_out"):
            if data.get(field):
                setattr(record, field, parse_datetime(data[field]))
    except ValueError:
        return jsonify({"error": "Formato de fecha inválido"}), 400

    if "notes" in data:
        record.notes = data["notes"]

    if all((record.check_in, record.break_start, record.break_end, record.check_out)):
        record.hours_worked = calculate_hours_worked(
            record.check_in, record.check_out, record.break_start, record.break_end,
        )

    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error actualizando registro {id}: {e}")
        return jsonify({"error": f"Error al actualizar registro: {str(e)}"}), 500

    return jsonify({"success": True, "message": "Registro actualizado correctamente", "record": record.to_dict()})
