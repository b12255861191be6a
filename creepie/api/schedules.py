"""
API: Horarios de trabajo
"""
import logging
from flask import Blueprint, request, jsonify
from ..db import db
from ..models import Profile, WorkSchedule, StaffSchedule
from ..utils.auth import get_current_user, login_required, roles_required
from ..utils.parsing import parse_int, parse_float, parse_date, parse_bool

logger = logging.getLogger(__name__)

bp = Blueprint("schedules", __name__)


def apply_schedule_fields(schedule, data):
    if "name" in data:
        schedule.name = (data.get("name") or "").strip()
    for field in ("monthly_hours", "daily_hours"):
        if field in data:
            setattr(schedule, field, parse_float(data.get(field)))
    for field in ("work_days_per_week", "break_duration_minutes", "tolerance_minutes"):
        if field in data:
            setattr(schedule, field, parse_int(data.get(field)))
    for field in ("check_in_time", "check_out_time"):
        if field in data:
            setattr(schedule, field, data.get(field))
    if "is_active" in data:
        schedule.is_active = parse_bool(data.get("is_active"), default=True)


@bp.route("", methods=["GET"])
@login_required
def get_schedules():
    schedules = (
        WorkSchedule.query.filter_by(is_active=True)
        .order_by(WorkSchedule.created_at.desc(), WorkSchedule.id.desc())
        .all()
    )
    return jsonify([s.to_dict() for s in schedules])


@bp.route("", methods=["POST"])
@roles_required("admin", message="No tienes permisos para crear horarios")
def create_schedule():
    data = request.json or {}
    if not (data.get("name") or "").strip():
        return jsonify({"error": "El nombre del horario es requerido"}), 400

    schedule = WorkSchedule(created_by=get_current_user().id)
    apply_schedule_fields(schedule, data)

    try:
        db.session.add(schedule)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error creando horario: {e}")
        return jsonify({"error": f"Error al crear horario: {str(e)}"}), 500

    return jsonify(schedule.to_dict()), 201


@bp.route("/<int:id>", methods=["PUT"])
@roles_required("admin", message="No tienes permisos para actualizar horarios")
def update_schedule(id):
    schedule = WorkSchedule.query.get_or_404(id)
    data = request.json or {}

    if "name" in data and not (data.get("name") or "").strip():
        return jsonify({"error": "El nombre del horario es requerido"}), 400

    apply_schedule_fields(schedule, data)
    db.session.commit()
    return jsonify(schedule.to_dict())


@bp.route("/assign", methods=["POST"])
@roles_required("admin", message="No tienes permisos para asignar horarios")
def assign_schedule():
    """Desactiva las asignaciones previas del trabajador y crea la nueva"""
    data = request.json or {}
    staff_id = parse_int(data.get("staff_id"))
    schedule_id = parse_int(data.get("schedule_id"))

    try:
        start_date = parse_date(data.get("start_date"))
        end_date = parse_date(data.get("end_date"))
    except ValueError:
        return jsonify({"error": "Formato de fecha inválido"}), 400

    if not staff_id or not schedule_id or not start_date:
        return jsonify({"error": "staff_id, schedule_id y start_date son requeridos"}), 400

    Profile.query.get_or_404(staff_id)
    WorkSchedule.query.get_or_404(schedule_id)

    try:
        StaffSchedule.query.filter_by(staff_id=staff_id, is_active=True).update({"is_active": False})
        assignment = StaffSchedule(
            staff_id=staff_id,
            schedule_id=schedule_id,
            start_date=start_date,
            end_date=end_date,
            is_active=True,
        )
        db.session.add(assignment)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"❌ Error asignando horario a {staff_id}: {e}")
        return jsonify({"error": f"Error al asignar horario: {str(e)}"}), 500

    logger.info(f"📅 Horario {schedule_id} asignado a {staff_id}")
    return jsonify(assignment.to_dict()), 201


@bp.route("/staff/<int:staff_id>", methods=["GET"])
@login_required
def get_staff_schedule(staff_id):
    user = get_current_user()
    if staff_id != user.id and user.role not in ("admin", "supervisor"):
        return jsonify({"error": "No tienes permisos"}), 403

    assignment = StaffSchedule.query.filter_by(staff_id=staff_id, is_active=True).first()
    return jsonify(assignment.to_dict() if assignment else None)


@bp.route("/mine", methods=["GET"])
@login_required
def get_my_schedule():
    assignment = StaffSchedule.query.filter_by(staff_id=get_current_user().id, is_active=True).first()
    return jsonify(assignment.to_dict() if assignment else None)


@bp.route("/staff", methods=["GET"])
@roles_required("admin", message="No tienes permisos")
def get_all_staff_with_schedules():
    staff_list = (
        Profile.query.filter(Profile.role.in_(("staff", "supervisor", "admin")))
        .order_by(Profile.first_name)
        .all()
    )
    active = {a.staff_id: a for a in StaffSchedule.query.filter_by(is_active=True).all()}

    return jsonify([
        {
            **staff.to_summary(),
            "role": staff.role,
            "assigned_schedule": active[staff.id].to_dict() if staff.id in active else None,
        }
        for staff in staff_list
    ])
