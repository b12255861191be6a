"""
Modelo: Horarios de trabajo y su asignación al personal
"""
from datetime import datetime
from ..db import db


class WorkSchedule(db.Model):
    __tablename__ = "work_schedules"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    monthly_hours = db.Column(db.Float, nullable=True)
    daily_hours = db.Column(db.Float, nullable=True)
    work_days_per_week = db.Column(db.Integer, nullable=True)
    # HH:MM
    check_in_time = db.Column(db.String(5), nullable=True)
    check_out_time = db.Column(db.String(5), nullable=True)
    break_duration_minutes = db.Column(db.Integer, default=60)
    tolerance_minutes = db.Column(db.Integer, default=10)
    is_active = db.Column(db.Boolean, default=True)
    created_by = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "monthly_hours": self.monthly_hours,
            "daily_hours": self.daily_hours,
            "work_days_per_week": self.work_days_per_week,
            "check_in_time": self.check_in_time,
            "check_out_time": self.check_out_time,
            "break_duration_minutes": self.break_duration_minutes,
            "tolerance_minutes": self.tolerance_minutes,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class StaffSchedule(db.Model):
    """Asignación de un horario a un trabajador; solo una activa a la vez"""
    __tablename__ = "staff_schedules"

    id = db.Column(db.Integer, primary_key=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=False)
    schedule_id = db.Column(db.Integer, db.ForeignKey("work_schedules.id"), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=True)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    staff = db.relationship("Profile", backref="schedule_assignments")
    schedule = db.relationship("WorkSchedule", backref="assignments")

    def to_dict(self):
        return {
            "id": self.id,
            "staff_id": self.staff_id,
            "schedule_id": self.schedule_id,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "is_active": self.is_active,
            "schedule": self.schedule.to_dict() if self.schedule else None,
        }
