"""
Modelo: Asistencia del personal
Un registro por trabajador y día con cuatro marcas opcionales
"""
from datetime import datetime
from ..db import db


class StaffAttendance(db.Model):
    __tablename__ = "staff_attendance"
    __table_args__ = (db.UniqueConstraint("staff_id", "work_date", name="uq_staff_work_date"),)

    id = db.Column(db.Integer, primary_key=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=False)
    work_date = db.Column(db.Date, nullable=False)

    check_in = db.Column(db.DateTime, nullable=True)
    break_start = db.Column(db.DateTime, nullable=True)
    break_end = db.Column(db.DateTime, nullable=True)
    check_out = db.Column(db.DateTime, nullable=True)

    hours_worked = db.Column(db.Float, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    staff = db.relationship("Profile", backref="attendance_records")

    def to_dict(self, include_staff=False):
        data = {
            "id": self.id,
            "staff_id": self.staff_id,
            "work_date": self.work_date.isoformat() if self.work_date else None,
            "check_in": self.check_in.isoformat() if self.check_in else None,
            "break_start": self.break_start.isoformat() if self.break_start else None,
            "break_end": self.break_end.isoformat() if self.break_end else None,
            "check_out": self.check_out.isoformat() if self.check_out else None,
            "hours_worked": self.hours_worked,
            "notes": self.notes,
        }
        if include_staff:
            data["staff"] = self.staff.to_summary() if self.staff else None
        return data
