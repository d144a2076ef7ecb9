from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey
from database.db import Base


class RescheduleRequest(Base):
    __tablename__ = "reschedule_requests"  # teacher asks to move a timetable slot

    id = Column(Integer, primary_key=True, index=True)
    schedule_id = Column(Integer, ForeignKey("schedules.id"), nullable=False)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False)
    reason = Column(Text, nullable=False)
    request_type = Column(String(20), nullable=False, default="reschedule")   # reschedule / cancel / makeup_class
    original_date = Column(Date)
    new_date = Column(Date)

    # target slot, NULL keeps the current value on approval
    new_day_of_week = Column(Integer)
    new_period_start = Column(Integer)
    new_period_end = Column(Integer)
    new_classroom_id = Column(Integer, ForeignKey("classrooms.id"))

    status = Column(String(20), nullable=False, default="pending")   # pending / approved / rejected
    admin_note = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    reviewed_at = Column(DateTime)


class SubstituteRequest(Base):
    __tablename__ = "substitute_requests"  # teacher asks a colleague to cover a slot

    id = Column(Integer, primary_key=True, index=True)
    schedule_id = Column(Integer, ForeignKey("schedules.id"), nullable=False)
    original_teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False)
    substitute_teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False)
    reason = Column(Text, nullable=False)
    substitute_date = Column(Date, nullable=False)

    status = Column(String(20), nullable=False, default="pending")
    admin_note = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    reviewed_at = Column(DateTime)
