from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from database.db import Base


class Schedule(Base):
    __tablename__ = "schedules"  # one weekly timetable slot

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False)
    classroom_id = Column(Integer, ForeignKey("classrooms.id"), nullable=False)
    semester_id = Column(Integer, ForeignKey("semesters.id"), nullable=False, index=True)

    day_of_week = Column(Integer, nullable=False)           # 1 = Monday ... 7 = Sunday
    period_start = Column(Integer, nullable=False)
    period_end = Column(Integer, nullable=False)

    # set by approved substitute / reschedule requests
    is_substitute = Column(Boolean, nullable=False, default=False)
    substitute_note = Column(String(255))
    is_rescheduled = Column(Boolean, nullable=False, default=False)
    reschedule_note = Column(String(255))
