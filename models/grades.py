from datetime import datetime

from sqlalchemy import Column, Integer, Float, Boolean, DateTime, ForeignKey, UniqueConstraint
from database.db import Base


class Grade(Base):
    __tablename__ = "grades"  # one row per (student, course, semester)
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", "semester_id", name="uq_grades_student_course_semester"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)
    semester_id = Column(Integer, ForeignKey("semesters.id"), nullable=False, index=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False)   # owner of the record

    # component scores, each in [0, 100]
    regular_score = Column(Float, nullable=False)
    midterm_score = Column(Float)                           # NULL iff the course has no midterm
    final_score = Column(Float, nullable=False)
    total_score = Column(Float, nullable=False)             # weighted total at write time

    needs_makeup = Column(Boolean, nullable=False, default=False)   # total < passing score

    # makeup workflow: NULL = pending, True = approved, False = rejected
    makeup_approved = Column(Boolean)
    makeup_score = Column(Float)
    makeup_passed = Column(Boolean)
    makeup_approved_final = Column(Boolean)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
