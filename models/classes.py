from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from database.db import Base


class Class(Base):
    __tablename__ = "classes"
    __table_args__ = (UniqueConstraint("grade", "class_number", name="uq_classes_grade_number"),)

    id = Column(Integer, primary_key=True, index=True)      # class id (PK)
    grade = Column(Integer, nullable=False)                 # year level
    class_number = Column(Integer, nullable=False)          # class number within the year
    name = Column(String(50), nullable=False)               # e.g. "Grade 3 Class 2"

    # homeroom teacher, optional
    head_teacher_id = Column(Integer, ForeignKey("teachers.id"))
