from sqlalchemy import Column, Integer, String, ForeignKey
from database.db import Base


class Student(Base):
    __tablename__ = "students"  # student profile, one per student user

    id = Column(Integer, primary_key=True, index=True)                              # student id (PK)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)  # owning login account
    student_number = Column(String(50), unique=True, nullable=False, index=True)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False)            # homeroom class
    grade = Column(Integer, nullable=False, index=True)                             # year level, defines the ranking cohort
