from sqlalchemy import Column, Integer, String, Float, Boolean
from database.db import Base


class Course(Base):
    __tablename__ = "courses"  # course master data

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    code = Column(String(20), unique=True, nullable=False, index=True)
    credits = Column(Float, nullable=False, default=1.0)

    # weighting policy for every grade of this course:
    #   with midterm    -> 30% regular + 30% midterm + 40% final
    #   without midterm -> 40% regular + 60% final
    has_midterm_exam = Column(Boolean, nullable=False, default=True)
