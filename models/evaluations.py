from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from database.db import Base


class EvaluationQuestion(Base):
    __tablename__ = "evaluation_questions"  # course evaluation questionnaire

    id = Column(Integer, primary_key=True, index=True)
    question_text = Column(String(500), nullable=False)
    question_type = Column(String(20), nullable=False, default="rating")   # rating / text
    order_number = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)


class EvaluationPeriod(Base):
    __tablename__ = "evaluation_periods"  # window in which students may submit evaluations

    id = Column(Integer, primary_key=True, index=True)
    semester_id = Column(Integer, ForeignKey("semesters.id"), nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)


class Evaluation(Base):
    __tablename__ = "evaluations"  # one answer to one question

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)
    semester_id = Column(Integer, ForeignKey("semesters.id"), nullable=False)
    question_id = Column(Integer, ForeignKey("evaluation_questions.id"), nullable=False)
    rating_score = Column(Integer)                          # 1-5, rating questions only
    text_answer = Column(Text)                              # text questions only
    created_at = Column(DateTime, default=datetime.utcnow)
