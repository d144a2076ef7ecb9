from sqlalchemy import Column, Integer, String, ForeignKey
from database.db import Base


class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(Integer, primary_key=True, index=True)                              # teacher id (PK)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)  # owning login account
    teacher_number = Column(String(50), unique=True, nullable=False)
    department = Column(String(100))
    title = Column(String(50))                                                      # e.g. senior teacher
