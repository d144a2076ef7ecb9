from sqlalchemy import Column, Integer, String
from database.db import Base


class Classroom(Base):
    __tablename__ = "classrooms"  # physical rooms used by schedules

    id = Column(Integer, primary_key=True, index=True)
    room_number = Column(String(20), unique=True, nullable=False)
    building = Column(String(100), nullable=False)
    capacity = Column(Integer, nullable=False, default=40)
    type = Column(String(30), default="normal")              # normal / lab / multimedia ...
