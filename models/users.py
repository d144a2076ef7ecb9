from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime
from database.db import Base


class User(Base):
    __tablename__ = "users"  # login accounts for every role

    id = Column(Integer, primary_key=True, index=True)                  # user id (PK)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)                 # bcrypt hash
    role = Column(String(20), nullable=False)                           # student / teacher / admin
    name = Column(String(100), nullable=False)                          # display name
    email = Column(String(120))
    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<User {self.username} ({self.role})>"
