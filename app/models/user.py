# app/models/user.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum
from sqlalchemy.orm import relationship
from app.database import Base
import enum
from datetime import datetime

class Profession(str, enum.Enum):
    DEVELOPER = "Developer"
    DESIGNER = "Designer"
    MANAGER = "Manager"
    HR = "HR"

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(Enum(Profession, name="profession"), nullable=False)
    gender = Column(String, nullable=False)
    age = Column(Integer, nullable=False)

    # Email verification (SHA-256 of the emailed code, never the code itself)
    is_verified = Column(Boolean, default=False, nullable=False)
    verification_token = Column(String, nullable=True)

    # Password reset, cleared after use or on delivery failure
    reset_password_token = Column(String, nullable=True, index=True)
    reset_password_expires = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    tasks = relationship("Task", back_populates="owner")

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', verified={self.is_verified})>"
