# market/models/user.py
# User model: email, hashed_password, username, role.
from sqlalchemy import Column, Integer, String, DateTime, Enum
from datetime import datetime
from market.db.base import Base
import enum


class Role(str, enum.Enum):
    customer = "customer"
    admin = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    username = Column(String(100), nullable=False)
    role = Column(Enum(Role), default=Role.customer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
