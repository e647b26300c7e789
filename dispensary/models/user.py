from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from dispensary.core.database import Base

USER_ROLES = {"user", "admin"}


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    open_id = Column(String(64), unique=True, index=True, nullable=False)

    name = Column(Text, nullable=True)
    email = Column(String(320), nullable=True)
    phone = Column(String(20), nullable=True)
    login_method = Column(String(64), nullable=True)

    role = Column(String(16), default="user", nullable=False)  # user | admin
    age_verified = Column(Boolean, default=False, nullable=False)
    age_verified_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    last_signed_in = Column(DateTime, default=datetime.utcnow, nullable=False)
