from datetime import datetime
import uuid
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from ..db import Base


def generate_public_id():
    """Generate a UUID string for public_id"""
    return str(uuid.uuid4())


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    public_id = Column(String(36), unique=True, nullable=False, index=True, default=generate_public_id)  # External identifier
    provider_id = Column(String, unique=True, nullable=False)  # Identity provider reference
    username = Column(String, unique=True, nullable=False)
    aadhaar_no = Column(String(12), unique=True, nullable=False, index=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)  # E.164 format
    display_name = Column(String, nullable=False)
    region = Column(String, nullable=False)
    subregion = Column(String, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=True)
