from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from ..db import Base


class DirectoryEntry(Base):
    """Aadhaar number to phone mapping, populated out of band"""
    __tablename__ = "aadhaar_directory"

    id = Column(Integer, primary_key=True)
    aadhaar = Column(String(12), unique=True, nullable=False, index=True)
    phone = Column(String, nullable=False)  # +91XXXXXXXXXX
    full_name = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
