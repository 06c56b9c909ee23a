"""
Role Record Model — Maps a subject id to its portal role.
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime

from portal.database import Base


class UserRole(Base):
    __tablename__ = "users"

    id = Column(String(128), primary_key=True, index=True)
    role = Column(String(16), nullable=False)  # student | teacher
    created_at = Column(DateTime, default=datetime.utcnow)
