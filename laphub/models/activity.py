from sqlalchemy import JSON, Column, DateTime, Integer, String

from laphub.database import Base


class ActivityEntry(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True)
    session_id = Column(String(128), nullable=True, index=True)
    action = Column(String(64), nullable=False)
    data = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
