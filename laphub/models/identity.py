from sqlalchemy import Boolean, Column, DateTime, Integer, String

from laphub.database import Base


class IdentityEntry(Base):
    __tablename__ = "identities"

    id = Column(Integer, primary_key=True)
    session_id = Column(String(128), nullable=True, unique=True)
    name = Column(String(100), nullable=True)
    # NULL emails never collide, so the constraint only binds addresses that are set.
    email = Column(String(255), nullable=True, unique=True)
    email_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
