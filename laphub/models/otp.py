from sqlalchemy import Column, DateTime, Index, Integer, String

from laphub.database import Base


class OtpEntry(Base):
    __tablename__ = "otp_codes"

    id = Column(Integer, primary_key=True)
    session_id = Column(String(128), nullable=False)
    channel = Column(String(16), nullable=False)
    target = Column(String(255), nullable=False)
    code = Column(String(10), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_otp_lookup", "session_id", "channel", "target", "created_at"),
        Index("ix_otp_expires_at", "expires_at"),
    )
