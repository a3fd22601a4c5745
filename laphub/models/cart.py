from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer

from laphub.database import Base


class CartEntry(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True)
    identity_id = Column(
        Integer,
        ForeignKey("identities.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    items = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
