"""Vote model."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from database import Base


class Vote(Base):
    """One +1/-1 vote per identity (user or anonymous token) per tier list."""

    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("user_id", "tier_list_id", name="uq_votes_user_tier_list"),
        UniqueConstraint("anonymous_id", "tier_list_id", name="uq_votes_anonymous_tier_list"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    tier_list_id = Column(String, ForeignKey("tier_lists.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    anonymous_id = Column(String, nullable=True, index=True)
    value = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    tier_list = relationship("TierList", back_populates="votes")
