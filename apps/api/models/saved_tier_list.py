"""Saved tier list (bookmark) model."""

from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from database import Base


class SavedTierList(Base):
    __tablename__ = "saved_tier_lists"
    __table_args__ = (UniqueConstraint("user_id", "tier_list_id", name="uq_saved_tier_lists_user_tier_list"),)

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    tier_list_id = Column(String, ForeignKey("tier_lists.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    tier_list = relationship("TierList", back_populates="saves")
