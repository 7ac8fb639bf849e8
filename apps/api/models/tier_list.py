"""Tier list aggregate root."""

from datetime import datetime, timezone
import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TierList(Base):
    """A ranking owned by a user, by an anonymous token, or by nobody (demo templates)."""

    __tablename__ = "tier_lists"
    __table_args__ = (
        CheckConstraint("NOT (user_id IS NOT NULL AND anonymous_id IS NOT NULL)", name="ck_tier_lists_single_owner"),
        CheckConstraint("NOT (anonymous_id IS NOT NULL AND is_public)", name="ck_tier_lists_anonymous_private"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    cover_image_url = Column(String, nullable=True)
    is_public = Column(Boolean, nullable=False, default=False, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    anonymous_id = Column(String, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=_utcnow)

    # Relationships
    user = relationship("User", back_populates="tier_lists")
    tiers = relationship(
        "Tier",
        back_populates="tier_list",
        cascade="all, delete-orphan",
        order_by="Tier.order",
    )
    votes = relationship("Vote", back_populates="tier_list", cascade="all, delete-orphan")
    likes = relationship("Like", back_populates="tier_list", cascade="all, delete-orphan")
    comments = relationship(
        "Comment",
        back_populates="tier_list",
        cascade="all, delete-orphan",
        order_by="Comment.created_at.desc()",
    )
    saves = relationship("SavedTierList", back_populates="tier_list", cascade="all, delete-orphan")
