"""Tier item model."""

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
import uuid

from database import Base


class TierItem(Base):
    """Media entry placed in a tier. Rows are recreated on every tier list update."""

    __tablename__ = "tier_items"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    tier_id = Column(String, ForeignKey("tiers.id", ondelete="CASCADE"), nullable=False, index=True)
    media_url = Column(String, nullable=False)
    media_type = Column(String, nullable=False, default="IMAGE")  # IMAGE, VIDEO, AUDIO, GIF, YOUTUBE, TWITTER, INSTAGRAM
    cover_image_url = Column(String, nullable=True)
    embed_id = Column(String, nullable=True)
    label = Column(String, nullable=True)
    order = Column(Integer, nullable=False, default=0)

    tier = relationship("Tier", back_populates="items")
