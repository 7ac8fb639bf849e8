"""Tier model."""

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
import uuid

from database import Base


class Tier(Base):
    """Named, colored band of a tier list. The pool is stored as a tier named ``__POOL__``."""

    __tablename__ = "tiers"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    tier_list_id = Column(String, ForeignKey("tier_lists.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    color = Column(String, nullable=False, default="#808080")
    order = Column(Integer, nullable=False, default=0)

    tier_list = relationship("TierList", back_populates="tiers")
    items = relationship(
        "TierItem",
        back_populates="tier",
        cascade="all, delete-orphan",
        order_by="TierItem.order",
    )
