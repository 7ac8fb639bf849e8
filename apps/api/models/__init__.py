"""Models package."""

from .user import User
from .tier_list import TierList
from .tier import Tier
from .tier_item import TierItem
from .vote import Vote
from .like import Like
from .comment import Comment
from .saved_tier_list import SavedTierList
