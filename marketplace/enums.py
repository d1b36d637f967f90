"""
Enums for the auction marketplace.

Provides type-safe constants for auction classification, scheduling,
increment strategies and user roles.
"""

from enum import Enum
from typing import Optional


class _ValueEnum(str, Enum):
    """String enum with a forgiving lookup helper."""

    @classmethod
    def values(cls) -> list:
        return [member.value for member in cls]

    @classmethod
    def parse(cls, value: Optional[str]):
        """Return the member for value, or None if it is not a valid value."""
        if value is None:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class AuctionType(_ValueEnum):
    """Direction of price movement."""
    FORWARD = "forward"
    REVERSE = "reverse"

    @property
    def ranks_ascending(self) -> bool:
        """Reverse auctions are won by the lowest bid."""
        return self is AuctionType.REVERSE


class LaunchType(_ValueEnum):
    """When an auction opens once approved."""
    IMMEDIATE = "immediate"
    SCHEDULED = "scheduled"


class AuctionStatus(_ValueEnum):
    """Status derived at creation from the launch type."""
    ACTIVE = "active"
    SCHEDULED = "scheduled"

    @classmethod
    def for_launch(cls, launch_type: LaunchType) -> "AuctionStatus":
        return cls.ACTIVE if launch_type is LaunchType.IMMEDIATE else cls.SCHEDULED


class BidIncrementType(_ValueEnum):
    """Strategies for the minimum step between consecutive bids."""
    FIXED = "fixed"
    PERCENTAGE = "percentage"
    RANGE_BASED = "range-based"


class UserRole(_ValueEnum):
    """Marketplace roles."""
    ADMIN = "admin"
    BUYER = "buyer"
    SELLER = "seller"
    BOTH = "both"

    @property
    def sells(self) -> bool:
        return self in (UserRole.SELLER, UserRole.BOTH)

    @property
    def buys(self) -> bool:
        return self in (UserRole.BUYER, UserRole.BOTH)


class SellerType(_ValueEnum):
    """Kind of seller account."""
    INDIVIDUAL = "individual"
    ORGANIZATION = "organization"


class UploadFolder(_ValueEnum):
    """Top-level folders of the file store."""
    PUBLIC = "public"
    DOCUMENTS = "documents"


class LifecycleEvent(_ValueEnum):
    """Notification types broadcast to dashboards."""
    AUCTION_CREATED = "auction_created"
    AUCTION_APPROVED = "auction_approved"
    AUCTION_DELETED = "auction_deleted"
    USER_DELETED = "user_deleted"
