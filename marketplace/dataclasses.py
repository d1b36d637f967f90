"""
Data classes for structured data in the auction marketplace.

Provides type-safe structures for bid increment rules, normalized increment
policies, pagination metadata and stored files.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from marketplace.enums import AuctionType, BidIncrementType


@dataclass
class BidIncrementRule:
    """One increment rule covering the bid range [min_bid_amount, max_bid_amount)."""
    min_bid_amount: float
    increment_value: float
    increment_type: BidIncrementType
    max_bid_amount: Optional[float] = None
    id: Optional[str] = None

    @property
    def is_unbounded(self) -> bool:
        return self.max_bid_amount is None

    def covers(self, amount: float) -> bool:
        """Check whether a bid amount falls inside this rule's range."""
        if amount < self.min_bid_amount:
            return False
        return self.is_unbounded or amount < self.max_bid_amount

    def step_at(self, amount: float) -> float:
        """Increment this rule demands at the given bid level."""
        if self.increment_type is BidIncrementType.PERCENTAGE:
            return round(amount * self.increment_value / 100, 2)
        return self.increment_value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase shape the wizard submits."""
        return {
            "id": self.id,
            "minBidAmount": self.min_bid_amount,
            "maxBidAmount": self.max_bid_amount,
            "incrementValue": self.increment_value,
            "incrementType": self.increment_type.value,
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        default_type: BidIncrementType = BidIncrementType.FIXED
    ) -> "BidIncrementRule":
        """Create from a stored rule without validating it."""
        max_amount = data.get("maxBidAmount")
        return cls(
            min_bid_amount=float(data.get("minBidAmount") or 0),
            max_bid_amount=float(max_amount) if max_amount is not None else None,
            increment_value=float(data.get("incrementValue") or 0),
            increment_type=BidIncrementType.parse(data.get("incrementType")) or default_type,
            id=data.get("id"),
        )


@dataclass
class IncrementPolicy:
    """Normalized bid increment policy ready to be persisted."""
    increment_type: BidIncrementType
    rules: List[BidIncrementRule] = field(default_factory=list)
    minimum_increment: float = 0.0
    percent: Optional[float] = None

    def increment_for(self, amount: float) -> float:
        """Return the minimum step between bids at the given bid level."""
        if self.increment_type is BidIncrementType.FIXED:
            return self.minimum_increment
        if self.increment_type is BidIncrementType.PERCENTAGE:
            return round(amount * (self.percent or 0) / 100, 2)
        if not self.rules:
            return 0.0

        # Rules are sorted ascending; inside a gap the lower rule still applies
        applicable = self.rules[0]
        for rule in self.rules:
            if rule.min_bid_amount <= amount:
                applicable = rule
            if rule.covers(amount):
                break
        return applicable.step_at(amount)

    def minimum_next_bid(self, current_bid: float, auction_type: AuctionType) -> float:
        """Lowest acceptable next bid (highest, for reverse auctions)."""
        step = self.increment_for(current_bid)
        if auction_type.ranks_ascending:
            return max(current_bid - step, 0.0)
        return current_bid + step

    def to_columns(self) -> Dict[str, Any]:
        """Map onto the denormalized auction columns."""
        return {
            "bidincrementtype": self.increment_type.value,
            "bidincrementrules": [rule.to_dict() for rule in self.rules],
            "minimumincrement": self.minimum_increment,
            "percent": self.percent,
        }

    @classmethod
    def from_columns(
        cls,
        increment_type: Optional[str],
        rules: Optional[List[Dict[str, Any]]],
        minimum_increment: Optional[float],
        percent: Optional[float]
    ) -> "IncrementPolicy":
        """Rebuild a policy from a stored auction row."""
        policy_type = BidIncrementType.parse(increment_type) or BidIncrementType.FIXED
        parsed = sorted(
            (BidIncrementRule.from_dict(rule, policy_type) for rule in rules or []),
            key=lambda rule: rule.min_bid_amount
        )
        return cls(
            increment_type=policy_type,
            rules=parsed,
            minimum_increment=float(minimum_increment or 0),
            percent=percent,
        )


@dataclass
class Pagination:
    """Page metadata returned alongside listing queries."""
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
        }


@dataclass
class StoredFile:
    """Metadata for a file saved in the object store."""
    id: str
    name: str
    url: str
    size: int
    type: str
    uploaded_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "size": self.size,
            "type": self.type,
            "uploadedAt": self.uploaded_at,
        }
