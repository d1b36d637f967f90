"""
Bid repository for bid data access.

Bids are never placed through this application; it reads them to rank
auctions and deletes them when auctions or users go away.
"""

from typing import List, Optional, Sequence

from sqlalchemy import delete, distinct, select

from marketplace import db
from marketplace.models import Bid
from marketplace.repositories.base import BaseRepository


class BidRepository(BaseRepository[Bid]):
    """Repository for bid data access operations."""

    def __init__(self):
        super().__init__(Bid)

    def get_best_for_auction(self, auction_id: str, ascending: bool = False) -> Optional[Bid]:
        """Get the winning bid: lowest for reverse auctions, highest otherwise."""
        order = Bid.amount.asc() if ascending else Bid.amount.desc()
        return db.session.execute(
            select(Bid)
            .where(Bid.auction_id == auction_id)
            .order_by(order, Bid.created_at)
        ).scalars().first()

    def count_for_auction(self, auction_id: str) -> int:
        return self.count(auction_id=auction_id)

    def count_for_user(self, user_id: str) -> int:
        return self.count(user_id=user_id)

    def auction_ids_for_user(self, user_id: str) -> List[str]:
        """Get the distinct auctions a user has bid on."""
        return db.session.execute(
            select(distinct(Bid.auction_id)).where(Bid.user_id == user_id)
        ).scalars().all()

    def delete_for_auction(self, auction_id: str) -> int:
        """Hard delete all bids on an auction.

        Returns:
            Number of deleted bids.
        """
        return self.delete_for_auctions([auction_id])

    def delete_for_auctions(self, auction_ids: Sequence[str]) -> int:
        """Hard delete all bids on any of the given auctions."""
        if not auction_ids:
            return 0
        result = db.session.execute(
            delete(Bid)
            .where(Bid.auction_id.in_(auction_ids))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_for_user(self, user_id: str) -> int:
        """Hard delete every bid placed by a user."""
        result = db.session.execute(
            delete(Bid)
            .where(Bid.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
