"""
Auction repository for auction data access.

Provides the filtered/paginated listing queries and the bulk operations
used by the deletion cascades.
"""

from typing import List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, select

from marketplace import db
from marketplace.models import Auction
from marketplace.repositories.base import BaseRepository


class AuctionRepository(BaseRepository[Auction]):
    """Repository for auction data access operations."""

    def __init__(self):
        super().__init__(Auction)

    def list_filtered(
        self,
        category: Optional[str] = None,
        status: Optional[str] = None,
        auction_type: Optional[str] = None,
        approved: Optional[bool] = None,
        offset: int = 0,
        limit: Optional[int] = None
    ) -> Tuple[List[Auction], int]:
        """Get one page of auctions, newest first.

        Args:
            category: Match on categoryid.
            status: Match on status ('active' or 'scheduled').
            auction_type: Match on auctiontype.
            approved: Match on the approval flag.
            offset: Rows to skip.
            limit: Maximum rows to return.

        Returns:
            Tuple of (auctions on the page, total matching rows).
        """
        conditions = []
        if category:
            conditions.append(Auction.categoryid == category)
        if status:
            conditions.append(Auction.status == status)
        if auction_type:
            conditions.append(Auction.auctiontype == auction_type)
        if approved is not None:
            conditions.append(Auction.approved.is_(approved))

        total = db.session.execute(
            select(func.count()).select_from(Auction).where(*conditions)
        ).scalar_one()

        query = (
            select(Auction)
            .where(*conditions)
            .order_by(Auction.createdat.desc(), Auction.id)
            .offset(offset)
        )
        if limit is not None:
            query = query.limit(limit)

        return db.session.execute(query).scalars().all(), total

    @staticmethod
    def _created_by(email: str):
        """Case-insensitive match on the creator email."""
        return func.lower(Auction.createdby) == (email or '').strip().lower()

    def get_by_creator(self, email: str) -> List[Auction]:
        """Get all auctions created by an email, newest first."""
        return db.session.execute(
            select(Auction)
            .where(self._created_by(email))
            .order_by(Auction.createdat.desc())
        ).scalars().all()

    def ids_by_creator(self, email: str) -> List[str]:
        """Get the ids of every auction created by an email."""
        return db.session.execute(
            select(Auction.id).where(self._created_by(email))
        ).scalars().all()

    def get_many(self, auction_ids: Sequence[str]) -> List[Auction]:
        """Get the auctions with the given ids."""
        if not auction_ids:
            return []
        return db.session.execute(
            select(Auction).where(Auction.id.in_(auction_ids))
        ).scalars().all()

    def count_by_creator(self, email: str) -> int:
        return db.session.execute(
            select(func.count()).select_from(Auction).where(self._created_by(email))
        ).scalar_one()

    def delete_by_ids(self, auction_ids: Sequence[str]) -> int:
        """Hard delete auctions by id.

        Returns:
            Number of deleted auctions.
        """
        if not auction_ids:
            return 0
        result = db.session.execute(
            delete(Auction)
            .where(Auction.id.in_(auction_ids))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
