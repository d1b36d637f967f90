"""
Listing service: the seller's view of their own auctions.
"""

from typing import Any, Dict, List, Optional

from marketplace.constants import EDITABLE_LISTING_FIELDS, YANKEE_SUBTYPE
from marketplace.db_utils import AuctionLock
from marketplace.enums import BidIncrementType
from marketplace.logger import get_logger, log_audit
from marketplace.models import Auction
from marketplace.repositories.auction_repository import AuctionRepository
from marketplace.services.auction_service import AuctionService, auction_service
from marketplace.services.base import (
    AuthorizationError,
    BaseService,
    NotFoundError,
    ValidationError,
)
from marketplace.utils import to_number

logger = get_logger(__name__)

PRICE_FIELDS = ('startprice', 'minimumincrement', 'targetprice')
DURATION_PARTS = ('days', 'hours', 'minutes')


class ListingService(BaseService):
    """Service for listing queries and seller edits."""

    def __init__(
        self,
        auction_repo: Optional[AuctionRepository] = None,
        auctions: Optional[AuctionService] = None
    ):
        self.auction_repo = auction_repo or AuctionRepository()
        self.auctions = auctions or auction_service

    def get_listings(self, email: str) -> List[dict]:
        """Get every auction created by an email, newest first."""
        return [auction.to_dict() for auction in self.auction_repo.get_by_creator(email)]

    def get_listing(self, auction_id: str) -> dict:
        """Get a single listing row.

        Raises:
            NotFoundError: If the auction does not exist.
        """
        auction = self.auction_repo.get(auction_id)
        if not auction:
            raise NotFoundError("Auction not found")
        return auction.to_dict()

    def update_listing(
        self,
        auction_id: str,
        data: Dict[str, Any],
        actor_email: str,
        actor_is_admin: bool = False
    ) -> dict:
        """Apply a seller's edit to an editable listing.

        Only EDITABLE_LISTING_FIELDS present in data are touched; every
        other key in the body is ignored.

        Args:
            auction_id: ID of the auction.
            data: Edited fields, keyed by lowercase column name.
            actor_email: Email of the caller.
            actor_is_admin: Admins may edit any listing.

        Returns:
            The updated listing row.

        Raises:
            NotFoundError: If the auction does not exist.
            AuthorizationError: If the auction is locked or owned by someone else.
            ValidationError: If an edited value is malformed.
        """
        changes = self._validate_changes(data)

        with AuctionLock():
            with self.transaction():
                auction = self.auction_repo.get_for_update(auction_id)
                if not auction:
                    raise NotFoundError("Auction not found")
                if not auction.editable:
                    raise AuthorizationError("Auction is not editable")
                self._check_owner(auction, actor_email, actor_is_admin)

                if (
                    changes.get('minimumincrement')
                    and (auction.auctionsubtype or '').lower() == YANKEE_SUBTYPE
                ):
                    raise ValidationError("Yankee auctions do not use a minimum increment")

                for field, value in changes.items():
                    setattr(auction, field, value)

                if 'minimumincrement' in changes:
                    self._sync_fixed_rule(auction, changes['minimumincrement'])

                row = auction.to_dict()

        logger.info(f"Listing {auction_id} updated: {sorted(changes)}")
        log_audit('listing_updated', 'auction', auction_id, {'fields': sorted(changes)})
        return row

    def delete_listing(
        self,
        auction_id: str,
        actor_email: str,
        actor_is_admin: bool = False
    ) -> dict:
        """Delete one of the caller's listings along with its bids."""
        auction = self.auction_repo.get(auction_id)
        if not auction:
            raise NotFoundError("Auction not found")
        self._check_owner(auction, actor_email, actor_is_admin)
        return self.auctions.delete_auction(auction_id)

    def _check_owner(self, auction: Auction, actor_email: str, actor_is_admin: bool) -> None:
        if actor_is_admin:
            return
        if not actor_email or (auction.createdby or '').lower() != actor_email.lower():
            raise AuthorizationError("You can only manage your own listings")

    def _validate_changes(self, data: Dict[str, Any]) -> Dict[str, Any]:
        changes: Dict[str, Any] = {}
        for field in EDITABLE_LISTING_FIELDS:
            if field not in data or data[field] is None:
                continue
            value = data[field]

            if field in PRICE_FIELDS:
                number = to_number(value)
                if number is None or number < 0:
                    raise ValidationError(f"{field} must be a non-negative number")
                changes[field] = number
            elif field == 'productname':
                if not isinstance(value, str) or not value.strip():
                    raise ValidationError("Product name cannot be empty")
                changes[field] = value.strip()
            elif field == 'productdescription':
                if not isinstance(value, str):
                    raise ValidationError("Product description must be text")
                changes[field] = value
            elif field == 'auctionduration':
                changes[field] = self._validate_duration(value)

        return changes

    def _validate_duration(self, value: Any) -> Dict[str, int]:
        if not isinstance(value, dict):
            raise ValidationError("Auction duration must have days, hours and minutes")
        duration = {}
        for part in DURATION_PARTS:
            number = to_number(value.get(part, 0))
            if number is None or number < 0 or number != int(number):
                raise ValidationError(f"Auction duration {part} must be a non-negative whole number")
            duration[part] = int(number)
        if not any(duration.values()):
            raise ValidationError("Auction duration must be longer than zero")
        return duration

    def _sync_fixed_rule(self, auction: Auction, increment: float) -> None:
        """Keep the single fixed rule in step with minimumincrement."""
        if BidIncrementType.parse(auction.bidincrementtype) is not BidIncrementType.FIXED:
            return
        rules = [dict(rule) for rule in (auction.bidincrementrules or [])]
        if rules:
            rules[0]['incrementValue'] = increment
            auction.bidincrementrules = rules


# Singleton instance for use in routes
listing_service = ListingService()
