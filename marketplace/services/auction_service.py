"""
Auction service for the auction lifecycle.

Encapsulates all business logic related to:
- Creating auctions from the submitted wizard form
- Admin approval and start-time scheduling
- Rejection/deletion with the bid cascade
- Filtered, paginated listing queries
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from marketplace.constants import DEFAULT_BID_EXTENSION_MINUTES, DEFAULT_CURRENCY, DEFAULT_LANGUAGE
from marketplace.dataclasses import IncrementPolicy, Pagination
from marketplace.db_utils import AuctionLock
from marketplace.enums import AuctionStatus, AuctionType, LaunchType, LifecycleEvent, UserRole
from marketplace.events import publish
from marketplace.logger import get_logger, log_audit
from marketplace.models import Auction
from marketplace.repositories.auction_repository import AuctionRepository
from marketplace.repositories.bid_repository import BidRepository
from marketplace.repositories.profile_repository import ProfileRepository
from marketplace.services.base import BaseService, NotFoundError, ValidationError
from marketplace.services.increment_policy import evaluate_increment_policy
from marketplace.utils import parse_timestamp, to_number, utc_now

logger = get_logger(__name__)

# Form keys copied onto the row as-is (column name is the key lowercased)
PASSTHROUGH_FIELDS = (
    'categoryId',
    'subCategoryId',
    'productDescription',
    'attributes',
    'specifications',
    'sku',
    'brand',
    'model',
    'auctionDuration',
    'participationType',
    'participantEmails',
    'qualificationCriteria',
    'termsAndConditions',
)

BOOLEAN_FIELDS = ('bidExtension', 'allowAutoBidding', 'isSilentAuction')


class AuctionService(BaseService):
    """Service for auction lifecycle operations.

    Every mutation runs inside a single transaction; approval and deletion
    additionally lock the auction row.
    """

    def __init__(
        self,
        auction_repo: Optional[AuctionRepository] = None,
        bid_repo: Optional[BidRepository] = None,
        profile_repo: Optional[ProfileRepository] = None
    ):
        """Initialize service with optional repository injection.

        Args:
            auction_repo: AuctionRepository instance (defaults to new instance).
            bid_repo: BidRepository instance (defaults to new instance).
            profile_repo: ProfileRepository instance (defaults to new instance).
        """
        self.auction_repo = auction_repo or AuctionRepository()
        self.bid_repo = bid_repo or BidRepository()
        self.profile_repo = profile_repo or ProfileRepository()

    def resolve_seller(self, email: str) -> str:
        """Stored email of the seller an admin creates an auction for.

        Raises:
            ValidationError: If no seller or both profile has that email.
        """
        profile = self.profile_repo.find_by_email(email)
        role = UserRole.parse(profile.role) if profile else None
        if role is None or not role.sells:
            raise ValidationError(f"No seller account found for {email.strip()}")
        return profile.email

    # ==================== CREATE ====================

    def create_auction(
        self,
        data: Dict[str, Any],
        creator_email: str,
        allow_range_gaps: bool = True
    ) -> dict:
        """Validate a submitted auction form and persist it.

        Nothing is written unless every check passes. The new auction is
        pending: approved is False until an admin approves it.

        Args:
            data: The wizard's AuctionFormData (camelCase keys).
            creator_email: Email of the creating seller.
            allow_range_gaps: Accept gapped range-based increment rules.

        Returns:
            The persisted auction row.

        Raises:
            ValidationError: If any field fails validation.
        """
        creator_email = (creator_email or '').strip().lower()
        if not creator_email:
            raise ValidationError("Creator email is required")

        raw_type = _clean(data.get('auctionType'))
        sub_type = _clean(data.get('auctionSubType'))
        if not raw_type or not sub_type:
            raise ValidationError("Auction type and subtype are required")

        auction_type = AuctionType.parse(raw_type)
        if auction_type is None:
            raise ValidationError("Auction type must be forward or reverse")

        is_multi_lot = bool(data.get('isMultiLot'))
        product_name = _clean(data.get('productName'))
        if not is_multi_lot and not product_name:
            raise ValidationError("Product name is required for single lot auctions")

        lots = data.get('lots') or []
        if is_multi_lot:
            self._validate_lots(lots)

        start_price = self._optional_amount(data.get('startPrice'), 'Start price')

        target_price = None
        required_documents = None
        if auction_type is AuctionType.REVERSE:
            target_price = to_number(_first_present(data, 'targetPrice', 'targetprice'))
            if target_price is None or target_price <= 0:
                raise ValidationError("Target price must be a number greater than zero")
            required_documents = self._parse_required_documents(
                _first_present(data, 'requireddocuments', 'requiredDocuments')
            )

        policy = evaluate_increment_policy(
            sub_type,
            data.get('bidIncrementType'),
            data.get('bidIncrementRules'),
            minimum_increment=data.get('minimumIncrement'),
            allow_range_gaps=allow_range_gaps,
        )

        launch_type = LaunchType.parse(data.get('launchType') or LaunchType.IMMEDIATE.value)
        if launch_type is None:
            raise ValidationError("Launch type must be immediate or scheduled")

        now = utc_now()
        scheduled_start = self._resolve_scheduled_start(
            launch_type, data.get('scheduledStart'), now
        )

        columns = {key.lower(): data.get(key) for key in PASSTHROUGH_FIELDS if key in data}
        columns.update({key.lower(): bool(data.get(key)) for key in BOOLEAN_FIELDS})
        columns.update(policy.to_columns())

        with self.transaction():
            auction = self.auction_repo.create(
                createdby=creator_email,
                createdat=now,
                auctiontype=auction_type.value,
                auctionsubtype=sub_type,
                productname=product_name or None,
                productimages=_file_urls(data.get('productImages', data.get('productimages'))),
                productdocuments=_file_urls(data.get('productDocuments')),
                productquantity=_optional_int(data.get('productQuantity')),
                ismultilot=is_multi_lot,
                lots=lots if is_multi_lot else [],
                startprice=start_price or 0,
                targetprice=target_price,
                reserveprice=to_number(data.get('reservePrice')),
                currentbid=target_price if auction_type is AuctionType.REVERSE else (start_price or 0),
                currency=_clean(data.get('currency')) or DEFAULT_CURRENCY,
                language=_clean(data.get('language')) or DEFAULT_LANGUAGE,
                bidextensiontime=_optional_int(data.get('bidExtensionTime'))
                or DEFAULT_BID_EXTENSION_MINUTES,
                launchtype=launch_type.value,
                scheduledstart=scheduled_start,
                status=AuctionStatus.for_launch(launch_type).value,
                requireddocuments=required_documents,
                approved=False,
                editable=True,
                ended=False,
                bidcount=0,
                participants=[],
                questions=[],
                **columns,
            )
            self.flush()
            row = auction.to_dict()

        logger.info(f"Auction {row['id']} created by {creator_email} ({launch_type.value})")
        log_audit('auction_created', 'auction', row['id'], {'createdby': creator_email})
        publish(LifecycleEvent.AUCTION_CREATED, {'id': row['id'], 'createdby': creator_email})
        return row

    def _validate_lots(self, lots: Any) -> None:
        """Every lot of a multi-lot auction must be fully populated."""
        if not isinstance(lots, list) or not lots:
            raise ValidationError("At least one lot is required for multi-lot auctions")
        for lot in lots:
            if not isinstance(lot, dict):
                raise ValidationError("Please complete all required fields for each lot")
            start_price = to_number(lot.get('startPrice'))
            increment = to_number(lot.get('minimumIncrement'))
            if (
                not _clean(lot.get('name'))
                or not _clean(lot.get('description'))
                or start_price is None or start_price <= 0
                or increment is None or increment <= 0
            ):
                raise ValidationError("Please complete all required fields for each lot")

    def _parse_required_documents(self, value: Any) -> List[Dict[str, str]]:
        """Parse the reverse-auction document list into [{name}, ...].

        Accepts a JSON string or an already decoded list.
        """
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError("Required documents are required for reverse auctions")

        documents = value
        if isinstance(value, str):
            try:
                documents = json.loads(value)
            except ValueError:
                raise ValidationError("Required documents must be a valid JSON array")

        if not isinstance(documents, list):
            raise ValidationError("Required documents must be a valid JSON array")
        if not documents:
            raise ValidationError("Please select at least one required document")

        normalized = []
        for document in documents:
            name = document.get('name') if isinstance(document, dict) else None
            if not isinstance(name, str) or not name.strip():
                raise ValidationError("Each required document must have a name")
            normalized.append({'name': name.strip()})
        return normalized

    def _resolve_scheduled_start(
        self,
        launch_type: LaunchType,
        requested: Any,
        now: datetime
    ) -> datetime:
        """Immediate auctions start now; scheduled ones need a future start."""
        if launch_type is LaunchType.IMMEDIATE:
            return now

        scheduled = parse_timestamp(requested)
        if scheduled is None:
            raise ValidationError("Scheduled start time is required for scheduled auctions")
        if scheduled <= now:
            raise ValidationError("Scheduled start time must be in the future")
        return scheduled

    def _optional_amount(self, value: Any, label: str) -> Optional[float]:
        if value is None or value == '':
            return None
        amount = to_number(value)
        if amount is None or amount < 0:
            raise ValidationError(f"{label} must be a non-negative number")
        return amount

    # ==================== APPROVE ====================

    def approve_auction(self, auction_id: str) -> dict:
        """Approve an auction and settle its start time.

        Immediate auctions start at approval time. Scheduled auctions keep
        their start time unless it is missing or no longer in the future,
        in which case they start now. An auction that is already approved
        keeps its start time, so repeating the call changes nothing.

        Args:
            auction_id: ID of the auction.

        Returns:
            The updated auction row.

        Raises:
            NotFoundError: If the auction does not exist.
        """
        with AuctionLock():
            with self.transaction():
                auction = self.auction_repo.get_for_update(auction_id)
                if not auction:
                    raise NotFoundError("Auction not found")

                if not auction.approved:
                    now = utc_now()
                    launch_type = LaunchType.parse(auction.launchtype)
                    if launch_type is LaunchType.IMMEDIATE:
                        auction.scheduledstart = now
                    elif auction.scheduledstart is None or auction.scheduledstart <= now:
                        auction.scheduledstart = now

                auction.approved = True
                row = auction.to_dict()

        logger.info(f"Auction {auction_id} approved, starts {row['scheduledstart']}")
        log_audit('auction_approved', 'auction', auction_id, {'scheduledstart': row['scheduledstart']})
        publish(LifecycleEvent.AUCTION_APPROVED, {
            'id': auction_id,
            'scheduledstart': row['scheduledstart'],
        })
        return row

    # ==================== DELETE ====================

    def delete_auction(self, auction_id: str) -> dict:
        """Delete an auction together with every bid on it.

        Both deletes share one transaction: if either fails nothing is
        removed.

        Args:
            auction_id: ID of the auction.

        Returns:
            Dict with the auction id and number of bids removed.

        Raises:
            NotFoundError: If the auction does not exist.
        """
        with AuctionLock():
            with self.transaction():
                auction = self.auction_repo.get_for_update(auction_id)
                if not auction:
                    raise NotFoundError("Auction not found")

                bids_removed = self.bid_repo.delete_for_auction(auction_id)
                self.auction_repo.delete(auction)

        logger.info(f"Auction {auction_id} deleted with {bids_removed} bids")
        log_audit('auction_deleted', 'auction', auction_id, {'bids_removed': bids_removed})
        publish(LifecycleEvent.AUCTION_DELETED, {'id': auction_id})
        return {'id': auction_id, 'bids_removed': bids_removed}

    # ==================== QUERIES ====================

    def get_auction(self, auction_id: str) -> dict:
        """Get one auction with the minimum acceptable next bid.

        Raises:
            NotFoundError: If the auction does not exist.
        """
        auction = self.auction_repo.get(auction_id)
        if not auction:
            raise NotFoundError("Auction not found")

        row = auction.to_dict()
        row['minimumnextbid'] = self.minimum_next_bid(auction)
        return row

    def minimum_next_bid(self, auction: Auction) -> float:
        """Evaluate the auction's increment rules at its current bid."""
        policy = IncrementPolicy.from_columns(
            auction.bidincrementtype,
            auction.bidincrementrules,
            auction.minimumincrement,
            auction.percent,
        )
        auction_type = AuctionType.parse(auction.auctiontype) or AuctionType.FORWARD
        current = auction.currentbid
        if current is None:
            current = auction.startprice or 0
        return policy.minimum_next_bid(current, auction_type)

    def list_auctions(
        self,
        page: int = 1,
        limit: int = 10000,
        category: Optional[str] = None,
        status: Optional[str] = None,
        auction_type: Optional[str] = None,
        approved: Optional[bool] = None
    ) -> dict:
        """Get a filtered page of auctions, newest first.

        Returns:
            Dict with 'auctions' (rows) and 'pagination' metadata.
        """
        pagination = Pagination(page=page, limit=limit, total=0)
        auctions, pagination.total = self.auction_repo.list_filtered(
            category=category,
            status=status,
            auction_type=auction_type,
            approved=approved,
            offset=pagination.offset,
            limit=pagination.limit,
        )
        return {
            'auctions': [auction.to_dict() for auction in auctions],
            'pagination': pagination.to_dict(),
        }


def _clean(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ''


def _first_present(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _optional_int(value: Any) -> Optional[int]:
    number = to_number(value)
    return int(number) if number is not None else None


def _file_urls(files: Any) -> List[Any]:
    """Keep only URLs for uploaded files; plain strings pass through."""
    if not isinstance(files, list):
        return []
    urls = []
    for item in files:
        if isinstance(item, dict):
            if item.get('url'):
                urls.append(item['url'])
        elif isinstance(item, str) and item:
            urls.append(item)
    return urls


# Singleton instance for use in routes
auction_service = AuctionService()
