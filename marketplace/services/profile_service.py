"""
Profile service for user management.

Encapsulates all business logic related to:
- Admin user creation and listing with activity counts
- Credential checks for login
- The user deletion cascade over auctions, bids and standings
"""

import re
from typing import Any, Dict, List, Optional

from marketplace.auth import hash_password, verify_password
from marketplace.db_utils import ProfileLock
from marketplace.enums import AuctionType, LifecycleEvent, SellerType, UserRole
from marketplace.events import publish
from marketplace.logger import get_logger, log_audit
from marketplace.models import Auction, Profile
from marketplace.repositories.auction_repository import AuctionRepository
from marketplace.repositories.bid_repository import BidRepository
from marketplace.repositories.profile_repository import ProfileRepository
from marketplace.services.base import (
    AuthenticationError,
    BaseService,
    NotFoundError,
    ValidationError,
)

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


class ProfileService(BaseService):
    """Service for profile-related operations."""

    def __init__(
        self,
        profile_repo: Optional[ProfileRepository] = None,
        auction_repo: Optional[AuctionRepository] = None,
        bid_repo: Optional[BidRepository] = None
    ):
        self.profile_repo = profile_repo or ProfileRepository()
        self.auction_repo = auction_repo or AuctionRepository()
        self.bid_repo = bid_repo or BidRepository()

    # ==================== QUERIES ====================

    def list_profiles(self) -> List[dict]:
        """Get every non-admin profile with its activity counts.

        auctionCount is counted for sellers and bidCount for buyers; both
        keys are always present and default to 0.
        """
        profiles = []
        for profile in self.profile_repo.get_non_admins():
            row = profile.to_dict()
            role = UserRole.parse(profile.role)
            row['auctionCount'] = 0
            row['bidCount'] = 0
            if role and role.sells:
                row['auctionCount'] = self.auction_repo.count_by_creator(profile.email)
            if role and role.buys:
                row['bidCount'] = self.bid_repo.count_for_user(profile.id)
            profiles.append(row)
        return profiles

    def get_profile(self, user_id: str) -> dict:
        profile = self.profile_repo.get(user_id)
        if not profile:
            raise NotFoundError("User not found")
        return profile.to_dict()

    # ==================== CREATE ====================

    def add_user(self, data: Dict[str, Any]) -> Profile:
        """Create a user on behalf of an admin.

        Args:
            data: email, password, fname, lname, role and, for sellers,
                type plus organization details.

        Returns:
            The new Profile.

        Raises:
            ValidationError: If a field is missing or invalid, or the email
                is already registered.
        """
        email = _clean(data.get('email')).lower()
        password = data.get('password') if isinstance(data.get('password'), str) else ''
        fname = _clean(data.get('fname'))
        lname = _clean(data.get('lname'))
        raw_role = _clean(data.get('role'))

        if not email or not password or not fname or not lname or not raw_role:
            raise ValidationError("Email, password, first name, last name, and role are required")
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Please enter a valid email address")

        role = UserRole.parse(raw_role)
        if role is None:
            raise ValidationError("Invalid role")

        seller_type = None
        organization_name = organization_contact = None
        if role.sells:
            if not _clean(data.get('type')):
                raise ValidationError("Seller type is required for seller or both roles")
            seller_type = SellerType.parse(data.get('type'))
            if seller_type is None:
                raise ValidationError("Seller type must be individual or organization")
            if seller_type is SellerType.ORGANIZATION:
                organization_name = _clean(data.get('organizationname'))
                organization_contact = _clean(data.get('organizationcontact'))
                if not organization_name or not organization_contact:
                    raise ValidationError(
                        "Organization name and contact are required for organization type"
                    )

        with ProfileLock():
            with self.transaction():
                if self.profile_repo.find_by_email(email):
                    raise ValidationError("A user with this email already exists")

                profile = self.profile_repo.create(
                    email=email,
                    password_hash=hash_password(password),
                    fname=fname,
                    lname=lname,
                    location=_clean(data.get('location')) or None,
                    role=role.value,
                    type=seller_type.value if seller_type else None,
                    organizationname=organization_name,
                    organizationcontact=organization_contact,
                )
                self.flush()

        logger.info(f"Created user {email} ({role.value})")
        log_audit('user_created', 'profile', profile.id, {'role': role.value})
        return profile

    def ensure_admin(self, email: str, password: str) -> Profile:
        """Create an admin account, or promote and reset an existing one."""
        email = _clean(email).lower()
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Please enter a valid email address")
        if not password:
            raise ValidationError("Password is required")

        with ProfileLock():
            with self.transaction():
                profile = self.profile_repo.find_by_email(email)
                if profile:
                    profile.role = UserRole.ADMIN.value
                    profile.password_hash = hash_password(password)
                else:
                    profile = self.profile_repo.create(
                        email=email,
                        password_hash=hash_password(password),
                        fname='Admin',
                        lname='User',
                        role=UserRole.ADMIN.value,
                    )
                self.flush()

        logger.info(f"Admin account ready: {email}")
        return profile

    # ==================== AUTHENTICATION ====================

    def authenticate(self, email: str, password: str) -> Profile:
        """Check credentials and return the matching profile.

        Raises:
            AuthenticationError: If the email is unknown or the password is wrong.
        """
        profile = self.profile_repo.find_by_email(_clean(email))
        if not profile or not verify_password(password, profile.password_hash):
            logger.warning(f"Failed login for {email}")
            raise AuthenticationError()
        return profile

    # ==================== DELETE ====================

    def delete_user(self, user_id: str, actor_id: Optional[str] = None) -> dict:
        """Delete a user and everything that depends on them.

        Sellers lose their auctions and every bid on them. Buyers lose
        their bids, and each auction they had bid on gets its standing
        recomputed from the remaining bids. The whole cascade is one
        transaction.

        Args:
            user_id: ID of the profile to delete.
            actor_id: ID of the admin performing the deletion.

        Returns:
            Dict summarizing what was removed.

        Raises:
            NotFoundError: If the user does not exist.
            ValidationError: If an admin tries to delete themselves.
        """
        if actor_id and actor_id == user_id:
            raise ValidationError("You cannot delete your own account")

        with ProfileLock():
            with self.transaction():
                profile = self.profile_repo.get_for_update(user_id)
                if not profile:
                    raise NotFoundError("User not found")

                email = profile.email
                role = UserRole.parse(profile.role)
                auctions_removed = 0
                bids_removed = 0
                recomputed: List[str] = []

                if role and role.sells:
                    auction_ids = self.auction_repo.ids_by_creator(email)
                    bids_removed += self.bid_repo.delete_for_auctions(auction_ids)
                    auctions_removed = self.auction_repo.delete_by_ids(auction_ids)

                # Bids are cleared for any user holding some, not only buyers,
                # so no bid is left pointing at a missing profile.
                if (role and role.buys) or self.bid_repo.count_for_user(user_id):
                    affected = self.bid_repo.auction_ids_for_user(user_id)
                    bids_removed += self.bid_repo.delete_for_user(user_id)
                    for auction in self.auction_repo.get_many(affected):
                        self._recompute_standing(auction, user_id, email)
                        recomputed.append(auction.id)

                self.profile_repo.delete(profile)

        summary = {
            'id': user_id,
            'auctions_removed': auctions_removed,
            'bids_removed': bids_removed,
            'auctions_recomputed': recomputed,
        }
        logger.info(
            f"User {email} deleted: {auctions_removed} auctions, "
            f"{bids_removed} bids, {len(recomputed)} standings recomputed"
        )
        log_audit('user_deleted', 'profile', user_id, summary)
        publish(LifecycleEvent.USER_DELETED, {'id': user_id, 'auctions': recomputed})
        return summary

    def _recompute_standing(self, auction: Auction, user_id: str, email: str) -> None:
        """Rebuild currentbid/currentbidder/bidcount from the remaining bids."""
        ascending = AuctionType.parse(auction.auctiontype) is AuctionType.REVERSE
        best = self.bid_repo.get_best_for_auction(auction.id, ascending=ascending)

        if best:
            auction.currentbid = best.amount
            auction.currentbidder = self.profile_repo.email_for(best.user_id)
        else:
            auction.currentbid = None
            auction.currentbidder = None

        auction.bidcount = self.bid_repo.count_for_auction(auction.id)
        auction.participants = [
            participant for participant in (auction.participants or [])
            if participant != user_id
        ]
        auction.questions = [
            question for question in (auction.questions or [])
            if not isinstance(question, dict) or question.get('user') != email
        ]


def _clean(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ''


# Singleton instance for use in routes
profile_service = ProfileService()
