"""
Repository layer for data access.

Repositories wrap SQLAlchemy queries so services never build statements
themselves.
"""

from marketplace.repositories.auction_repository import AuctionRepository
from marketplace.repositories.base import BaseRepository
from marketplace.repositories.bid_repository import BidRepository
from marketplace.repositories.profile_repository import ProfileRepository

__all__ = [
    'BaseRepository',
    'AuctionRepository',
    'BidRepository',
    'ProfileRepository',
]
