"""
Service layer for business logic.

This module provides service classes that encapsulate business logic,
separating it from HTTP handling in routes and data access in repositories.
"""

from marketplace.services.auction_service import AuctionService, auction_service
from marketplace.services.base import (
    AuthenticationError,
    AuthorizationError,
    BaseService,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from marketplace.services.increment_policy import evaluate_increment_policy
from marketplace.services.listing_service import ListingService, listing_service
from marketplace.services.profile_service import ProfileService, profile_service
from marketplace.services.storage_service import StorageService, storage_service

__all__ = [
    'BaseService',
    'ServiceError',
    'NotFoundError',
    'ValidationError',
    'AuthenticationError',
    'AuthorizationError',
    'evaluate_increment_policy',
    'AuctionService',
    'auction_service',
    'ListingService',
    'listing_service',
    'ProfileService',
    'profile_service',
    'StorageService',
    'storage_service',
]
