"""
Centralized constants for the auction marketplace.

Magic numbers, defaults and allow-lists used across services and routes.
"""

from typing import Final

# ==================== BID INCREMENTS ====================
MIN_PERCENT_INCREMENT: Final[float] = 0.1
MAX_PERCENT_INCREMENT: Final[float] = 100.0
YANKEE_SUBTYPE: Final[str] = 'yankee'

# ==================== LISTING QUERIES ====================
DEFAULT_PAGE: Final[int] = 1
DEFAULT_PAGE_LIMIT: Final[int] = 10000  # effectively unpaginated

# ==================== LISTING EDITS ====================
# The only columns a seller may change through PUT /api/listings/<id>
EDITABLE_LISTING_FIELDS: Final[tuple] = (
    'productname',
    'productdescription',
    'startprice',
    'minimumincrement',
    'auctionduration',
    'targetprice',
)

# ==================== DEFAULTS ====================
DEFAULT_CURRENCY: Final[str] = 'USD'
DEFAULT_LANGUAGE: Final[str] = 'en'
DEFAULT_BID_EXTENSION_MINUTES: Final[int] = 5

# ==================== FILE STORAGE ====================
MAX_UPLOAD_BYTES: Final[int] = 10 * 1024 * 1024  # 10 MB
ALLOWED_IMAGE_EXTENSIONS: Final[frozenset] = frozenset({'jpg', 'jpeg', 'png', 'gif', 'webp'})
ALLOWED_DOCUMENT_EXTENSIONS: Final[frozenset] = frozenset({'pdf', 'doc', 'docx', 'xls', 'xlsx', 'txt'})

# ==================== SOCKET EVENTS ====================
AUCTION_EVENTS_NAMESPACE: Final[str] = '/auctions'
AUCTION_EVENT_NAME: Final[str] = 'auction_event'
