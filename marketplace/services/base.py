"""
Service-layer exceptions and the transactional base class.

Each exception carries the HTTP status the error handlers answer with, so
services raise and routes stay free of status bookkeeping.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy.exc import SQLAlchemyError

from marketplace import db
from marketplace.logger import get_logger

logger = get_logger(__name__)


class ServiceError(Exception):
    """A business-rule failure with the message and status shown to the client."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ValidationError(ServiceError):
    """Rejected input (400)."""

    def __init__(self, message: str):
        super().__init__(message, 400)


class AuthenticationError(ServiceError):
    """Exception raised when credentials are missing or wrong."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, 401)


class AuthorizationError(ServiceError):
    """Exception raised when the caller may not perform the operation."""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, 403)


class NotFoundError(ServiceError):
    """Unknown auction, listing or profile id (404)."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, 404)


class BaseService:
    """Base class for all services.

    Multi-statement operations (cascading deletes, recomputations) run inside
    a single transaction() block so a failure part-way leaves nothing
    committed.

    Example:
        class AuctionService(BaseService):
            def delete_auction(self, auction_id: str):
                with self.transaction():
                    # delete bids, then the auction
                    pass
    """

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        """Context manager for database transactions.

        Commits on success and rolls back on any exception. ServiceError
        subclasses are re-raised as-is; database errors become a 500
        ServiceError carrying the driver message.

        Raises:
            ServiceError: On database errors or unexpected exceptions.
        """
        try:
            yield
            db.session.commit()
        except ServiceError:
            db.session.rollback()
            raise
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Database error: {e}", exc_info=True)
            message = str(getattr(e, 'orig', None) or e)
            raise ServiceError(f"Database operation failed: {message}", 500)
        except Exception as e:
            db.session.rollback()
            logger.error(f"Unexpected error: {e}", exc_info=True)
            raise ServiceError("An unexpected error occurred", 500)

    def flush(self) -> None:
        """Send pending writes so later queries in the same transaction see them."""
        db.session.flush()
