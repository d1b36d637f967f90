"""
Auction API endpoints.

Handles auction creation by sellers, admin approval and rejection, and the
filtered listing query used by the dashboards.
"""

from flask import current_app, request

from marketplace.constants import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT
from marketplace.enums import AuctionType, UserRole
from marketplace.logger import get_logger
from marketplace.routes import api_bp
from marketplace.services.auction_service import auction_service
from marketplace.utils import (
    admin_required,
    current_user_email,
    error_response,
    get_json_body,
    is_admin,
    login_required,
    parse_bool,
    roles_required,
    success_response,
    validate_positive_int,
)

logger = get_logger(__name__)


@api_bp.route('/auctions', methods=['GET'])
@login_required
def list_auctions():
    """Filtered, paginated auctions, newest first."""
    page, page_error = validate_positive_int(request.args.get('page', DEFAULT_PAGE), 'page')
    if page_error:
        return error_response(page_error)

    limit, limit_error = validate_positive_int(
        request.args.get('limit', DEFAULT_PAGE_LIMIT), 'limit'
    )
    if limit_error:
        return error_response(limit_error)

    auction_type = request.args.get('auctionType')
    if auction_type and AuctionType.parse(auction_type) is None:
        return error_response('auctionType must be forward or reverse')

    approved = None
    if request.args.get('approved') is not None:
        approved = parse_bool(request.args.get('approved'))
        if approved is None:
            return error_response('approved must be true or false')

    result = auction_service.list_auctions(
        page=page,
        limit=limit,
        category=request.args.get('category') or None,
        status=request.args.get('status') or None,
        auction_type=auction_type.lower() if auction_type else None,
        approved=approved,
    )
    return success_response(result)


@api_bp.route('/auctions', methods=['POST'])
@roles_required(UserRole.SELLER.value, UserRole.BOTH.value)
def create_auction():
    """Create a pending auction from the wizard's form data.

    The creator is the logged-in user. Admins may create on behalf of
    another seller with ?user=<email>.
    """
    data, error = get_json_body()
    if error:
        return error

    creator = current_user_email()
    requested = request.args.get('user')
    if requested and requested.lower() != (creator or '').lower():
        if not is_admin():
            return error_response('You can only create auctions for yourself', 403)
        creator = auction_service.resolve_seller(requested)

    auction = auction_service.create_auction(
        data,
        creator,
        allow_range_gaps=current_app.config.get('BID_INCREMENT_ALLOW_RANGE_GAPS', True),
    )
    return success_response(
        {'auction': auction},
        message='Auction created successfully',
        status_code=201,
    )


@api_bp.route('/auctions/<auction_id>', methods=['GET'])
@login_required
def get_auction(auction_id: str):
    """One auction plus the minimum acceptable next bid."""
    return success_response(auction_service.get_auction(auction_id))


@api_bp.route('/auctions/<auction_id>', methods=['PUT'])
@admin_required
def approve_auction(auction_id: str):
    """Approve a pending auction and settle its start time."""
    auction = auction_service.approve_auction(auction_id)
    return success_response(auction, message='Auction approved successfully')


@api_bp.route('/auctions/<auction_id>', methods=['DELETE'])
@admin_required
def reject_auction(auction_id: str):
    """Reject an auction: delete it and every bid on it."""
    result = auction_service.delete_auction(auction_id)
    return success_response(result, message='Auction and associated bids deleted successfully')
