"""
Seller listing API endpoints.
"""

from flask import request

from marketplace.routes import api_bp
from marketplace.services.listing_service import listing_service
from marketplace.utils import (
    current_user_email,
    error_response,
    get_json_body,
    is_admin,
    login_required,
    success_response,
)


@api_bp.route('/listings', methods=['GET'])
@login_required
def get_listings():
    """Listings created by the caller, or by ?email= for admins."""
    email = current_user_email()
    requested = request.args.get('email')
    if requested and requested.lower() != (email or '').lower():
        if not is_admin():
            return error_response('You can only view your own listings', 403)
        email = requested
    return success_response(listing_service.get_listings(email))


@api_bp.route('/listings/<auction_id>', methods=['GET'])
@login_required
def get_listing(auction_id: str):
    return success_response(listing_service.get_listing(auction_id))


@api_bp.route('/listings/<auction_id>', methods=['PUT'])
@login_required
def update_listing(auction_id: str):
    """Edit the whitelisted fields of an editable listing."""
    data, error = get_json_body()
    if error:
        return error

    listing = listing_service.update_listing(
        auction_id, data, current_user_email(), actor_is_admin=is_admin()
    )
    return success_response(listing, message='Auction updated successfully')


@api_bp.route('/listings/<auction_id>', methods=['DELETE'])
@login_required
def delete_listing(auction_id: str):
    result = listing_service.delete_listing(
        auction_id, current_user_email(), actor_is_admin=is_admin()
    )
    return success_response(result, message='Auction and associated bids deleted successfully')
