"""
User administration API endpoints.

Handles the admin user list, user creation and the user deletion cascade.
"""

from marketplace.extensions import limiter
from marketplace.routes import api_bp
from marketplace.services.profile_service import profile_service
from marketplace.utils import (
    admin_required,
    current_user_id,
    get_json_body,
    success_response,
)


@api_bp.route('/profiles', methods=['GET'])
@admin_required
def list_profiles():
    """Non-admin profiles with their auction and bid counts."""
    return success_response({'profiles': profile_service.list_profiles()})


@api_bp.route('/profiles/<user_id>', methods=['DELETE'])
@admin_required
def delete_profile(user_id: str):
    """Delete a user with their auctions, bids and standings."""
    result = profile_service.delete_user(user_id, actor_id=current_user_id())
    return success_response(result, message='User and associated data deleted successfully')


@api_bp.route('/add-user', methods=['POST'])
@limiter.limit("20 per minute")
@admin_required
def add_user():
    """Create a user account on behalf of an admin."""
    data, error = get_json_body()
    if error:
        return error

    profile = profile_service.add_user(data)
    return success_response(
        message='User created successfully',
        status_code=201,
        userId=profile.id,
    )
