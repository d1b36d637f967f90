"""
Authentication API endpoints.

Session login/logout and the CSRF token for browser clients.
"""

from flask_wtf.csrf import generate_csrf

from marketplace.auth import login_user, logout_user
from marketplace.extensions import limiter
from marketplace.routes import api_bp
from marketplace.services.profile_service import profile_service
from marketplace.utils import (
    current_user_id,
    error_response,
    get_json_body,
    login_required,
    success_response,
)


@api_bp.route('/auth/login', methods=['POST'])
@limiter.limit("10 per minute")
def login():
    """Log in with email and password."""
    data, error = get_json_body()
    if error:
        return error

    email = data.get('email')
    password = data.get('password')
    if not email or not password:
        return error_response('Email and password are required')

    profile = profile_service.authenticate(email, password)
    login_user(profile)
    return success_response(profile.to_dict(), message='Logged in successfully')


@api_bp.route('/auth/logout', methods=['POST'])
def logout():
    logout_user()
    return success_response(message='Logged out successfully')


@api_bp.route('/auth/me', methods=['GET'])
@login_required
def me():
    """Profile of the logged-in user."""
    return success_response(profile_service.get_profile(current_user_id()))


@api_bp.route('/csrf-token', methods=['GET'])
def csrf_token():
    return success_response({'csrfToken': generate_csrf()})
