"""
Utility functions for the auction marketplace.

Contains time helpers, response builders, session-based authentication
decorators and input validation helpers used across the application.
"""

from datetime import datetime, timezone
from functools import wraps
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar

from flask import jsonify, request, session

F = TypeVar('F', bound=Callable[..., Any])


# ==================== TIME UTILITIES ====================

def utc_now() -> datetime:
    """Current time as naive UTC, the form every timestamp column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp into naive UTC.

    Accepts a trailing 'Z'. Naive input is taken to be UTC already.

    Args:
        value: ISO string or datetime

    Returns:
        Naive UTC datetime, or None if the value is empty or unparseable
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).strip().replace('Z', '+00:00'))
        except ValueError:
            return None
    if dt.tzinfo:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


# ==================== RESPONSE HELPERS ====================

def success_response(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = 200,
    **kwargs: Any
) -> Tuple[Any, int]:
    """Build the {success: True, data?, message?} envelope.

    Extra keyword arguments land at the top level next to "data"
    (add-user returns its userId this way).
    """
    response: Dict[str, Any] = {'success': True}
    if data is not None:
        response['data'] = data
    if message:
        response['message'] = message
    response.update(kwargs)
    return jsonify(response), status_code


def error_response(
    error: str,
    status_code: int = 400,
    **kwargs: Any
) -> Tuple[Any, int]:
    """Build the {success: False, error} envelope every failure path returns."""
    response = {'success': False, 'error': error}
    response.update(kwargs)
    return jsonify(response), status_code


# ==================== AUTHENTICATION HELPERS ====================

def current_user_id() -> Optional[str]:
    """Profile id of the logged-in user, if any."""
    return session.get('user_id')


def current_user_email() -> Optional[str]:
    return session.get('email')


def current_role() -> Optional[str]:
    return session.get('role')


def is_admin() -> bool:
    """True when the session belongs to an admin profile."""
    return session.get('is_admin', False)


def login_required(f: F) -> F:
    """Decorator returning 401 unless a user is logged in."""
    @wraps(f)
    def decorated_function(*args: Any, **kwargs: Any) -> Any:
        if not current_user_id():
            return error_response('Login required', 401)
        return f(*args, **kwargs)
    return decorated_function  # type: ignore


def admin_required(f: F) -> F:
    """
    Decorator for admin-only routes.

    Returns 401 when nobody is logged in and 403 for non-admins.
    """
    @wraps(f)
    def decorated_function(*args: Any, **kwargs: Any) -> Any:
        if not current_user_id():
            return error_response('Login required', 401)
        if not is_admin():
            return error_response('Admin login required', 403)
        return f(*args, **kwargs)
    return decorated_function  # type: ignore


def roles_required(*roles: str) -> Callable[[F], F]:
    """
    Decorator restricting a route to the given roles. Admins always pass.

    Args:
        *roles: Role values allowed through (e.g. 'seller', 'both')
    """
    def decorator(f: F) -> F:
        @wraps(f)
        def decorated_function(*args: Any, **kwargs: Any) -> Any:
            if not current_user_id():
                return error_response('Login required', 401)
            if not is_admin() and current_role() not in roles:
                return error_response('Insufficient permissions', 403)
            return f(*args, **kwargs)
        return decorated_function  # type: ignore
    return decorator


# ==================== INPUT VALIDATION ====================

def get_json_body() -> Tuple[Optional[Dict[str, Any]], Optional[Tuple[Any, int]]]:
    """Get and validate JSON request body.

    Returns:
        Tuple of (data dict, None) on success, or (None, error_response) on failure.

    Example:
        data, error = get_json_body()
        if error:
            return error
    """
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return None, error_response('Request body is required')
    return data, None


def validate_positive_int(
    value: Any,
    field_name: str,
    allow_zero: bool = False
) -> Tuple[Optional[int], Optional[str]]:
    """
    Validate and convert value to positive integer.

    Args:
        value: Value to validate
        field_name: Name of field for error message
        allow_zero: Whether to allow zero value

    Returns:
        Tuple of (converted value or None, error message or None)
    """
    try:
        int_value = int(value)
    except (TypeError, ValueError):
        return None, f"{field_name} must be a valid integer"
    if allow_zero:
        if int_value < 0:
            return None, f"{field_name} must be non-negative"
    elif int_value <= 0:
        return None, f"{field_name} must be positive"
    return int_value, None


def to_number(value: Any) -> Optional[float]:
    """
    Convert a JSON value to float, rejecting booleans and blanks.

    Returns:
        The number, or None if the value is not numeric
    """
    if value is None or value == '' or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number:  # NaN
        return None
    return number


def parse_bool(value: Any) -> Optional[bool]:
    """
    Parse a query-string style boolean.

    Returns:
        True/False, or None when the value is absent or not a boolean word
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in ('true', '1', 'yes'):
        return True
    if lowered in ('false', '0', 'no'):
        return False
    return None
