"""
Flask extensions initialization.

Extensions are initialized here and imported by the app factory.
"""

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_socketio import SocketIO
from flask_wtf.csrf import CSRFProtect

# Rate limiter - storage comes from RATELIMIT_STORAGE_URI so counters can
# live in a shared store (e.g. redis://) instead of process memory
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per minute"],
)

# CSRF protection - protects all POST/PUT/DELETE requests
csrf = CSRFProtect()

# Lifecycle notifications for dashboards
socketio = SocketIO()
