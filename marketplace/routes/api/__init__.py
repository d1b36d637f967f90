"""
API routes package for the auction marketplace.

Contains all API endpoints organized by functionality.
"""

# Import submodules to register routes
from marketplace.routes.api import auctions, auth, listings, profiles, uploads

__all__ = ['auctions', 'auth', 'listings', 'profiles', 'uploads']
