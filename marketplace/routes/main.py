"""
Main routes for the auction marketplace.

Handles:
- Health check
- Serving stored uploads
"""

from flask import jsonify, send_file
from sqlalchemy import text

from marketplace import db
from marketplace.routes import main_bp
from marketplace.services.storage_service import storage_service
from marketplace.utils import utc_now


@main_bp.route('/health')
def health_check():
    """Health check endpoint for load balancers and orchestration.

    Returns:
        JSON with health status and database connectivity
    """
    try:
        # Test database connectivity
        db.session.execute(text('SELECT 1'))
        return jsonify({
            'status': 'healthy',
            'database': 'connected',
            'timestamp': utc_now().isoformat()
        })
    except Exception as e:
        return jsonify({
            'status': 'unhealthy',
            'database': 'disconnected',
            'error': str(e)
        }), 503


@main_bp.route('/uploads/<path:path>')
def serve_upload(path: str):
    """Serve a stored product image or document."""
    return send_file(storage_service.resolve(path))
