"""
Centralized logging configuration for the auction marketplace.

Every module obtains its logger through get_logger(__name__). Records carry
the per-request id and the acting user's email; production switches to one
JSON object per line.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

USE_JSON_LOGGING = os.environ.get('FLASK_CONFIG') == 'production'
LOG_LEVEL = getattr(logging, os.environ.get('LOG_LEVEL', 'INFO').upper(), logging.INFO)

CONSOLE_FORMAT = '[%(asctime)s] %(levelname)s [%(request_id)s] [%(actor)s] %(name)s: %(message)s'

AUDIT_LOGGER_NAME = 'marketplace.audit'


def _request_context() -> Dict[str, str]:
    """Request id, actor and route of the current request, if any."""
    try:
        from flask import g, has_request_context, request, session
    except ImportError:
        return {}
    if not has_request_context():
        return {}
    return {
        'request_id': getattr(g, 'request_id', '-'),
        'actor': session.get('email') or 'anonymous',
        'path': request.path,
        'method': request.method,
    }


class RequestContextFilter(logging.Filter):
    """Stamp request_id and actor on every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = _request_context()
        record.request_id = context.get('request_id', '-')
        record.actor = context.get('actor', 'system')
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log aggregation in production."""

    def format(self, record: logging.LogRecord) -> str:
        context = _request_context()
        log_data: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'line': record.lineno,
            'message': record.getMessage(),
            'request_id': getattr(record, 'request_id', '-'),
            'actor': getattr(record, 'actor', 'system'),
        }
        if 'path' in context:
            log_data['route'] = f"{context['method']} {context['path']}"

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        # Structured payload attached by log_audit()
        if hasattr(record, 'audit'):
            log_data['audit'] = record.audit

        return json.dumps(log_data, default=str)


def setup_logger(
    name: str,
    level: Optional[int] = None,
    use_json: Optional[bool] = None
) -> logging.Logger:
    """
    Configure a named logger once and return it.

    Args:
        name: Logger name (typically __name__ of the calling module)
        level: Logging level (default: LOG_LEVEL from the environment)
        use_json: Force JSON formatting (default: on in production)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = level if level is not None else LOG_LEVEL
    logger.setLevel(level)
    logger.propagate = False

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(RequestContextFilter())

    json_output = use_json if use_json is not None else USE_JSON_LOGGING
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))

    logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get or create a logger for the given name.

    Example:
        from marketplace.logger import get_logger
        logger = get_logger(__name__)
        logger.info("Auction approved")
    """
    return setup_logger(name)


def log_audit(
    action: str,
    entity_type: str,
    entity_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None
) -> None:
    """Record a lifecycle change on the audit trail.

    Args:
        action: What happened (e.g. 'auction_approved', 'user_deleted')
        entity_type: 'auction', 'profile' or 'file'
        entity_id: ID of the affected entity
        details: Extra fields kept as structured data in JSON output

    Example:
        log_audit('auction_deleted', 'auction', auction.id, {'bids_removed': 3})
    """
    message = f"AUDIT: {action} on {entity_type}"
    if entity_id:
        message += f" (id={entity_id})"
    if details:
        message += f" - {json.dumps(details, default=str)}"

    payload = {'action': action, 'entity_type': entity_type, 'entity_id': entity_id}
    payload.update(details or {})
    get_logger(AUDIT_LOGGER_NAME).info(message, extra={'audit': payload})
