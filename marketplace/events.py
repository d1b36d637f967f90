"""
Lifecycle notifications over Socket.IO.

Dashboards connect to the /auctions namespace and receive one
'auction_event' message per lifecycle change, shaped as
{type, data, timestamp}. Messages are published after the database
transaction commits; bid traffic is not carried here.
"""

from typing import Any, Dict

from flask_socketio import Namespace

from marketplace.constants import AUCTION_EVENT_NAME, AUCTION_EVENTS_NAMESPACE
from marketplace.enums import LifecycleEvent
from marketplace.extensions import socketio
from marketplace.logger import get_logger
from marketplace.utils import utc_now

logger = get_logger(__name__)


class AuctionEventsNamespace(Namespace):
    """Read-only namespace; clients only listen."""

    def on_connect(self):
        logger.debug("Dashboard connected to auction events")

    def on_disconnect(self, *args):
        logger.debug("Dashboard disconnected from auction events")


def register_namespace() -> None:
    """Attach the namespace to the current Socket.IO server."""
    socketio.on_namespace(AuctionEventsNamespace(AUCTION_EVENTS_NAMESPACE))


def publish(event: LifecycleEvent, data: Dict[str, Any]) -> None:
    """Broadcast a lifecycle event to every connected dashboard.

    Delivery is best effort: the change is already committed, so a
    broadcast failure is logged and does not fail the request.
    """
    message = {
        'type': event.value,
        'data': data,
        'timestamp': utc_now().isoformat() + 'Z',
    }
    try:
        socketio.emit(AUCTION_EVENT_NAME, message, namespace=AUCTION_EVENTS_NAMESPACE)
    except Exception as e:
        logger.warning(f"Failed to publish {event.value}: {e}", exc_info=True)
