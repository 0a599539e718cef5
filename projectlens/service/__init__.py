"""WebSocket service mode for projectlens."""

from .app import create_app, run_service
from .dispatcher import MessageDispatcher

__all__ = ["MessageDispatcher", "create_app", "run_service"]
