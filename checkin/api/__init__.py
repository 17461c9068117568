"""
HTTP and WebSocket transport for the check-in service.
"""

from .app import CheckinServices, create_app

__all__ = ["CheckinServices", "create_app"]
