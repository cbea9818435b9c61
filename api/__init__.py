"""API Package.

FastAPI server for connection management and sync observability.
"""

from api.server import create_app, app

__all__ = [
    "create_app",
    "app",
]
