"""
FastAPI routes and endpoints for the sign recognition API.
WebSocket for real-time frame processing and REST for status and reset.
"""
from signlive.api.routes import app, create_app

__all__ = ['app', 'create_app']
