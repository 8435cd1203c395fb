"""Health and metrics web server."""

from .server import create_app, start_web_server

__all__ = ["create_app", "start_web_server"]
