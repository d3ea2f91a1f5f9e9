"""Flask application exposing the query, threat, and export endpoints."""

from .app import create_app

__all__ = ["create_app"]
