"""Top-level package for the threatwire news service.

This package contains the application entrypoint and all supporting modules
for fetching, ranking, storing, and serving security and tech news.
"""

__all__ = []
