"""Ratings domain API package."""

from ratings.api.routes import owner_router, stats_router, trending_router

__all__ = ["stats_router", "trending_router", "owner_router"]
