"""Ratings bounded context — review aggregation and trending rankings.

Maintains per-entity and per-day rating statistics from review lifecycle
events, and periodically publishes ranked trending snapshots for the
daily, weekly and monthly windows.
"""

from protean.domain import Domain

from ratings.utils.logging import configure_logging

# Configure logging for the application
configure_logging()

# Domain Composition Root
ratings = Domain(name="ratings")
