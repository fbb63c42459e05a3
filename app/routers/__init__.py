# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - sessions.py: Session database configuration, schema and insights
# - query.py: Natural language query endpoint
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import sessions
from . import query

__all__ = [
    "health",
    "sessions",
    "query",
]
