# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - llm.py: Text-completion capability (OpenAI-compatible)
# - store.py: SQLAlchemy store adapter, catalog cache, session configs
# - sandbox.py: Restricted runner for transformation scripts
# - cache.py: Thread-safe TTL cache
# - errors.py: Error taxonomy with stable codes
# - utils.py: Shared utilities (base error, JSON extraction)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.utils import ApplicationError, extract_json

__all__ = [
    "ApplicationError",
    "extract_json",
]
