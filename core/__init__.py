# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic schemas:
# - models/: Pydantic schemas for the database catalog
#
# Code in this package should NOT import from FastAPI.
# This keeps the logic testable and reusable.
# =============================================================================
