"""Application-wide constants.

Limits that are part of the API contract live here; environment-specific
configuration is in config.py.
"""

# =============================================================================
# Pagination
# =============================================================================

DEFAULT_PAGE_SIZE: int = 20

MAX_PAGE_SIZE: int = 100

# =============================================================================
# Orphaned file reconciliation
# =============================================================================

# Upper bound for an on-demand sweep triggered from the admin API
ORPHAN_RECONCILE_MAX_LIMIT: int = 500

# =============================================================================
# Logging
# =============================================================================

REQUEST_ID_HEADER: str = "X-Request-ID"
