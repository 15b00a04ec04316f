"""
Error taxonomy for the mirror.

Two families reach the HTTP layer:
    - QueryError: the caller's SQL is at fault (400)
    - InternalError: the service's own dependencies failed (500)

Upstream errors never reach the HTTP layer directly, the refresh step wraps
them in RefreshError.
"""


class CatalogError(Exception):
    """Base class for everything raised by versiondb."""


# =========================
# Internal class
# =========================
class InternalError(CatalogError):
    pass


class StoreError(InternalError):
    """The embedded database could not be opened or written."""


class RefreshError(InternalError):
    """A fetch or replace step failed. The mirror was left as it was."""


# =========================
# Upstream
# =========================
class UpstreamError(CatalogError):
    pass


class UpstreamUnavailable(UpstreamError):
    """Timeout, refused connection or a non-2xx answer."""


class UpstreamDecodeError(UpstreamError):
    """The body did not parse into the expected records."""


# =========================
# Caller class
# =========================
class QueryError(CatalogError):
    pass


class QuerySyntaxError(QueryError):
    """The statement failed to prepare."""


class QueryExecutionError(QueryError):
    """The statement prepared but failed while producing rows."""
