"""
Exception taxonomy shared by the repository, the product feed and the API.
"""


class ServiceError(Exception):
    """Base exception for failures surfaced to API callers."""
    status_code = 500


class ValidationError(ServiceError):
    """Raised when a required query parameter is missing or malformed."""
    status_code = 400


class RepositoryError(ServiceError):
    """Raised when the transaction store is unreachable or a query fails."""
    pass


class UpstreamFetchError(ServiceError):
    """Raised when the remote product feed is unreachable or returns bad data."""
    pass
