"""Provider-level exceptions.

These exceptions form the boundary between the cloud SDK and the rest of
ssmhop: provider modules translate SDK errors into them so the resolver and
CLI never depend on botocore types.
"""

from __future__ import annotations


class ProviderError(Exception):
    """Base class for all provider errors."""


class ProviderCredentialsError(ProviderError):
    """Raised when cloud credentials are missing or the profile is unknown."""


class ProviderAPIError(ProviderError):
    """Raised when a control-plane request fails.

    Parameters
    ----------
    message : str
        Human readable error description
    error_code : str | None
        Provider error code (e.g. ``AccessDeniedException``), if known
    """

    def __init__(self, message: str, error_code: str | None = None) -> None:
        super().__init__(message)
        self.error_code = error_code


class LookupFailed(ProviderAPIError):
    """Raised when an inventory query (regions, instances) fails."""


class SessionOpenFailed(ProviderAPIError):
    """Raised when a session could not be started or the request timed out."""


class SessionCloseFailed(ProviderAPIError):
    """Raised when a session could not be terminated."""
