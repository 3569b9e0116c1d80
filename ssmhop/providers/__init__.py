"""Cloud provider integrations and their exception types."""

from __future__ import annotations

from ssmhop.providers.exceptions import (
    LookupFailed,
    ProviderAPIError,
    ProviderCredentialsError,
    ProviderError,
    SessionCloseFailed,
    SessionOpenFailed,
)

__all__ = [
    "ProviderError",
    "ProviderCredentialsError",
    "ProviderAPIError",
    "LookupFailed",
    "SessionOpenFailed",
    "SessionCloseFailed",
]
