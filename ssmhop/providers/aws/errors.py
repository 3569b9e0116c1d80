"""Translation of botocore errors into provider exceptions."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    NoCredentialsError,
    NoRegionError,
    PartialCredentialsError,
    ProfileNotFound,
)

from ssmhop.providers.exceptions import ProviderAPIError, ProviderCredentialsError

logger = logging.getLogger(__name__)

CREDENTIALS_ERRORS = (
    NoCredentialsError,
    PartialCredentialsError,
    ProfileNotFound,
)


@contextmanager
def handle_aws_errors(
    error_class: type[ProviderAPIError] = ProviderAPIError,
    operation: str | None = None,
) -> Iterator[None]:
    """Translate botocore exceptions raised inside the block.

    Parameters
    ----------
    error_class : type[ProviderAPIError]
        Exception type raised for API and transport failures
    operation : str | None
        Operation name prefixed to the error message

    Raises
    ------
    ProviderCredentialsError
        If credentials are missing or the profile does not exist
    ProviderAPIError
        An instance of ``error_class`` for any other botocore failure
    """
    prefix = f"{operation}: " if operation else ""

    try:
        yield
    except CREDENTIALS_ERRORS as e:
        raise ProviderCredentialsError(f"{prefix}{e}") from e
    except ClientError as e:
        error = e.response.get("Error", {})
        error_code = error.get("Code", "")
        message = error.get("Message") or str(e)
        logger.debug("AWS request failed (%s): %s", error_code, message)
        raise error_class(message=f"{prefix}{message}", error_code=error_code) from e
    except NoRegionError as e:
        raise error_class(message=f"{prefix}{e}", error_code="NoRegion") from e
    except BotoCoreError as e:
        logger.debug("AWS transport error: %s", e)
        raise error_class(
            message=f"{prefix}{e}", error_code=e.__class__.__name__
        ) from e
