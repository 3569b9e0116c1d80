"""AWS-specific utility functions for ssmhop."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import boto3
from botocore.exceptions import ProfileNotFound

from ssmhop.providers.aws.constants import NAME_TAG_KEY
from ssmhop.providers.aws.errors import handle_aws_errors


def make_client_factory(profile: str | None = None) -> Callable[..., Any]:
    """Build a boto3 client factory bound to a named profile.

    Parameters
    ----------
    profile : str | None
        AWS profile name, or None for the default credential chain

    Returns
    -------
    Callable[..., Any]
        Callable with the ``boto3.client`` signature

    Raises
    ------
    ProviderCredentialsError
        If the profile does not exist
    """
    with handle_aws_errors():
        session = boto3.Session(profile_name=profile or None)
    return session.client


def region_from_profile(profile: str | None = None) -> str:
    """Return the region configured for a profile, or an empty string.

    Parameters
    ----------
    profile : str | None
        AWS profile name

    Returns
    -------
    str
        Region from the shared config file or environment, "" if none
    """
    try:
        session = boto3.Session(profile_name=profile or None)
    except ProfileNotFound:
        return ""
    return session.region_name or ""


def get_name_tag(instance: dict[str, Any]) -> str:
    """Return the Name tag of an instance, or an empty string."""
    for tag in instance.get("Tags", []):
        if tag.get("Key") == NAME_TAG_KEY:
            return tag.get("Value", "")
    return ""


def iter_instances(pages: Any) -> Iterator[dict[str, Any]]:
    """Flatten DescribeInstances pages into instance dictionaries.

    Parameters
    ----------
    pages : Any
        Iterable of describe_instances responses (paginator output)

    Yields
    ------
    dict[str, Any]
        Raw instance description
    """
    for page in pages:
        for reservation in page.get("Reservations", []):
            yield from reservation.get("Instances", [])


def get_aws_credentials_error_message() -> str:
    """Get standard AWS credentials error message.

    Returns
    -------
    str
        Formatted AWS credentials error message
    """
    return (
        "AWS credentials not found\n\n"
        "Configure your credentials:\n"
        "  aws configure --profile <name>\n\n"
        "Or set environment variables:\n"
        "  export AWS_ACCESS_KEY_ID=...\n"
        "  export AWS_SECRET_ACCESS_KEY=...\n\n"
        "Then pass the profile with --profile or AWS_PROFILE."
    )
