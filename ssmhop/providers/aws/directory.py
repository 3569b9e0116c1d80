"""EC2 inventory queries used to resolve session targets."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import boto3

from ssmhop.providers.aws.constants import DEFAULT_REGION, RUNNING_INSTANCE_FILTER
from ssmhop.providers.aws.errors import handle_aws_errors
from ssmhop.providers.aws.utils import get_name_tag, iter_instances
from ssmhop.providers.exceptions import LookupFailed

logger = logging.getLogger(__name__)


class InstanceDirectory:
    """Read-only view of the EC2 inventory.

    Every call re-queries the control plane; nothing is cached.

    Parameters
    ----------
    boto3_client_factory : Callable[..., Any] | None
        Optional factory for creating boto3 clients. If None, uses boto3.client
    """

    def __init__(self, boto3_client_factory: Callable[..., Any] | None = None) -> None:
        self.boto3_client_factory = boto3_client_factory or boto3.client

    def _ec2_client(self, region: str) -> Any:
        return self.boto3_client_factory("ec2", region_name=region)

    def list_regions(self) -> list[str]:
        """List regions enabled for the account.

        Returns
        -------
        list[str]
            Region names as reported by DescribeRegions

        Raises
        ------
        LookupFailed
            If the request fails
        ProviderCredentialsError
            If credentials are missing
        """
        with handle_aws_errors(LookupFailed, "DescribeRegions"):
            response = self._ec2_client(DEFAULT_REGION).describe_regions()
        return [r["RegionName"] for r in response.get("Regions", [])]

    def list_running_instances(self, region: str) -> list[dict[str, Any]]:
        """List running instances in a region.

        Parameters
        ----------
        region : str
            Region to query

        Returns
        -------
        list[dict[str, Any]]
            One dict per instance with instance_id, name, public_ip and
            private_ip keys (addresses are None when absent)

        Raises
        ------
        LookupFailed
            If the request fails
        ProviderCredentialsError
            If credentials are missing
        """
        instances = []

        with handle_aws_errors(LookupFailed, "DescribeInstances"):
            paginator = self._ec2_client(region).get_paginator("describe_instances")
            pages = paginator.paginate(Filters=RUNNING_INSTANCE_FILTER)

            for instance in iter_instances(pages):
                instances.append(
                    {
                        "instance_id": instance["InstanceId"],
                        "name": get_name_tag(instance),
                        "public_ip": instance.get("PublicIpAddress"),
                        "private_ip": instance.get("PrivateIpAddress"),
                    }
                )

        logger.debug("Found %d running instances in %s", len(instances), region)
        return instances

    def find_instance_id_by_ip(self, region: str, ip_address: str) -> str | None:
        """Find the running instance that owns an IP address.

        Parameters
        ----------
        region : str
            Region to search
        ip_address : str
            IPv4 address matched against public and private addresses

        Returns
        -------
        str | None
            Instance id of the first match, or None if nothing matches

        Raises
        ------
        LookupFailed
            If the request fails
        ProviderCredentialsError
            If credentials are missing
        """
        for instance in self.list_running_instances(region):
            if ip_address in (instance["public_ip"], instance["private_ip"]):
                logger.debug(
                    "Address %s belongs to %s", ip_address, instance["instance_id"]
                )
                return instance["instance_id"]

        return None
