"""AWS-specific constants for EC2 inventory and SSM sessions."""

from ssmhop.constants import InstanceState

DEFAULT_REGION = "us-east-1"
"""Region used for account-wide queries such as DescribeRegions."""

DEFAULT_REGIONS = [
    "af-south-1",
    "ap-east-1",
    "ap-northeast-1",
    "ap-northeast-2",
    "ap-northeast-3",
    "ap-south-1",
    "ap-southeast-1",
    "ap-southeast-2",
    "ca-central-1",
    "eu-central-1",
    "eu-north-1",
    "eu-south-1",
    "eu-west-1",
    "eu-west-2",
    "eu-west-3",
    "me-south-1",
    "sa-east-1",
    "us-east-1",
    "us-east-2",
    "us-west-1",
    "us-west-2",
]
"""Regions offered when DescribeRegions is unavailable.

Used as the interactive region list when the caller lacks permission to
enumerate regions or the request fails.
"""

RUNNING_INSTANCE_FILTER = [
    {"Name": "instance-state-name", "Values": [InstanceState.RUNNING.value]}
]
"""DescribeInstances filter selecting running instances only."""

NAME_TAG_KEY = "Name"
"""Tag holding the human readable instance name."""

SSH_SESSION_DOCUMENT = "AWS-StartSSHSession"
"""SSM document tunnelling an SSH connection through a session."""

SSH_SESSION_PORT = "22"
"""Remote port for SSH sessions."""

PORT_FORWARD_DOCUMENT = "AWS-StartPortForwardingSession"
"""SSM document forwarding a single remote port to localhost."""

PLUGIN_OPERATION = "StartSession"
"""Operation name passed to session-manager-plugin."""
