"""ssmhop - connect to EC2 instances through AWS Systems Manager."""

__version__ = "0.1.0"
