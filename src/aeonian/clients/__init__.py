"""API clients for external services."""

from aeonian.clients.aws import AWSClientFactory

__all__ = ["AWSClientFactory"]
