"""AWS client factory using boto3."""

from functools import wraps
from typing import Any, Callable, TypeVar

import boto3
from boto3.exceptions import Boto3Error
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from aeonian.config import AWSConfig
from aeonian.core.exceptions import AeonianError, CDNError, ConfigurationError, StorageError
from aeonian.core.logging import StructuredLogger

logger = StructuredLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class AWSClientFactory:
    """Factory for creating boto3 clients with consistent configuration."""

    def __init__(self, config: AWSConfig):
        self._config = config
        self._session: boto3.Session | None = None

    @property
    def session(self) -> boto3.Session:
        """Get or create boto3 session."""
        if self._session is None:
            profile = self._config.get_profile()
            region = self._config.get_region()

            session_kwargs: dict[str, Any] = {"region_name": region}
            if profile:
                session_kwargs["profile_name"] = profile

            # Use explicit credentials if provided
            if self._config.access_key_id and self._config.secret_access_key:
                session_kwargs["aws_access_key_id"] = self._config.access_key_id
                session_kwargs["aws_secret_access_key"] = self._config.secret_access_key
                if self._config.session_token:
                    session_kwargs["aws_session_token"] = self._config.session_token

            try:
                self._session = boto3.Session(**session_kwargs)
                logger.debug("Created AWS session", profile=profile, region=region)
            except BotoCoreError as e:
                raise ConfigurationError(f"Failed to create AWS session: {e}")

        return self._session

    @property
    def region(self) -> str:
        """Get the configured region."""
        return self.session.region_name or self._config.get_region()

    def client(self, service_name: str, **kwargs: Any) -> Any:
        """Create a boto3 client for a service.

        Retries are disabled: a failed call fails the deployment phase
        that issued it.

        Args:
            service_name: AWS service name (e.g., 's3', 'cloudfront')
            **kwargs: Additional client configuration

        Returns:
            boto3 client instance
        """
        config = BotoConfig(
            retries={"max_attempts": 1, "mode": "standard"},
            connect_timeout=10,
            read_timeout=60,
        )

        client_kwargs: dict[str, Any] = {"config": config, **kwargs}

        if self._config.endpoint_url:
            client_kwargs["endpoint_url"] = self._config.endpoint_url

        try:
            return self.session.client(service_name, **client_kwargs)
        except BotoCoreError as e:
            raise AeonianError(
                f"Failed to create {service_name} client: {e}",
                details={"service": service_name},
            )

    @property
    def s3(self) -> Any:
        """Get S3 client."""
        return self.client("s3")

    @property
    def cloudfront(self) -> Any:
        """Get CloudFront client."""
        return self.client("cloudfront")


def error_code(error: BaseException) -> str:
    """Extract the AWS error code from a botocore exception."""
    response = getattr(error, "response", None) or {}
    return response.get("Error", {}).get("Code", "Unknown")


def error_message(error: BaseException) -> str:
    """Extract a readable message from a botocore exception."""
    response = getattr(error, "response", None) or {}
    message = response.get("Error", {}).get("Message")
    if message:
        return f"{error_code(error)}: {message}"
    return str(error)


def paginate(client: Any, method: str, key: str, **kwargs: Any) -> list[Any]:
    """Helper to paginate through AWS API results.

    Args:
        client: boto3 client
        method: Method name to call
        key: Key in response containing items
        **kwargs: Arguments to pass to the method

    Returns:
        List of all items across all pages
    """
    paginator = client.get_paginator(method)
    items = []

    for page in paginator.paginate(**kwargs):
        items.extend(page.get(key, []))

    return items


def translate_errors(
    error_cls: type[StorageError] | type[CDNError],
    operation: str,
) -> Callable[[F], F]:
    """Decorator to turn AWS SDK failures into aeonian errors.

    Args:
        error_cls: StorageError or CDNError
        operation: Name of the gateway operation, reported to the user
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except ClientError as e:
                raise error_cls(
                    f"{operation} failed: {error_message(e)}",
                    operation=operation,
                    cause=e,
                    details={"code": error_code(e)},
                ) from e
            except (BotoCoreError, Boto3Error) as e:
                raise error_cls(
                    f"{operation} failed: {e}",
                    operation=operation,
                    cause=e,
                ) from e

        return wrapper  # type: ignore

    return decorator
