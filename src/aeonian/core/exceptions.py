"""Custom exceptions for aeonian."""

from typing import Any


class AeonianError(Exception):
    """Base exception for all aeonian errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ConfigurationError(AeonianError):
    """Configuration-related errors. Never involves a remote call."""

    pass


class StorageError(AeonianError):
    """Object storage (S3) operation errors."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        cause: BaseException | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.operation = operation
        self.cause = cause


class CDNError(AeonianError):
    """CDN control plane (CloudFront) operation errors."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        cause: BaseException | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.operation = operation
        self.cause = cause


class ConcurrencyConflictError(CDNError):
    """The distribution changed since its config was fetched (stale ETag)."""

    pass


class DeploymentError(AeonianError):
    """Deployment pipeline errors."""

    def __init__(
        self,
        message: str,
        phase: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.phase = phase
