"""Core utilities and shared components for aeonian."""

# Note: Import context lazily to avoid circular imports
# Use: from aeonian.core.context import AeonianContext, pass_context
from aeonian.core.exceptions import (
    AeonianError,
    CDNError,
    ConcurrencyConflictError,
    ConfigurationError,
    DeploymentError,
    StorageError,
)
from aeonian.core.output import OutputFormatter, console

__all__ = [
    "AeonianError",
    "CDNError",
    "ConcurrencyConflictError",
    "ConfigurationError",
    "DeploymentError",
    "StorageError",
    "OutputFormatter",
    "console",
]
