"""Deployment orchestration module."""

from aeonian.deploy.models import (
    DeploymentPhase,
    DeploymentRun,
    DeploymentStatus,
    bucket_from_domain,
    bucket_name,
    site_domain,
)
from aeonian.deploy.orchestrator import DeploymentOrchestrator

__all__ = [
    "DeploymentOrchestrator",
    "DeploymentPhase",
    "DeploymentRun",
    "DeploymentStatus",
    "bucket_from_domain",
    "bucket_name",
    "site_domain",
]
