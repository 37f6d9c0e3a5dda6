"""Deployment data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
import uuid

from aeonian.core.exceptions import AeonianError, DeploymentError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def bucket_name(prefix: str, environment: str) -> str:
    """Bucket serving an environment: the prefix followed by the name."""
    return prefix + environment


def site_domain(bucket: str, website_endpoint: str) -> str:
    """Website hosting domain of a bucket."""
    return f"{bucket}.{website_endpoint}"


def bucket_from_domain(domain: str, website_endpoint: str) -> str | None:
    """Recover the bucket behind a website hosting domain.

    Returns None when domain is not a website endpoint of this provider
    and region, e.g. a placeholder origin on a new distribution.
    """
    suffix = f".{website_endpoint}"
    if not domain.endswith(suffix) or len(domain) == len(suffix):
        return None
    return domain[: -len(suffix)]


class DeploymentStatus(str, Enum):
    """Deployment status."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class DeploymentPhase(str, Enum):
    """Deployment phases, in pipeline order."""

    RESOLVE = "resolve"
    PROVISION = "provision"
    SYNC = "sync"
    CONFIGURE_WEBSITE = "configure_website"
    REPOINT_ORIGIN = "repoint_origin"
    DESTROY_PREVIOUS = "destroy_previous"
    AWAIT_SETTLE = "await_settle"
    INVALIDATE = "invalidate"
    COMPLETE = "complete"
    FAILED = "failed"


PIPELINE: tuple[DeploymentPhase, ...] = (
    DeploymentPhase.RESOLVE,
    DeploymentPhase.PROVISION,
    DeploymentPhase.SYNC,
    DeploymentPhase.CONFIGURE_WEBSITE,
    DeploymentPhase.REPOINT_ORIGIN,
    DeploymentPhase.DESTROY_PREVIOUS,
    DeploymentPhase.AWAIT_SETTLE,
    DeploymentPhase.INVALIDATE,
    DeploymentPhase.COMPLETE,
)

TERMINAL_PHASES = frozenset({DeploymentPhase.COMPLETE, DeploymentPhase.FAILED})


def next_phase(phase: DeploymentPhase) -> DeploymentPhase:
    """Phase that follows phase on success.

    Raises:
        DeploymentError: If phase is terminal
    """
    if phase in TERMINAL_PHASES:
        raise DeploymentError(f"No phase follows {phase.value}", phase=phase.value)
    return PIPELINE[PIPELINE.index(phase) + 1]


def can_transition(current: DeploymentPhase, target: DeploymentPhase) -> bool:
    """Check whether the state machine allows current -> target."""
    if current in TERMINAL_PHASES:
        return False
    if target == DeploymentPhase.FAILED:
        return True
    return next_phase(current) == target


@dataclass
class DeploymentEvent:
    """Deployment event for audit trail."""

    timestamp: datetime
    event_type: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type,
            "message": self.message,
            "details": self.details,
        }


@dataclass
class DeploymentRun:
    """Everything one deployment knows, from resolve to its terminal phase.

    Created per deploy call and owned by the orchestrator for the
    duration of that call.
    """

    # Identity
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    environment: str = ""
    distribution_id: str = ""

    # Target
    bucket: str = ""
    domain: str = ""
    local_dir: str = ""

    # Discovered while running
    bucket_reused: bool | None = None
    previous_domain: str | None = None
    previous_bucket: str | None = None
    origin_updated: bool = False
    destroyed_bucket: str | None = None
    caller_reference: str | None = None
    invalidation_id: str | None = None
    sync_summary: dict[str, Any] = field(default_factory=dict)

    # Status
    status: DeploymentStatus = DeploymentStatus.PENDING
    phase: DeploymentPhase = DeploymentPhase.RESOLVE
    failed_phase: DeploymentPhase | None = None
    message: str = ""
    error: AeonianError | None = None

    # Timing
    created_at: datetime = field(default_factory=_utcnow)
    started_at: datetime | None = None
    completed_at: datetime | None = None

    events: list[DeploymentEvent] = field(default_factory=list)

    def add_event(self, event_type: str, message: str, details: dict[str, Any] | None = None) -> None:
        """Add an event to the deployment history."""
        self.events.append(
            DeploymentEvent(
                timestamp=_utcnow(),
                event_type=event_type,
                message=message,
                details=details or {},
            )
        )

    def start(self) -> None:
        """Mark the run as in progress."""
        self.started_at = _utcnow()
        self.status = DeploymentStatus.IN_PROGRESS
        self.add_event("started", f"Deploying {self.environment} to {self.bucket}")

    def transition(self, target: DeploymentPhase) -> None:
        """Move to target, enforcing pipeline order.

        Raises:
            DeploymentError: If target does not directly follow the current phase
        """
        if not can_transition(self.phase, target):
            raise DeploymentError(
                f"Illegal phase transition {self.phase.value} -> {target.value}",
                phase=self.phase.value,
            )
        self.phase = target
        self.add_event("phase", target.value)
        if target == DeploymentPhase.COMPLETE:
            self.status = DeploymentStatus.SUCCEEDED
            self.completed_at = _utcnow()
            self.add_event("completed", "All operations complete")

    def fail(self, error: AeonianError) -> None:
        """Record error and move to the terminal failed phase."""
        self.failed_phase = self.phase
        self.error = error
        self.message = str(error)
        self.phase = DeploymentPhase.FAILED
        self.status = DeploymentStatus.FAILED
        self.completed_at = _utcnow()
        self.add_event("failed", f"Deployment failed: {error}", {"phase": self.failed_phase.value})

    def raise_for_status(self) -> None:
        """Re-raise the error that failed this run, if any."""
        if self.error is not None:
            raise self.error

    @property
    def duration_seconds(self) -> float | None:
        """Get deployment duration in seconds."""
        if self.started_at:
            end = self.completed_at or _utcnow()
            return (end - self.started_at).total_seconds()
        return None

    @property
    def is_complete(self) -> bool:
        """Check if deployment reached a terminal phase."""
        return self.phase in TERMINAL_PHASES

    @property
    def succeeded(self) -> bool:
        return self.status == DeploymentStatus.SUCCEEDED

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "environment": self.environment,
            "distribution_id": self.distribution_id,
            "bucket": self.bucket,
            "domain": self.domain,
            "bucket_reused": self.bucket_reused,
            "previous_bucket": self.previous_bucket,
            "destroyed_bucket": self.destroyed_bucket,
            "invalidation_id": self.invalidation_id,
            "sync": self.sync_summary,
            "status": self.status.value,
            "phase": self.phase.value,
            "failed_phase": self.failed_phase.value if self.failed_phase else None,
            "message": self.message,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "events": [e.to_dict() for e in self.events[-20:]],
        }
