"""Deployment pipeline: provision, sync, repoint, tear down, invalidate."""

import uuid
from typing import Any, Callable

from aeonian.config import SiteConfig, parse_config
from aeonian.core.clock import Clock, SystemClock
from aeonian.core.exceptions import AeonianError
from aeonian.core.logging import StructuredLogger
from aeonian.core.progress import NullProgressReporter, ProgressReporter
from aeonian.deploy.models import (
    DeploymentPhase,
    DeploymentRun,
    bucket_from_domain,
    bucket_name,
    site_domain,
)
from aeonian.gateways.cdn import CDNGateway, CloudFrontGateway, DistributionConfig
from aeonian.gateways.storage import S3StorageGateway, StorageGateway

logger = StructuredLogger(__name__)


class DeploymentOrchestrator:
    """Drives one environment's deployment through the pipeline phases.

    Holds no per-deployment state: every deploy call works on its own
    DeploymentRun. Calls are strictly sequential and the first failure
    ends the run; nothing already applied is undone.
    """

    def __init__(
        self,
        config: SiteConfig,
        storage: StorageGateway,
        cdn: CDNGateway,
        clock: Clock | None = None,
        reporter: ProgressReporter | None = None,
    ):
        """Initialize orchestrator.

        Args:
            config: Site configuration, treated as read-only
            storage: Object storage gateway
            cdn: CDN gateway
            clock: Time source for the settle delay and caller references
            reporter: Receives progress notifications
        """
        config.validate_for_deploy()
        self._config = config
        self._storage = storage
        self._cdn = cdn
        self._clock = clock or SystemClock()
        self._reporter = reporter or NullProgressReporter()

    @classmethod
    def configure(
        cls,
        config: SiteConfig | dict[str, Any],
        storage: StorageGateway | None = None,
        cdn: CDNGateway | None = None,
        clock: Clock | None = None,
        reporter: ProgressReporter | None = None,
    ) -> "DeploymentOrchestrator":
        """Build an orchestrator, creating AWS gateways that were not injected.

        Args:
            config: SiteConfig, or a raw mapping merged over the defaults
            storage: Object storage gateway (default: S3)
            cdn: CDN gateway (default: CloudFront)
            clock: Time source
            reporter: Progress reporter

        Raises:
            ConfigurationError: If the config is invalid or has no bucket prefix
        """
        if not isinstance(config, SiteConfig):
            config = parse_config(config)
        config.validate_for_deploy()

        if storage is None or cdn is None:
            from aeonian.clients.aws import AWSClientFactory

            factory = AWSClientFactory(config.aws)
            if storage is None:
                storage = S3StorageGateway.from_factory(factory, acl=config.deploy.acl)
            if cdn is None:
                cdn = CloudFrontGateway.from_factory(factory)

        return cls(config, storage, cdn, clock=clock, reporter=reporter)

    @property
    def config(self) -> SiteConfig:
        return self._config

    def plan(self, environment: str) -> DeploymentRun:
        """Resolve an environment to its targets without any remote call.

        Raises:
            ConfigurationError: If environment is not configured
        """
        distribution_id = self._config.get_distribution_id(environment)
        bucket = bucket_name(self._config.bucket.prefix or "", environment)
        run = DeploymentRun(
            environment=environment,
            distribution_id=distribution_id,
            bucket=bucket,
            domain=site_domain(bucket, self._config.website_endpoint()),
            local_dir=self._config.bucket.local_dir,
        )
        run.add_event("resolved", f"{environment} -> {run.bucket} ({distribution_id})")
        return run

    def deploy(self, environment: str) -> DeploymentRun:
        """Deploy the local content directory to an environment.

        Args:
            environment: Key of config.environments

        Returns:
            The finished DeploymentRun, SUCCEEDED or FAILED. A failed run
            carries the StorageError or CDNError that stopped it.

        Raises:
            ConfigurationError: If environment is not configured (no remote
                call is made)
        """
        run = self.plan(environment)
        log = logger.bind(run=run.id, environment=environment)
        run.start()
        log.info("Deployment started", bucket=run.bucket, distribution=run.distribution_id)

        try:
            self._provision(run)
            self._sync(run)
            self._configure_website(run)
            self._repoint_origin(run)
            self._destroy_previous(run)
            self._await_settle(run)
            self._invalidate(run)
            run.transition(DeploymentPhase.COMPLETE)
            self._report(self._reporter.succeed, "All operations complete")
            log.info("Deployment succeeded", duration=run.duration_seconds)
        except AeonianError as e:
            run.fail(e)
            self._report(self._reporter.fail, str(e))
            log.error("Deployment failed", phase=run.failed_phase.value if run.failed_phase else None, error=str(e))

        return run

    def _provision(self, run: DeploymentRun) -> None:
        run.transition(DeploymentPhase.PROVISION)
        self._report(self._reporter.start, "Listing buckets")
        existing = self._storage.list_buckets()

        if run.bucket in existing:
            run.bucket_reused = True
            self._report(self._reporter.info, "Bucket already found, emptying")
            self._report(self._reporter.start, f"Emptying bucket: {run.bucket}")
            self._storage.empty_bucket(run.bucket)
        else:
            run.bucket_reused = False
            self._report(self._reporter.start, f"Creating bucket: {run.bucket}")
            self._storage.create_bucket(run.bucket)

        run.add_event("provisioned", "reused" if run.bucket_reused else "created")
        self._report(self._reporter.succeed)

    def _sync(self, run: DeploymentRun) -> None:
        run.transition(DeploymentPhase.SYNC)
        message = f"Uploading to bucket: {run.bucket}"
        self._report(self._reporter.start, message)

        def on_progress(percent: float) -> None:
            self._report(self._reporter.progress, percent, message)

        result = self._storage.sync_directory(
            run.local_dir,
            run.bucket,
            delete_removed=True,
            on_progress=on_progress,
        )
        run.sync_summary = result.to_dict()
        run.add_event("synced", message, run.sync_summary)
        self._report(self._reporter.succeed, message)

    def _configure_website(self, run: DeploymentRun) -> None:
        run.transition(DeploymentPhase.CONFIGURE_WEBSITE)
        website = self._config.website
        self._report(self._reporter.start, f"Configuring website hosting on bucket: {run.bucket}")
        self._storage.set_website_config(run.bucket, website.index, website.error)
        self._report(self._reporter.succeed)

    def _repoint_origin(self, run: DeploymentRun) -> None:
        run.transition(DeploymentPhase.REPOINT_ORIGIN)
        self._report(
            self._reporter.start,
            f"Getting {run.environment} CloudFront config with id: {run.distribution_id}",
        )
        fetched = self._cdn.get_distribution_config(run.distribution_id)
        self._report(self._reporter.succeed)
        self._apply_origin_update(run, fetched)

    def _apply_origin_update(self, run: DeploymentRun, fetched: DistributionConfig) -> None:
        """Point the distribution at the new bucket, at most once per run."""
        if run.origin_updated:
            logger.warning(
                "Ignoring repeated distribution config for this run",
                run=run.id,
                distribution=run.distribution_id,
            )
            return
        run.origin_updated = True

        run.previous_domain = fetched.origin_domain
        run.previous_bucket = bucket_from_domain(
            fetched.origin_domain, self._config.website_endpoint()
        )

        self._report(
            self._reporter.start,
            f"Updating {run.environment} CloudFront origin with domain: {run.domain}",
        )
        self._cdn.update_distribution(
            run.distribution_id,
            fetched.with_origin_domain(run.domain),
            fetched.version,
        )
        run.add_event("repointed", f"{run.previous_domain} -> {run.domain}")
        self._report(self._reporter.succeed)

    def _destroy_previous(self, run: DeploymentRun) -> None:
        run.transition(DeploymentPhase.DESTROY_PREVIOUS)
        previous = run.previous_bucket

        if previous is None:
            logger.warning(
                "Previous origin is not a website bucket, nothing to destroy",
                run=run.id,
                origin=run.previous_domain,
            )
            self._report(self._reporter.info, f"Previous origin {run.previous_domain} is not a bucket, leaving it alone")
            return

        if previous == run.bucket:
            self._report(self._reporter.info, "Previous bucket was the same, leaving it alone")
            return

        self._report(self._reporter.start, f"Destroying previous bucket: {previous}")
        self._storage.destroy_bucket(previous)
        run.destroyed_bucket = previous
        run.add_event("destroyed", previous)
        self._report(self._reporter.succeed)

    def _await_settle(self, run: DeploymentRun) -> None:
        run.transition(DeploymentPhase.AWAIT_SETTLE)
        seconds = self._config.deploy.settle_seconds
        self._report(self._reporter.start, f"Waiting {seconds:g}s for {run.environment} distribution to settle")
        self._clock.sleep(seconds)
        self._report(self._reporter.succeed)

    def _invalidate(self, run: DeploymentRun) -> None:
        run.transition(DeploymentPhase.INVALIDATE)
        run.caller_reference = self._caller_reference()
        self._report(
            self._reporter.start,
            f"Creating invalidation for {run.environment} (Id: {run.distribution_id})",
        )
        run.invalidation_id = self._cdn.create_invalidation(
            run.distribution_id,
            list(self._config.deploy.invalidation_paths),
            run.caller_reference,
        )
        run.add_event("invalidated", run.invalidation_id or "")
        self._report(self._reporter.succeed)

    def _caller_reference(self) -> str:
        millis = int(self._clock.now() * 1000)
        return f"{millis}-{uuid.uuid4().hex[:8]}"

    def _report(self, notify: Callable[..., None], *args: Any) -> None:
        """Call a reporter method; its failures are only logged."""
        try:
            notify(*args)
        except Exception as e:
            event = getattr(notify, "__name__", repr(notify))
            logger.warning("Progress reporter failed", event=event, error=str(e))
