"""Click context object for sharing state across commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click
from rich.markup import escape

from aeonian.config import SiteConfig, get_default_config
from aeonian.core.logging import LogLevel, StructuredLogger, setup_logging
from aeonian.core.output import OutputFormat, OutputFormatter
from aeonian.core.progress import ProgressReporter

if TYPE_CHECKING:
    from aeonian.clients.aws import AWSClientFactory
    from aeonian.deploy.orchestrator import DeploymentOrchestrator
    from aeonian.gateways.cdn import CDNGateway
    from aeonian.gateways.storage import StorageGateway


class AeonianContext:
    """Shared context object for aeonian commands.

    This object is passed through Click's context mechanism and provides
    access to configuration, gateways, and output.
    """

    def __init__(
        self,
        config: SiteConfig | None = None,
        output_format: OutputFormat | None = None,
        verbose: int = 0,
        quiet: bool = False,
        dry_run: bool = False,
        color: bool = True,
    ):
        self._config = config or get_default_config()

        # Output settings (CLI overrides config)
        self._output_format = output_format or self._config.global_settings.output_format
        self._verbose = verbose
        self._quiet = quiet
        self._dry_run = dry_run
        self._color = color

        # Determine log level from verbosity
        if verbose >= 3:
            log_level = LogLevel.DEBUG
        elif verbose >= 1:
            log_level = LogLevel.INFO
        elif quiet:
            log_level = LogLevel.ERROR
        else:
            log_level = self._config.global_settings.verbosity

        setup_logging(log_level, rich_output=color)
        self._logger = StructuredLogger("context")

        self._output = OutputFormatter(
            format=self._output_format,
            color=color,
            quiet=quiet,
        )

        # Lazy-loaded clients
        self._aws_factory: AWSClientFactory | None = None
        self._storage: StorageGateway | None = None
        self._cdn: CDNGateway | None = None

    @property
    def config(self) -> SiteConfig:
        """Get the loaded configuration."""
        return self._config

    @property
    def output(self) -> OutputFormatter:
        """Get the output formatter."""
        return self._output

    @property
    def output_format(self) -> OutputFormat:
        """Get the output format."""
        return self._output_format

    @property
    def dry_run(self) -> bool:
        """Check if dry-run mode is enabled."""
        return self._dry_run

    @property
    def verbose(self) -> int:
        """Get verbosity level."""
        return self._verbose

    @property
    def quiet(self) -> bool:
        """Check if quiet mode is enabled."""
        return self._quiet

    @property
    def logger(self) -> StructuredLogger:
        """Get the context logger."""
        return self._logger

    @property
    def aws(self) -> "AWSClientFactory":
        """Get or create AWS client factory."""
        if self._aws_factory is None:
            from aeonian.clients.aws import AWSClientFactory

            self._aws_factory = AWSClientFactory(self._config.aws)
        return self._aws_factory

    @property
    def storage(self) -> "StorageGateway":
        """Get or create the S3 storage gateway."""
        if self._storage is None:
            from aeonian.gateways.storage import S3StorageGateway

            self._storage = S3StorageGateway.from_factory(self.aws, acl=self._config.deploy.acl)
        return self._storage

    @property
    def cdn(self) -> "CDNGateway":
        """Get or create the CloudFront gateway."""
        if self._cdn is None:
            from aeonian.gateways.cdn import CloudFrontGateway

            self._cdn = CloudFrontGateway.from_factory(self.aws)
        return self._cdn

    def orchestrator(self, reporter: ProgressReporter | None = None) -> "DeploymentOrchestrator":
        """Build a deployment orchestrator over this context's gateways."""
        from aeonian.deploy.orchestrator import DeploymentOrchestrator

        return DeploymentOrchestrator.configure(
            self._config,
            storage=self.storage,
            cdn=self.cdn,
            reporter=reporter,
        )

    def confirm(self, message: str, default: bool = False) -> bool:
        """Ask for user confirmation.

        In dry-run mode, always returns True without prompting.
        """
        if self._dry_run:
            prompt = escape(f"[dry-run] Would prompt: {message}")
            self._output.print(f"[dim]{prompt}[/dim]")
            return True
        return self._output.confirm(message, default)

    def log_dry_run(self, action: str, details: dict[str, Any] | None = None) -> None:
        """Log a dry-run action."""
        if self._dry_run:
            msg = f"[dry-run] {action}"
            if details:
                detail_str = ", ".join(f"{k}={v}" for k, v in details.items())
                msg = f"{msg} ({detail_str})"
            self._output.print(f"[dim]{escape(msg)}[/dim]")


# Click decorator for passing context
pass_context = click.make_pass_decorator(AeonianContext, ensure=True)
