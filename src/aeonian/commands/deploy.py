"""Deploy command."""

import sys

import click

from aeonian.core.context import AeonianContext, pass_context
from aeonian.core.exceptions import ConfigurationError
from aeonian.core.output import format_bytes, format_duration
from aeonian.core.progress import NullProgressReporter, ProgressReporter, RichProgressReporter


@click.command()
@click.argument("environment")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation")
@pass_context
def deploy(ctx: AeonianContext, environment: str, yes: bool) -> None:
    """Deploy the site to an environment.

    Uploads the local build to the environment's bucket, points the
    environment's CloudFront distribution at it, removes the bucket it
    used to point at and invalidates the edge caches.

    \b
    Examples:
        aeonian deploy staging
        aeonian deploy production --yes
        aeonian --dry-run deploy production
    """
    reporter: ProgressReporter
    if ctx.quiet or ctx.dry_run:
        reporter = NullProgressReporter()
    else:
        reporter = RichProgressReporter(console=ctx.output.console)

    try:
        orchestrator = ctx.orchestrator(reporter=reporter)
        plan = orchestrator.plan(environment)
    except ConfigurationError as e:
        ctx.output.print_error(str(e))
        sys.exit(1)

    if ctx.dry_run:
        ctx.log_dry_run(
            "deploy",
            {
                "environment": plan.environment,
                "distribution": plan.distribution_id,
                "bucket": plan.bucket,
                "origin": plan.domain,
                "local_dir": plan.local_dir,
            },
        )
        return

    if not yes and ctx.config.global_settings.confirm_destructive:
        message = (
            f"Deploy {plan.local_dir} to {plan.bucket} and repoint {plan.distribution_id}? "
            "Existing contents of the bucket and any previous bucket will be deleted."
        )
        if not ctx.confirm(message):
            ctx.output.print_info("Cancelled")
            return

    try:
        run = orchestrator.deploy(environment)
    finally:
        if isinstance(reporter, RichProgressReporter):
            reporter.close()

    if not run.succeeded:
        phase = run.failed_phase.value if run.failed_phase else run.phase.value
        ctx.output.print_error(f"{phase}: {run.message}")
        sys.exit(1)

    summary = {
        "environment": run.environment,
        "bucket": run.bucket,
        "origin": run.domain,
        "bucket_reused": run.bucket_reused,
        "destroyed_bucket": run.destroyed_bucket or "-",
        "uploaded": run.sync_summary.get("uploaded", 0),
        "deleted": run.sync_summary.get("deleted", 0),
        "transferred": format_bytes(run.sync_summary.get("bytes_transferred", 0)),
        "invalidation": run.invalidation_id,
        "duration": format_duration(run.duration_seconds or 0.0),
    }
    ctx.output.print_data(summary, title=f"Deployed {run.environment}")
