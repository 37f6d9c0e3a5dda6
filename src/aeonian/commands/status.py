"""Read-only commands: environments and live distribution status."""

import sys

import click

from aeonian.core.context import AeonianContext, pass_context
from aeonian.core.exceptions import CDNError, ConfigurationError
from aeonian.deploy.models import bucket_from_domain, bucket_name, site_domain


@click.command("environments")
@pass_context
def environments(ctx: AeonianContext) -> None:
    """List configured environments and the bucket each deploys to."""
    config = ctx.config
    if not config.environments:
        ctx.output.print_info("No environments configured")
        return

    endpoint = config.website_endpoint()
    rows = []
    for name, distribution_id in sorted(config.environments.items()):
        bucket = bucket_name(config.bucket.prefix, name) if config.bucket.prefix else "-"
        rows.append({
            "environment": name,
            "distribution": distribution_id,
            "bucket": bucket,
            "origin": site_domain(bucket, endpoint) if config.bucket.prefix else "-",
        })

    ctx.output.print_data(
        rows,
        headers=["environment", "distribution", "bucket", "origin"],
        title="Environments",
    )


@click.command("status")
@click.argument("environment")
@pass_context
def status(ctx: AeonianContext, environment: str) -> None:
    """Show which bucket an environment's distribution serves.

    \b
    Examples:
        aeonian status staging
        aeonian -o json status production
    """
    config = ctx.config
    try:
        config.validate_for_deploy()
        distribution_id = config.get_distribution_id(environment)
    except ConfigurationError as e:
        ctx.output.print_error(str(e))
        sys.exit(1)

    try:
        distribution = ctx.cdn.get_distribution_config(distribution_id)
        origin = distribution.origin_domain
    except CDNError as e:
        ctx.output.print_error(str(e))
        sys.exit(1)

    expected = bucket_name(config.bucket.prefix or "", environment)
    live = bucket_from_domain(origin, config.website_endpoint())

    ctx.output.print_data(
        {
            "environment": environment,
            "distribution": distribution_id,
            "version": distribution.version,
            "origin": origin,
            "live_bucket": live or "-",
            "target_bucket": expected,
            "up_to_date": live == expected,
        },
        title=f"{environment} status",
    )
