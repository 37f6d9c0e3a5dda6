"""Main CLI entry point for aeonian."""

import sys
from typing import Any

import click
from rich.console import Console

from aeonian import __version__
from aeonian.config import load_config
from aeonian.core.context import AeonianContext
from aeonian.core.exceptions import AeonianError, ConfigurationError
from aeonian.core.output import OutputFormat


CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 120,
}


class OutputFormatType(click.ParamType):
    """Custom Click parameter type for output format."""

    name = "format"

    def convert(
        self,
        value: Any,
        param: click.Parameter | None,
        ctx: click.Context | None,
    ) -> OutputFormat:
        if isinstance(value, OutputFormat):
            return value
        try:
            return OutputFormat(value.lower())
        except ValueError:
            self.fail(
                f"Invalid format '{value}'. Choose from: table, json, yaml, raw",
                param,
                ctx,
            )


OUTPUT_FORMAT = OutputFormatType()


def print_version(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    console = Console()
    console.print(f"aeonian version {__version__}")
    ctx.exit()


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "-o",
    "--output",
    "output_format",
    type=OUTPUT_FORMAT,
    metavar="FORMAT",
    help="Output format: table, json, yaml, raw",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for info, -vvv for debug)",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    help="Suppress non-essential output",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would happen without making changes",
)
@click.option(
    "--no-color",
    is_flag=True,
    help="Disable colored output",
)
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True),
    metavar="FILE",
    envvar="AEONIAN_CONFIG",
    help="Path to config file",
)
@click.option(
    "--version",
    is_flag=True,
    callback=print_version,
    expose_value=False,
    is_eager=True,
    help="Show version and exit",
)
@click.pass_context
def cli(
    ctx: click.Context,
    output_format: OutputFormat | None,
    verbose: int,
    quiet: bool,
    dry_run: bool,
    no_color: bool,
    config_file: str | None,
) -> None:
    """aeonian - versioned static site deployments on S3 and CloudFront.

    Each environment gets its own bucket, named by the configured prefix
    followed by the environment name. Deploying points the environment's
    CloudFront distribution at that bucket and invalidates its caches.

    \b
    Examples:
        aeonian environments
        aeonian deploy staging
        aeonian status production

    \b
    Configuration:
        ~/.aeonian/config.yaml    User configuration
        ./aeonian.yaml            Project configuration
        AEONIAN_*                 Environment variables
    """
    try:
        config = load_config(config_file)

        color = not no_color and config.global_settings.color != "never"
        ctx.obj = AeonianContext(
            config=config,
            output_format=output_format,
            verbose=verbose,
            quiet=quiet,
            dry_run=dry_run,
            color=color,
        )

        if dry_run and not quiet:
            ctx.obj.output.print_warning("Dry-run mode enabled - no changes will be made")

    except ConfigurationError as e:
        console = Console(stderr=True)
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)


def register_commands() -> None:
    """Register all commands."""
    from aeonian.commands.deploy import deploy
    from aeonian.commands.status import environments, status

    cli.add_command(deploy)
    cli.add_command(status)
    cli.add_command(environments)


register_commands()


@cli.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration."""
    aeonian_ctx: AeonianContext = ctx.obj
    site = aeonian_ctx.config
    config_data = {
        "bucket_prefix": site.bucket.prefix,
        "local_dir": site.bucket.local_dir,
        "website_index": site.website.index,
        "website_error": site.website.error,
        "environments": ", ".join(sorted(site.environments)) or "-",
        "website_endpoint": site.website_endpoint(),
        "settle_seconds": site.deploy.settle_seconds,
        "acl": site.deploy.acl,
        "aws": {
            "profile": site.aws.get_profile(),
            "region": site.aws.get_region(),
        },
        "output_format": aeonian_ctx.output_format.value,
        "dry_run": aeonian_ctx.dry_run,
    }
    aeonian_ctx.output.print_data(config_data, title="Current Configuration")


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except AeonianError as e:
        console = Console(stderr=True)
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        console = Console(stderr=True)
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
