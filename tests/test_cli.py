"""Tests for CLI commands.

Gateways are replaced by fakes so every command runs without touching AWS.
"""

import json
from unittest.mock import PropertyMock, patch

import pytest
from click.testing import CliRunner

from aeonian.cli import cli
from aeonian.core.context import AeonianContext
from aeonian.core.exceptions import StorageError

CONFIG = """
bucket:
  prefix: proj-
  local_dir: ./public/
environments:
  staging: DIST123
  production: DIST456
aws:
  region: eu-west-1
deploy:
  settle_seconds: 0
"""

STAGING_DOMAIN = "proj-staging.s3-website-eu-west-1.amazonaws.com"


@pytest.fixture
def config_path(write_config):
    return write_config(CONFIG)


@pytest.fixture
def gateways(fake_storage, fake_cdn):
    with patch.object(AeonianContext, "storage", new_callable=PropertyMock, return_value=fake_storage), \
            patch.object(AeonianContext, "cdn", new_callable=PropertyMock, return_value=fake_cdn):
        yield fake_storage, fake_cdn


class TestCLIEntryPoint:
    """Tests for main CLI entry point, flags, and options."""

    def test_help(self, cli_runner: CliRunner):
        result = cli_runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "deploy" in result.output
        assert "status" in result.output
        assert "environments" in result.output

    def test_version(self, cli_runner: CliRunner):
        result = cli_runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "aeonian version" in result.output

    def test_invalid_output_format(self, cli_runner: CliRunner):
        result = cli_runner.invoke(cli, ["-o", "xml", "config"])
        assert result.exit_code != 0
        assert "Invalid format" in result.output

    def test_bad_config_file(self, cli_runner: CliRunner, write_config):
        path = write_config("deploy:\n  settle_seconds: -3\n")
        result = cli_runner.invoke(cli, ["-c", path, "config"])
        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_config_from_env_var(self, cli_runner: CliRunner, config_path):
        result = cli_runner.invoke(cli, ["--no-color", "-o", "json", "config"], env={"AEONIAN_CONFIG": config_path})
        assert result.exit_code == 0
        assert json.loads(result.output)["bucket_prefix"] == "proj-"


class TestConfigCommand:
    """Tests for the config command."""

    def test_config_json(self, cli_runner: CliRunner, config_path):
        result = cli_runner.invoke(cli, ["-c", config_path, "--no-color", "-o", "json", "config"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["local_dir"] == "./public/"
        assert data["environments"] == "production, staging"
        assert data["website_endpoint"] == "s3-website-eu-west-1.amazonaws.com"
        assert data["aws"]["region"] == "eu-west-1"


class TestEnvironmentsCommand:
    """Tests for the environments command."""

    def test_lists_environments(self, cli_runner: CliRunner, config_path):
        result = cli_runner.invoke(cli, ["-c", config_path, "--no-color", "-o", "json", "environments"])
        assert result.exit_code == 0
        rows = json.loads(result.output)
        assert [r["environment"] for r in rows] == ["production", "staging"]
        assert rows[1]["bucket"] == "proj-staging"
        assert rows[1]["origin"] == STAGING_DOMAIN

    def test_no_environments(self, cli_runner: CliRunner, write_config):
        path = write_config("bucket:\n  prefix: proj-\n")
        result = cli_runner.invoke(cli, ["-c", path, "--no-color", "environments"])
        assert result.exit_code == 0
        assert "No environments configured" in result.output


class TestStatusCommand:
    """Tests for the status command."""

    def test_up_to_date(self, cli_runner: CliRunner, config_path, gateways):
        _, fake_cdn = gateways
        fake_cdn.origin_domain = STAGING_DOMAIN

        result = cli_runner.invoke(cli, ["-c", config_path, "--no-color", "-o", "json", "status", "staging"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["live_bucket"] == "proj-staging"
        assert data["up_to_date"] is True

    def test_placeholder_origin(self, cli_runner: CliRunner, config_path, gateways):
        result = cli_runner.invoke(cli, ["-c", config_path, "--no-color", "-o", "json", "status", "staging"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["live_bucket"] == "-"
        assert data["target_bucket"] == "proj-staging"
        assert data["up_to_date"] is False

    def test_unknown_environment(self, cli_runner: CliRunner, config_path, gateways, calls):
        result = cli_runner.invoke(cli, ["-c", config_path, "--no-color", "status", "qa"])
        assert result.exit_code == 1
        assert "was not found" in result.output
        assert calls == []


class TestDeployCommand:
    """Tests for the deploy command."""

    def test_deploy(self, cli_runner: CliRunner, config_path, gateways, calls):
        result = cli_runner.invoke(cli, ["-c", config_path, "--no-color", "deploy", "staging", "--yes"])

        assert result.exit_code == 0, result.output
        assert "Deployed staging" in result.output
        assert calls[1] == ("create_bucket", "proj-staging")
        assert calls[2] == ("sync_directory", "./public/", "proj-staging", True)
        assert calls[-1][0] == "create_invalidation"

    def test_deploy_json_summary(self, cli_runner: CliRunner, config_path, gateways):
        result = cli_runner.invoke(cli, ["-c", config_path, "-q", "--no-color", "-o", "json", "deploy", "staging", "-y"])

        assert result.exit_code == 0, result.output
        summary = json.loads(result.output)
        assert summary["bucket"] == "proj-staging"
        assert summary["origin"] == STAGING_DOMAIN
        assert summary["invalidation"] == "I2J0I21PCUYOIK"
        assert summary["uploaded"] == 1

    def test_dry_run_makes_no_calls(self, cli_runner: CliRunner, config_path, gateways, calls):
        result = cli_runner.invoke(cli, ["-c", config_path, "--no-color", "--dry-run", "deploy", "production"])

        assert result.exit_code == 0
        assert "[dry-run] deploy" in result.output
        assert "bucket=proj-production" in result.output
        assert calls == []

    def test_unknown_environment(self, cli_runner: CliRunner, config_path, gateways, calls):
        result = cli_runner.invoke(cli, ["-c", config_path, "--no-color", "deploy", "qa", "-y"])
        assert result.exit_code == 1
        assert 'Environment "qa" was not found' in result.output
        assert calls == []

    def test_missing_prefix(self, cli_runner: CliRunner, write_config, gateways, calls):
        path = write_config("environments:\n  staging: DIST123\n")
        result = cli_runner.invoke(cli, ["-c", path, "--no-color", "deploy", "staging", "-y"])
        assert result.exit_code == 1
        assert "bucket prefix" in result.output
        assert calls == []

    def test_declined_confirmation(self, cli_runner: CliRunner, config_path, gateways, calls):
        result = cli_runner.invoke(cli, ["-c", config_path, "--no-color", "deploy", "staging"], input="n\n")
        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert calls == []

    def test_confirmation_disabled_in_config(self, cli_runner: CliRunner, write_config, gateways, calls):
        path = write_config(CONFIG + "global:\n  confirm_destructive: false\n")
        result = cli_runner.invoke(cli, ["-c", path, "--no-color", "deploy", "staging"])
        assert result.exit_code == 0, result.output
        assert calls[-1][0] == "create_invalidation"

    def test_failure_exits_nonzero(self, cli_runner: CliRunner, config_path, gateways, calls):
        fake_storage, _ = gateways
        fake_storage.failures["list_buckets"] = StorageError("list_buckets failed: AccessDenied: denied", operation="list_buckets")

        result = cli_runner.invoke(cli, ["-c", config_path, "--no-color", "deploy", "staging", "-y"])

        assert result.exit_code == 1
        assert "provision" in result.output
        assert "AccessDenied" in result.output
        assert calls == [("list_buckets",)]
