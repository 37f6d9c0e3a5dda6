"""Pytest fixtures for aeonian tests."""

import os
from pathlib import Path
from typing import Any, Callable, Generator

import pytest
from click.testing import CliRunner

from aeonian.config import SiteConfig, parse_config
from aeonian.core.clock import VirtualClock
from aeonian.gateways.cdn import DistributionConfig
from aeonian.gateways.sync import SyncResult


class FakeStorage:
    """StorageGateway double recording every call into a shared log."""

    def __init__(
        self,
        calls: list[tuple[Any, ...]],
        buckets: set[str] | None = None,
        progress: list[float] | None = None,
    ):
        self.calls = calls
        self.buckets = set(buckets or ())
        self.progress = progress if progress is not None else [0.0, 50.0, 100.0]
        self.failures: dict[str, Exception] = {}

    def _record(self, *call: Any) -> None:
        self.calls.append(call)
        error = self.failures.get(call[0])
        if error is not None:
            raise error

    def list_buckets(self) -> set[str]:
        self._record("list_buckets")
        return set(self.buckets)

    def create_bucket(self, name: str) -> None:
        self._record("create_bucket", name)
        self.buckets.add(name)

    def empty_bucket(self, name: str) -> None:
        self._record("empty_bucket", name)

    def delete_bucket(self, name: str) -> None:
        self._record("delete_bucket", name)
        self.buckets.discard(name)

    def destroy_bucket(self, name: str) -> None:
        self._record("destroy_bucket", name)
        self.buckets.discard(name)

    def sync_directory(self, local_dir, bucket, delete_removed=True, on_progress=None) -> SyncResult:
        self._record("sync_directory", str(local_dir), bucket, delete_removed)
        for percent in self.progress:
            if on_progress is not None:
                on_progress(percent)
        return SyncResult(bucket=bucket, uploaded=["index.html"], bytes_transferred=42)

    def set_website_config(self, bucket: str, index_key: str, error_key: str) -> None:
        self._record("set_website_config", bucket, index_key, error_key)


class FakeCDN:
    """CDNGateway double recording every call into a shared log."""

    def __init__(
        self,
        calls: list[tuple[Any, ...]],
        origin_domain: str = "placeholder.example.com",
        version: str = "E2QWRUHAPOMQZL",
    ):
        self.calls = calls
        self.origin_domain = origin_domain
        self.version = version
        self.failures: dict[str, Exception] = {}
        self.updates: list[DistributionConfig] = []

    def _record(self, *call: Any) -> None:
        self.calls.append(call)
        error = self.failures.get(call[0])
        if error is not None:
            raise error

    def get_distribution_config(self, distribution_id: str) -> DistributionConfig:
        self._record("get_distribution_config", distribution_id)
        return DistributionConfig(
            distribution_id=distribution_id,
            config={
                "CallerReference": "site",
                "Comment": "",
                "Enabled": True,
                "Origins": {
                    "Quantity": 1,
                    "Items": [{"Id": "website", "DomainName": self.origin_domain}],
                },
            },
            version=self.version,
        )

    def update_distribution(self, distribution_id: str, config: DistributionConfig, version: str) -> str:
        self._record("update_distribution", distribution_id, config.origin_domain, version)
        self.updates.append(config)
        self.origin_domain = config.origin_domain
        return "E3NEWVERSION"

    def create_invalidation(self, distribution_id: str, paths: list[str], caller_reference: str) -> str:
        self._record("create_invalidation", distribution_id, tuple(paths), caller_reference)
        return "I2J0I21PCUYOIK"


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI runner."""
    return CliRunner()


@pytest.fixture
def raw_config() -> dict[str, Any]:
    """Raw configuration mapping as a user would write it."""
    return {
        "bucket": {"prefix": "proj-", "local_dir": "./dist/"},
        "website": {"index": "index.html", "error": "error/index.html"},
        "environments": {"staging": "DIST123", "production": "DIST456"},
        "aws": {"region": "eu-west-1"},
        "deploy": {"settle_seconds": 1.0},
    }


@pytest.fixture
def site_config(raw_config: dict[str, Any]) -> SiteConfig:
    """Parsed site configuration."""
    return parse_config(raw_config)


@pytest.fixture
def calls() -> list[tuple[Any, ...]]:
    """Shared call log, so ordering across gateways can be asserted."""
    return []


@pytest.fixture
def fake_storage(calls: list[tuple[Any, ...]]) -> FakeStorage:
    return FakeStorage(calls)


@pytest.fixture
def fake_cdn(calls: list[tuple[Any, ...]]) -> FakeCDN:
    return FakeCDN(calls)


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str], str]:
    """Write YAML text to a config file and return its path."""

    def _write(content: str) -> str:
        config_file = tmp_path / "aeonian.yaml"
        config_file.write_text(content)
        return str(config_file)

    return _write


@pytest.fixture(autouse=True)
def clean_env() -> Generator[None, None, None]:
    """Clean environment variables before each test."""
    env_vars = [
        "AEONIAN_AWS_PROFILE",
        "AEONIAN_AWS_REGION",
        "AEONIAN_CONFIG",
        "AWS_PROFILE",
        "AWS_REGION",
        "AWS_DEFAULT_REGION",
    ]

    original = {k: os.environ.get(k) for k in env_vars}

    for k in env_vars:
        os.environ.pop(k, None)

    yield

    for k, v in original.items():
        if v is not None:
            os.environ[k] = v
        else:
            os.environ.pop(k, None)
