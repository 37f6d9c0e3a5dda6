"""Configuration management for aeonian using Pydantic."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from aeonian.core.exceptions import ConfigurationError
from aeonian.core.logging import LogLevel
from aeonian.core.output import OutputFormat

DEFAULT_REGION = "eu-west-1"


class AWSConfig(BaseModel):
    """AWS configuration."""

    profile: str | None = None
    region: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None
    session_token: str | None = None
    endpoint_url: str | None = None

    def get_profile(self) -> str | None:
        """Get AWS profile from config or environment."""
        return (
            os.environ.get("AEONIAN_AWS_PROFILE")
            or os.environ.get("AWS_PROFILE")
            or self.profile
        )

    def get_region(self) -> str:
        """Get AWS region from config or environment."""
        return (
            os.environ.get("AEONIAN_AWS_REGION")
            or os.environ.get("AWS_REGION")
            or os.environ.get("AWS_DEFAULT_REGION")
            or self.region
            or DEFAULT_REGION
        )


class BucketConfig(BaseModel):
    """Target bucket naming and local content location."""

    model_config = {"populate_by_name": True}

    local_dir: str = Field(default="./dist/", alias="localDir")
    prefix: str | None = None


class WebsiteConfig(BaseModel):
    """Static website document keys."""

    index: str = "index.html"
    error: str = "error/index.html"


class DeploySettings(BaseModel):
    """Deployment pipeline tuning."""

    settle_seconds: float = 1.0
    acl: str | None = "public-read"
    website_endpoint: str | None = None
    invalidation_paths: list[str] = Field(default_factory=lambda: ["/*"])

    @field_validator("settle_seconds")
    @classmethod
    def validate_settle_seconds(cls, v: float) -> float:
        if v < 0:
            raise ValueError("settle_seconds must not be negative")
        return v

    @field_validator("invalidation_paths")
    @classmethod
    def validate_invalidation_paths(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("invalidation_paths must not be empty")
        return v


class GlobalConfig(BaseModel):
    """Global settings."""

    output_format: OutputFormat = OutputFormat.TABLE
    color: str = "auto"  # auto, always, never
    verbosity: LogLevel = LogLevel.WARNING
    confirm_destructive: bool = True

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if v not in ("auto", "always", "never"):
            raise ValueError("color must be 'auto', 'always', or 'never'")
        return v


class SiteConfig(BaseModel):
    """Main configuration model."""

    model_config = {"populate_by_name": True}

    bucket: BucketConfig = Field(default_factory=BucketConfig)
    website: WebsiteConfig = Field(default_factory=WebsiteConfig)
    environments: dict[str, str] = Field(default_factory=dict)
    aws: AWSConfig = Field(default_factory=AWSConfig)
    deploy: DeploySettings = Field(default_factory=DeploySettings)
    global_settings: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")

    def website_endpoint(self) -> str:
        """Get the S3 website hosting suffix used for origin domains."""
        if self.deploy.website_endpoint:
            return self.deploy.website_endpoint
        return f"s3-website-{self.aws.get_region()}.amazonaws.com"

    def get_distribution_id(self, environment: str) -> str:
        """Get the distribution fronting an environment."""
        if environment not in self.environments:
            raise ConfigurationError(
                f'Environment "{environment}" was not found in the config you passed',
                details={"known": sorted(self.environments)},
            )
        return self.environments[environment]

    def validate_for_deploy(self) -> None:
        """Check everything a deployment needs before any remote call."""
        if not self.bucket.prefix:
            raise ConfigurationError(
                "You need to specify a bucket prefix; bucket: { prefix: 'myproj-' }"
            )


def parse_config(data: dict[str, Any]) -> SiteConfig:
    """Build a SiteConfig from a raw mapping, merged over the defaults."""
    try:
        return SiteConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


class ConfigLoader:
    """Loads and merges configuration from multiple sources."""

    CONFIG_FILENAMES = ["aeonian.yaml", "aeonian.yml", ".aeonian.yaml", ".aeonian.yml"]

    def __init__(self):
        self._config: SiteConfig | None = None

    def load(self, config_file: str | Path | None = None) -> SiteConfig:
        """Load configuration from files.

        Priority (highest to lowest):
        1. Explicitly specified config file
        2. Project config (./aeonian.yaml)
        3. User config (~/.aeonian/config.yaml)

        Args:
            config_file: Optional explicit config file path

        Returns:
            Merged configuration
        """
        configs: list[dict[str, Any]] = []

        user_config_path = Path.home() / ".aeonian" / "config.yaml"
        if user_config_path.exists():
            configs.append(self._load_yaml_file(user_config_path))

        project_config = self._find_project_config()
        if project_config:
            configs.append(self._load_yaml_file(project_config))

        if config_file:
            config_path = Path(config_file)
            if not config_path.exists():
                raise ConfigurationError(f"Config file not found: {config_file}")
            configs.append(self._load_yaml_file(config_path))

        merged = self._merge_configs(configs)

        self._config = parse_config(merged)
        return self._config

    def _find_project_config(self) -> Path | None:
        """Find project config file in current or parent directories."""
        current = Path.cwd()

        while current != current.parent:
            for filename in self.CONFIG_FILENAMES:
                config_path = current / filename
                if config_path.exists():
                    return config_path
            current = current.parent

        return None

    def _load_yaml_file(self, path: Path) -> dict[str, Any]:
        """Load a YAML config file."""
        try:
            with open(path) as f:
                content = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Cannot read {path}: {e}")

        if not isinstance(content, dict):
            raise ConfigurationError(f"Expected a mapping at the top of {path}")
        return content

    def _merge_configs(self, configs: list[dict[str, Any]]) -> dict[str, Any]:
        """Deep merge multiple configuration dictionaries."""
        result: dict[str, Any] = {}
        for config in configs:
            result = self._deep_merge(result, config)
        return result

    def _deep_merge(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


def load_config(config_file: str | Path | None = None) -> SiteConfig:
    """Load aeonian configuration.

    Args:
        config_file: Optional explicit config file path

    Returns:
        Loaded configuration
    """
    return ConfigLoader().load(config_file)


def get_default_config() -> SiteConfig:
    """Get default configuration without loading from files."""
    return SiteConfig()
