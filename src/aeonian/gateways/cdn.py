"""CDN gateway: distribution config, origin updates and invalidations."""

import copy
from dataclasses import dataclass
from typing import Any, Protocol

from botocore.exceptions import ClientError

from aeonian.clients.aws import AWSClientFactory, error_code, error_message, translate_errors
from aeonian.core.exceptions import CDNError, ConcurrencyConflictError
from aeonian.core.logging import StructuredLogger

logger = StructuredLogger(__name__)

# Error codes CloudFront returns when IfMatch no longer matches the distribution
CONFLICT_CODES = frozenset({"PreconditionFailed", "InvalidIfMatchVersion"})


@dataclass(frozen=True)
class DistributionConfig:
    """A distribution's configuration document and the ETag it was read at."""

    distribution_id: str
    config: dict[str, Any]
    version: str

    @property
    def origin_domain(self) -> str:
        """Domain name of the first origin."""
        items = self.config.get("Origins", {}).get("Items") or []
        if not items:
            raise CDNError(
                f"Distribution {self.distribution_id} has no origins",
                operation="get_distribution_config",
            )
        return items[0]["DomainName"]

    def with_origin_domain(self, domain: str) -> "DistributionConfig":
        """Copy of this config with the first origin pointed at domain."""
        updated = copy.deepcopy(self.config)
        items = updated.get("Origins", {}).get("Items") or []
        if not items:
            raise CDNError(
                f"Distribution {self.distribution_id} has no origins",
                operation="update_distribution",
            )
        items[0]["DomainName"] = domain
        return DistributionConfig(self.distribution_id, updated, self.version)


class CDNGateway(Protocol):
    """Operations the deployment pipeline needs from the CDN control plane."""

    def get_distribution_config(self, distribution_id: str) -> DistributionConfig: ...

    def update_distribution(
        self,
        distribution_id: str,
        config: DistributionConfig,
        version: str,
    ) -> str: ...

    def create_invalidation(
        self,
        distribution_id: str,
        paths: list[str],
        caller_reference: str,
    ) -> str: ...


class CloudFrontGateway:
    """CDNGateway backed by Amazon CloudFront."""

    def __init__(self, client: Any):
        self._cloudfront = client

    @classmethod
    def from_factory(cls, factory: AWSClientFactory) -> "CloudFrontGateway":
        return cls(factory.cloudfront)

    @translate_errors(CDNError, "get_distribution_config")
    def get_distribution_config(self, distribution_id: str) -> DistributionConfig:
        response = self._cloudfront.get_distribution_config(Id=distribution_id)
        return DistributionConfig(
            distribution_id=distribution_id,
            config=response["DistributionConfig"],
            version=response["ETag"],
        )

    @translate_errors(CDNError, "update_distribution")
    def update_distribution(
        self,
        distribution_id: str,
        config: DistributionConfig,
        version: str,
    ) -> str:
        """Submit a distribution config.

        Args:
            distribution_id: Distribution to update
            config: Full configuration document to apply
            version: ETag from the fetch this config was derived from

        Returns:
            The distribution's new ETag

        Raises:
            ConcurrencyConflictError: If the distribution changed since version
        """
        try:
            response = self._cloudfront.update_distribution(
                Id=distribution_id,
                IfMatch=version,
                DistributionConfig=config.config,
            )
        except ClientError as e:
            if error_code(e) in CONFLICT_CODES:
                raise ConcurrencyConflictError(
                    f"update_distribution failed: distribution {distribution_id} "
                    f"changed since it was read ({error_message(e)})",
                    operation="update_distribution",
                    cause=e,
                    details={"code": error_code(e), "version": version},
                ) from e
            raise

        logger.info("Updated distribution", id=distribution_id, origin=config.origin_domain)
        return response.get("ETag", "")

    @translate_errors(CDNError, "create_invalidation")
    def create_invalidation(
        self,
        distribution_id: str,
        paths: list[str],
        caller_reference: str,
    ) -> str:
        response = self._cloudfront.create_invalidation(
            DistributionId=distribution_id,
            InvalidationBatch={
                "Paths": {"Quantity": len(paths), "Items": list(paths)},
                "CallerReference": caller_reference,
            },
        )
        invalidation_id = response["Invalidation"]["Id"]
        logger.info("Created invalidation", id=distribution_id, invalidation=invalidation_id)
        return invalidation_id
