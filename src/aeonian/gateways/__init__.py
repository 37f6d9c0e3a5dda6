"""Narrow interfaces over the storage and CDN providers."""

from aeonian.gateways.cdn import CDNGateway, CloudFrontGateway, DistributionConfig
from aeonian.gateways.storage import S3StorageGateway, StorageGateway
from aeonian.gateways.sync import SyncResult

__all__ = [
    "CDNGateway",
    "CloudFrontGateway",
    "DistributionConfig",
    "S3StorageGateway",
    "StorageGateway",
    "SyncResult",
]
