"""Object storage gateway: bucket lifecycle, content sync and website hosting."""

from pathlib import Path
from typing import Any, Protocol

from boto3.s3.transfer import TransferConfig

from aeonian.clients.aws import AWSClientFactory, paginate, translate_errors
from aeonian.core.exceptions import StorageError
from aeonian.core.logging import StructuredLogger
from aeonian.gateways.sync import (
    ProgressCallback,
    RemoteObject,
    SyncProgress,
    SyncResult,
    plan_sync,
    scan_directory,
)

logger = StructuredLogger(__name__)

# DeleteObjects accepts at most this many keys per request
DELETE_BATCH_SIZE = 1000


class StorageGateway(Protocol):
    """Operations the deployment pipeline needs from object storage.

    Every operation raises StorageError on provider failure and never
    retries.
    """

    def list_buckets(self) -> set[str]: ...

    def create_bucket(self, name: str) -> None: ...

    def empty_bucket(self, name: str) -> None: ...

    def delete_bucket(self, name: str) -> None: ...

    def destroy_bucket(self, name: str) -> None: ...

    def sync_directory(
        self,
        local_dir: str | Path,
        bucket: str,
        delete_removed: bool = True,
        on_progress: ProgressCallback | None = None,
    ) -> SyncResult: ...

    def set_website_config(self, bucket: str, index_key: str, error_key: str) -> None: ...


class S3StorageGateway:
    """StorageGateway backed by Amazon S3."""

    def __init__(
        self,
        client: Any,
        region: str,
        acl: str | None = "public-read",
        transfer_config: TransferConfig | None = None,
    ):
        """Initialize the gateway.

        Args:
            client: boto3 S3 client
            region: Region new buckets are created in
            acl: Canned ACL applied to uploaded objects (None for none)
            transfer_config: Managed transfer settings
        """
        self._s3 = client
        self._region = region
        self._acl = acl
        # One object at a time; a deployment never fans out
        self._transfer_config = transfer_config or TransferConfig(use_threads=False)

    @classmethod
    def from_factory(cls, factory: AWSClientFactory, acl: str | None = "public-read") -> "S3StorageGateway":
        return cls(factory.s3, region=factory.region, acl=acl)

    @translate_errors(StorageError, "list_buckets")
    def list_buckets(self) -> set[str]:
        response = self._s3.list_buckets()
        return {b["Name"] for b in response.get("Buckets", [])}

    @translate_errors(StorageError, "create_bucket")
    def create_bucket(self, name: str) -> None:
        kwargs: dict[str, Any] = {"Bucket": name}
        if self._region != "us-east-1":
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": self._region}
        self._s3.create_bucket(**kwargs)
        logger.info("Created bucket", bucket=name, region=self._region)

    @translate_errors(StorageError, "empty_bucket")
    def empty_bucket(self, name: str) -> None:
        keys = [obj["Key"] for obj in paginate(self._s3, "list_objects_v2", "Contents", Bucket=name)]
        self._delete_keys(name, keys, operation="empty_bucket")
        logger.info("Emptied bucket", bucket=name, objects=len(keys))

    @translate_errors(StorageError, "delete_bucket")
    def delete_bucket(self, name: str) -> None:
        self._s3.delete_bucket(Bucket=name)
        logger.info("Deleted bucket", bucket=name)

    def destroy_bucket(self, name: str) -> None:
        """Empty a bucket, then delete it."""
        self.empty_bucket(name)
        self.delete_bucket(name)

    @translate_errors(StorageError, "list_objects")
    def list_objects(self, bucket: str) -> dict[str, RemoteObject]:
        """Index the bucket's objects by key."""
        objects: dict[str, RemoteObject] = {}
        for obj in paginate(self._s3, "list_objects_v2", "Contents", Bucket=bucket):
            objects[obj["Key"]] = RemoteObject(
                key=obj["Key"],
                size=obj.get("Size", 0),
                etag=obj.get("ETag", "").strip('"'),
            )
        return objects

    @translate_errors(StorageError, "sync")
    def sync_directory(
        self,
        local_dir: str | Path,
        bucket: str,
        delete_removed: bool = True,
        on_progress: ProgressCallback | None = None,
    ) -> SyncResult:
        """Make the bucket mirror local_dir.

        Args:
            local_dir: Directory whose contents are published
            bucket: Target bucket
            delete_removed: Delete objects with no local counterpart
            on_progress: Receives non-decreasing percentages (0-100)

        Returns:
            SyncResult
        """
        remote = self.list_objects(bucket)
        try:
            plan = plan_sync(scan_directory(local_dir), remote, delete_removed=delete_removed)
        except OSError as e:
            raise StorageError(
                f"sync failed: cannot read {local_dir}: {e}",
                operation="sync",
                cause=e,
            ) from e

        logger.debug(
            "Planned sync",
            bucket=bucket,
            uploads=len(plan.uploads),
            deletes=len(plan.deletes),
            unchanged=len(plan.unchanged),
        )

        progress = SyncProgress(plan.total_bytes, on_progress)
        result = SyncResult(bucket=bucket, unchanged=len(plan.unchanged))

        for local_file in plan.uploads:
            extra_args: dict[str, Any] = {"ContentType": local_file.content_type}
            if self._acl:
                extra_args["ACL"] = self._acl

            try:
                self._s3.upload_file(
                    str(local_file.path),
                    bucket,
                    local_file.key,
                    ExtraArgs=extra_args,
                    Callback=progress,
                    Config=self._transfer_config,
                )
            except OSError as e:
                raise StorageError(
                    f"sync failed: cannot upload {local_file.path}: {e}",
                    operation="sync",
                    cause=e,
                ) from e
            result.uploaded.append(local_file.key)

        progress.finish()
        result.bytes_transferred = progress.bytes_done

        if plan.deletes:
            self._delete_keys(bucket, plan.deletes, operation="sync")
            result.deleted = list(plan.deletes)

        logger.info("Synced directory", **result.to_dict())
        return result

    @translate_errors(StorageError, "set_website_config")
    def set_website_config(self, bucket: str, index_key: str, error_key: str) -> None:
        self._s3.put_bucket_website(
            Bucket=bucket,
            WebsiteConfiguration={
                "IndexDocument": {"Suffix": index_key},
                "ErrorDocument": {"Key": error_key},
            },
        )

    def _delete_keys(self, bucket: str, keys: list[str], operation: str) -> None:
        for i in range(0, len(keys), DELETE_BATCH_SIZE):
            chunk = keys[i : i + DELETE_BATCH_SIZE]
            response = self._s3.delete_objects(
                Bucket=bucket,
                Delete={"Objects": [{"Key": k} for k in chunk], "Quiet": True},
            )
            errors = response.get("Errors", [])
            if errors:
                first = errors[0]
                raise StorageError(
                    f"{operation} failed: could not delete {len(errors)} object(s), "
                    f"first {first.get('Key')}: {first.get('Code')}",
                    operation=operation,
                    details={"errors": errors[:10]},
                )
