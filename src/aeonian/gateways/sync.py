"""Directory-to-bucket delta planning and transfer progress."""

import hashlib
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

DEFAULT_CONTENT_TYPE = "application/octet-stream"

ProgressCallback = Callable[[float], None]


@dataclass(frozen=True)
class LocalFile:
    """A file under the local content directory."""

    key: str
    path: Path
    size: int

    @property
    def content_type(self) -> str:
        mime_type, _ = mimetypes.guess_type(self.path.name)
        return mime_type or DEFAULT_CONTENT_TYPE

    def md5(self) -> str:
        digest = hashlib.md5()
        with open(self.path, "rb") as f:
            for chunk in iter(lambda: f.read(1024 * 1024), b""):
                digest.update(chunk)
        return digest.hexdigest()


@dataclass(frozen=True)
class RemoteObject:
    """An object already in the bucket."""

    key: str
    size: int
    etag: str

    @property
    def is_multipart(self) -> bool:
        # Multipart ETags are "<md5-of-md5s>-<parts>", not a content hash
        return "-" in self.etag


@dataclass
class SyncPlan:
    """What a sync will do to make the bucket mirror the directory."""

    uploads: list[LocalFile] = field(default_factory=list)
    deletes: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        return sum(f.size for f in self.uploads)

    @property
    def is_empty(self) -> bool:
        return not self.uploads and not self.deletes


@dataclass
class SyncResult:
    """Outcome of a completed sync."""

    bucket: str
    uploaded: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    unchanged: int = 0
    bytes_transferred: int = 0

    def to_dict(self) -> dict[str, int | str]:
        return {
            "bucket": self.bucket,
            "uploaded": len(self.uploaded),
            "deleted": len(self.deleted),
            "unchanged": self.unchanged,
            "bytes_transferred": self.bytes_transferred,
        }


def scan_directory(local_dir: str | Path) -> dict[str, LocalFile]:
    """Index every file under local_dir by its bucket key.

    Raises:
        FileNotFoundError: If local_dir does not exist or is not a directory
    """
    root = Path(local_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"Local directory not found: {local_dir}")

    files: dict[str, LocalFile] = {}
    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        key = path.relative_to(root).as_posix()
        files[key] = LocalFile(key=key, path=path, size=path.stat().st_size)
    return files


def needs_upload(local: LocalFile, remote: RemoteObject | None) -> bool:
    """Check whether the remote copy differs from the local file."""
    if remote is None:
        return True
    if local.size != remote.size:
        return True
    if remote.is_multipart:
        return True
    return local.md5() != remote.etag


def plan_sync(
    local: dict[str, LocalFile],
    remote: dict[str, RemoteObject],
    delete_removed: bool = True,
) -> SyncPlan:
    """Compute uploads and deletions.

    Args:
        local: Local files keyed by bucket key
        remote: Remote objects keyed by bucket key
        delete_removed: Delete remote objects with no local counterpart

    Returns:
        SyncPlan
    """
    plan = SyncPlan()

    for key, local_file in local.items():
        if needs_upload(local_file, remote.get(key)):
            plan.uploads.append(local_file)
        else:
            plan.unchanged.append(key)

    if delete_removed:
        plan.deletes = sorted(key for key in remote if key not in local)

    return plan


class SyncProgress:
    """Turns transferred byte counts into completion percentages.

    Emitted values never decrease and stay within [0, 100]. Nothing is
    emitted while the total is unknown (zero bytes to send).
    """

    def __init__(self, total_bytes: int, callback: ProgressCallback | None = None):
        self._total = total_bytes
        self._callback = callback
        self._done = 0
        self._last: float | None = None

    @property
    def bytes_done(self) -> int:
        return self._done

    @property
    def last_percent(self) -> float | None:
        return self._last

    def __call__(self, bytes_amount: int) -> None:
        # s3transfer reports negative amounts when it rewinds a retried part
        self._done = max(0, min(self._total, self._done + bytes_amount))
        self._emit()

    def finish(self) -> None:
        """Account for every planned byte as sent."""
        self._done = self._total
        self._emit()

    def _emit(self) -> None:
        if self._total <= 0:
            return
        percent = round(self._done / self._total * 100, 2)
        if self._last is not None and percent <= self._last:
            return
        self._last = percent
        if self._callback is not None:
            self._callback(percent)
