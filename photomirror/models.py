import datetime
import re
from dataclasses import dataclass, field
from typing import List, Optional

from photomirror.errors import ItemFailure

_FRACTION = re.compile(r"\.(\d+)")


def _pad_fraction(match) -> str:
    # fromisoformat before 3.11 only takes 3 or 6 fractional digits
    return "." + (match.group(1) + "000000")[:6]


@dataclass(frozen=True)
class MediaMetadata:
    creation_time: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None

    def creation_timestamp(self) -> Optional[float]:
        """
        POSIX timestamp of creation_time, or None if absent or unparseable.
        """
        if not self.creation_time:
            return None
        try:
            dt = datetime.datetime.fromisoformat(
                _FRACTION.sub(_pad_fraction, self.creation_time.replace("Z", "+00:00"))
            )
        except ValueError:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=datetime.timezone.utc)
        return dt.timestamp()


def _to_int(value) -> Optional[int]:
    # The API sends dimensions as strings
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def base_name(filename: str) -> str:
    """
    Strip any directory components (either separator) from a remote filename.
    """
    return filename.replace("\\", "/").rsplit("/", 1)[-1]


@dataclass(frozen=True)
class RemoteMediaItem:
    """
    One entry of the remote library, as returned by mediaItems.list.
    """
    id: str
    filename: str
    base_url: str
    metadata: MediaMetadata = field(default_factory=MediaMetadata)
    mime_type: Optional[str] = None
    kind: Optional[str] = None

    @property
    def local_name(self) -> str:
        return base_name(self.filename)

    @classmethod
    def from_api(cls, item: dict) -> "RemoteMediaItem":
        if not isinstance(item, dict):
            raise ValueError(f"media item is not an object: {item!r}")
        for key in ("id", "filename", "baseUrl"):
            if not item.get(key):
                raise ValueError(f"media item is missing '{key}'")

        meta = item.get("mediaMetadata") or {}
        if "photo" in meta:
            kind = "photo"
        elif "video" in meta:
            kind = "video"
        else:
            kind = None

        return cls(
            id=item["id"],
            filename=item["filename"],
            base_url=item["baseUrl"],
            metadata=MediaMetadata(
                creation_time=meta.get("creationTime"),
                width=_to_int(meta.get("width")),
                height=_to_int(meta.get("height")),
            ),
            mime_type=item.get("mimeType"),
            kind=kind,
        )


@dataclass
class SyncStats:
    """
    Counters for one reconciliation pass. Only ever incremented.
    """
    downloaded: int = 0
    skipped: int = 0
    deleted: int = 0
    errors: int = 0
    failures: List[ItemFailure] = field(default_factory=list)

    def record_failure(self, failure: ItemFailure):
        self.errors += 1
        self.failures.append(failure)
