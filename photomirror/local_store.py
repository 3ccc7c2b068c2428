import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Set

logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".part"


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


class LocalDirectory:
    """
    The flat target directory. Files are addressed by base name only.
    Errors from the filesystem are raised as OSError for the caller to count.
    """

    def __init__(self, path):
        self.path = Path(path)

    def __repr__(self):
        return f"LocalDirectory({str(self.path)!r})"

    def ensure_exists(self) -> bool:
        """
        Create the directory (and parents) if missing. Returns True if it was created.
        """
        if self.path.is_dir():
            return False
        self.path.mkdir(parents=True, exist_ok=True)
        logger.info("Created directory: %s", self.path)
        return True

    def list_names(self) -> Set[str]:
        """
        Names of the regular files currently in the directory.
        A missing directory is an empty set.
        """
        if not self.path.is_dir():
            return set()
        with os.scandir(self.path) as entries:
            return {entry.name for entry in entries if entry.is_file()}

    def exists(self, name: str) -> bool:
        return (self.path / name).exists()

    def write_bytes(self, name: str, content: bytes, mtime: Optional[float] = None) -> Path:
        """
        Write content under name. The bytes go to a uniquely named temporary
        sibling first, so a failed write never leaves a truncated file under
        the final name and never clobbers another file in the directory.
        """
        final_path = self.path / name
        fd, tmp_name = tempfile.mkstemp(dir=self.path, prefix=".", suffix=PARTIAL_SUFFIX)
        tmp_path = Path(tmp_name)
        try:
            os.chmod(tmp_path, 0o666 & ~_current_umask())
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            os.replace(tmp_path, final_path)
        except (OSError, ValueError):
            if tmp_path.exists():
                tmp_path.unlink()
            raise

        # Attempt to set OS mod time
        if mtime is not None:
            try:
                os.utime(final_path, (mtime, mtime))
            except (OSError, OverflowError, ValueError) as e:
                logger.debug("Could not set mtime on %s: %s", final_path, e)

        return final_path

    def delete(self, name: str):
        (self.path / name).unlink()
