"""
=============================================================================
FILE STORE
=============================================================================

Reads and writes the files behind /files/<name>.

=============================================================================
FLAT NAMESPACE
=============================================================================

Only the last segment of the request path names a file. Any directories in
the request are dropped before joining with the root, so every request
lands directly inside the configured directory:

    root = /srv/data

    /files/report.txt          → /srv/data/report.txt
    /files/a/b/report.txt      → /srv/data/report.txt
    /files/../../etc/passwd    → /srv/data/passwd

A last segment of "." or ".." would point at the root itself or above it,
so those names are treated as missing files and refused for writing.

=============================================================================
FAILURE POLICY
=============================================================================

Filesystem errors, and names the filesystem rejects, never reach the client:
    - read() logs and returns b""
    - write() logs and returns False

The caller decides what status to send; the file routes answer 200 and
201 regardless.

Writes truncate and overwrite. Two POSTs to the same name race and the last
one to finish wins; there is no locking.

=============================================================================
"""

from pathlib import Path, PurePosixPath
import logging


logger = logging.getLogger(__name__)


class FileStore:
    """
    A single flat directory of named files.

    Usage:
        store = FileStore("/srv/data")
        name = store.name_for("/files/report.txt")   # "report.txt"
        if store.exists(name):
            data = store.read(name)
    """

    def __init__(self, root: str = ""):
        """
        Args:
            root: Directory holding the files. "" means the process's
                  working directory, resolved at each access.
        """
        self.root = Path(root)

    @staticmethod
    def name_for(request_path: str) -> str:
        """
        The file name a request path refers to: its last segment.

        Trailing slashes are ignored, so "/files/" names "files".
        """
        return PurePosixPath(request_path).name

    def path_for(self, name: str) -> Path:
        """Filesystem path for a file name."""
        return self.root / name

    @staticmethod
    def is_valid_name(name: str) -> bool:
        return name not in ("", ".", "..")

    def exists(self, name: str) -> bool:
        """
        Whether an entry with this name is present.

        Names the filesystem cannot represent (an embedded NUL, a name
        longer than the OS allows) are reported as missing.
        """
        if not self.is_valid_name(name):
            return False
        try:
            return self.path_for(name).exists()
        except (OSError, ValueError) as e:
            logger.warning(f"Cannot stat file name {name!r}: {e}")
            return False

    def read(self, name: str) -> bytes:
        """
        Read a file's full contents.

        Returns:
            The contents, or b"" if reading failed.
        """
        path = self.path_for(name)
        try:
            return path.read_bytes()
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read {path}: {e}")
            return b""

    def write(self, name: str, data: bytes) -> bool:
        """
        Create or overwrite a file with exactly data.

        Returns:
            True on success, False if writing failed.
        """
        if not self.is_valid_name(name):
            logger.warning(f"Refusing to write invalid file name {name!r}")
            return False

        path = self.path_for(name)
        try:
            path.write_bytes(data)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to write {path}: {e}")
            return False

        logger.debug(f"Wrote {len(data)} bytes to {path}")
        return True
