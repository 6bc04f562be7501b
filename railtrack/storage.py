"""Flat, append-only store for generated certificate PDFs.

Artifacts live directly under a single upload folder and are never modified
once written.  Writes go to a hidden temporary file in the same directory and
are linked into place only after the bytes are flushed to disk, so a failed
write never leaves a partially written PDF reachable under its public name.
"""

import logging
import os
import re
import tempfile
import time
from typing import Iterable, Optional, Union

from .errors import ArtifactNotFound, StorageError

logger = logging.getLogger(__name__)

SAFE_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class ArtifactStore:
    def __init__(self, root: str):
        self.root = os.path.abspath(root)

    def ensure_root(self) -> str:
        """Create the upload folder if it is missing.  Safe on every startup."""

        try:
            os.makedirs(self.root, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create upload folder {self.root}: {e}") from e
        return self.root

    def path_for(self, name: str) -> str:
        if not name or not SAFE_NAME.match(name) or ".." in name:
            raise StorageError(f"Unsafe artifact name: {name!r}")
        return os.path.join(self.root, name)

    def exists(self, name: str) -> bool:
        return os.path.isfile(self.path_for(name))

    def write(
        self,
        name: str,
        content: Union[bytes, Iterable[bytes]],
        deadline: Optional[float] = None,
    ) -> str:
        """Write ``content`` under ``name`` and return the final path.

        ``content`` may be a bytes object or any iterable of byte chunks.  An
        existing artifact with the same name is never overwritten.  When
        ``deadline`` (a ``time.monotonic()`` value) has passed by the time the
        bytes are on disk, the write is abandoned and nothing is published.
        """

        final_path = self.path_for(name)
        chunks = [content] if isinstance(content, (bytes, bytearray)) else content

        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=f".{name}.", suffix=".tmp", dir=self.root)
            with os.fdopen(fd, "wb") as fh:
                for chunk in chunks:
                    fh.write(chunk)
                fh.flush()
                os.fsync(fh.fileno())
            if deadline is not None and time.monotonic() > deadline:
                raise StorageError(f"Deadline exceeded before {name} was stored")
            self._link_into_place(tmp_path, final_path)
        except FileExistsError as e:
            raise StorageError(f"Artifact already exists: {name}") from e
        except OSError as e:
            raise StorageError(f"Failed to write artifact {name}: {e}") from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)

        logger.info("Stored artifact %s", final_path)
        return final_path

    @staticmethod
    def _link_into_place(tmp_path: str, final_path: str) -> None:
        try:
            os.link(tmp_path, final_path)
        except FileExistsError:
            raise
        except OSError:
            # Filesystems without hard links: fall back to a rename.
            if os.path.exists(final_path):
                raise FileExistsError(final_path)
            os.replace(tmp_path, final_path)

    def read(self, name: str) -> bytes:
        path = self.path_for(name)
        try:
            with open(path, "rb") as fh:
                return fh.read()
        except FileNotFoundError as e:
            raise ArtifactNotFound(f"Artifact not found: {name}") from e
        except OSError as e:
            raise StorageError(f"Failed to read artifact {name}: {e}") from e
