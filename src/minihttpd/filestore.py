"""
=============================================================================
FILE STORE
=============================================================================

Reads and writes named files under one base directory, on behalf of the
/files/<name> routes.

    FileStore("/srv/data")
        .read("notes.txt")          → bytes of /srv/data/notes.txt
        .write("notes.txt", b"...") → create or overwrite it

=============================================================================
CONTAINMENT
=============================================================================

The name comes straight from the request path, so it can contain "..",
absolute paths or symlinks that point elsewhere. Every name is resolved
first (following symlinks and "..") and must still land inside the base
directory:

    "notes.txt"            → /srv/data/notes.txt          ✓
    "sub/notes.txt"        → /srv/data/sub/notes.txt      ✓
    "../etc/passwd"        → /srv/etc/passwd              ✗ PermissionError
    "/etc/passwd"          → /etc/passwd                  ✗ PermissionError
    "link-to-tmp/x"        → /tmp/x                       ✗ PermissionError

A rejected name never reaches open().

=============================================================================
ERRORS
=============================================================================

Everything is reported as an OSError subclass, for the handlers to map
onto status codes:

    FileNotFoundError  → 404 on read
    PermissionError    → 500 (containment, or the OS said no)
    other OSError      → 500

Directories are never created; writing "a/b.txt" needs "a/" to exist.

There is no locking. Two concurrent writes to one name race and the last
writer wins.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Union


logger = logging.getLogger(__name__)


class FileStore:
    """Named-file access confined to a base directory."""

    def __init__(self, base_dir: Union[str, Path]):
        # Resolve once; every containment check compares against this
        self.base_dir = Path(base_dir).resolve()

    def resolve(self, name: str) -> Path:
        """
        Map a file name to a path inside the base directory.

        Raises:
            PermissionError: If the resolved path is outside the base
                directory, or the name cannot be a file name at all.
        """
        try:
            full_path = (self.base_dir / name).resolve()
        except ValueError as e:
            # e.g. embedded NUL byte
            raise PermissionError(f"Invalid file name {name!r}: {e}") from e

        try:
            full_path.relative_to(self.base_dir)
        except ValueError:
            logger.warning(f"Path traversal attempt: {name!r}")
            raise PermissionError(f"{name!r} is outside {self.base_dir}") from None

        return full_path

    def read(self, name: str) -> bytes:
        """
        Return the full contents of a file.

        Raises:
            FileNotFoundError: No such file.
            PermissionError: Name escapes the base directory.
            OSError: Any other I/O failure (e.g. the name is a directory).
        """
        path = self.resolve(name)
        with open(path, "rb") as f:
            return f.read()

    def write(self, name: str, data: bytes) -> None:
        """
        Create or overwrite a file with exactly `data`.

        Raises:
            PermissionError: Name escapes the base directory.
            OSError: Any I/O failure (missing parent directory included).
        """
        path = self.resolve(name)
        with open(path, "wb") as f:
            f.write(data)
