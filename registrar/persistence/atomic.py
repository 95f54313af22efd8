"""
Crash-safe file replacement shared by the JSON store and the snapshot manager.
"""

import os
import tempfile

from ..core.exceptions import PersistenceError


def ensure_directory(path: str) -> None:
    """Ensure ``path`` exists as a directory."""
    os.makedirs(path, exist_ok=True)


def atomic_write(path: str, payload: bytes) -> None:
    """Write ``payload`` to a sibling temp file, then rename it over ``path``.

    Readers see either the old file or the complete new one.
    """
    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = None
    try:
        ensure_directory(directory)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".", suffix=".tmp")
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as e:
        raise PersistenceError(f"Failed to write {path}: {str(e)}", details={"path": path}) from e
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)
