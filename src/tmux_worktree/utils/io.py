"""Atomic persistence for small JSON files.

A reader never sees a half-written file: content goes to a sibling temp file
which then replaces the destination in a single rename.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def atomic_write_json(path: str | Path, payload: Any, perms: int = 0o644) -> Path:
    """Serialize ``payload`` as indented JSON and atomically replace ``path``.

    Missing parent directories are created. The temp file is removed if the
    write or rename fails, and the error is re-raised.

    Returns:
        The destination path.
    """
    dest = Path(path)
    dest.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(payload, indent=2) + "\n"

    fd, tmp_name = tempfile.mkstemp(dir=dest.parent, prefix=f".{dest.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, dest)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    try:
        os.chmod(dest, perms)
    except PermissionError:
        logger.warning(f"Could not set permissions {oct(perms)} on {dest}")

    logger.debug(f"Wrote {dest}")
    return dest
