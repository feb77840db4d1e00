"""
Where the payload stores live.

Resolution order for each directory: explicit argument (CLI flag or test),
then environment variable, then a default.

    durable:   GRADEMATE_HOME          -> ~/.grademate
    ephemeral: GRADEMATE_SESSION_DIR   -> <temp dir>/grademate-session

The temp directory does not survive a reboot, which makes it the terminal
counterpart of per-tab session storage.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from grademate.storage import FileStore


def resolve_data_dir(data_dir: str | Path | None = None) -> Path:
    if data_dir is not None:
        return Path(data_dir)
    env = os.environ.get("GRADEMATE_HOME", "").strip()
    if env:
        return Path(env).expanduser()
    return Path.home() / ".grademate"


def resolve_session_dir(session_dir: str | Path | None = None) -> Path:
    if session_dir is not None:
        return Path(session_dir)
    env = os.environ.get("GRADEMATE_SESSION_DIR", "").strip()
    if env:
        return Path(env).expanduser()
    return Path(tempfile.gettempdir()) / "grademate-session"


def default_stores(
    data_dir: str | Path | None = None, session_dir: str | Path | None = None
) -> tuple[FileStore, FileStore]:
    """
    Return (durable, ephemeral) file stores.
    """
    return FileStore(resolve_data_dir(data_dir)), FileStore(resolve_session_dir(session_dir))
