"""YAML file helpers shared by configuration and document files.

Reads go through ``yaml.safe_load``; writes land in a temporary file in
the destination directory and are renamed over the target, so a reader
never sees a half-written document.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


def load_yaml(path: str | Path) -> Any:
    """Parse a YAML file.

    Returns
    -------
    Any
        Parsed content; ``None`` for an empty file.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    yaml.YAMLError
        If the file is not valid YAML.  The message names the file.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"YAML file not found: {path}")
    text = path.read_text(encoding="utf-8")
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"{path}: {e}") from e


def dump_yaml(obj: Any) -> str:
    """Block-style YAML with mapping order preserved."""
    return yaml.safe_dump(obj, default_flow_style=False, sort_keys=False, allow_unicode=True)


def write_yaml_atomic(obj: Any, path: str | Path) -> Path:
    """Write *obj* as YAML to *path*, replacing it in one rename.

    Missing parent directories are created.  The temporary file is removed
    if anything fails before the rename.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = dump_yaml(obj).encode("utf-8")

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.debug("Wrote %d bytes to %s", len(data), path)
    return path
