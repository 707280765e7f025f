#!/usr/bin/env python3
"""
KUBEDIFF LOADER
---------------
Filesystem access for manifests: raw file reads and flat directory listing.

Author: KubeDiff Team
Date: 2026-10-18
"""

from pathlib import Path
from typing import List, Union

from kubediff.core.config import YAML_EXTENSIONS
from kubediff.core.errors import InputReadError

PathLike = Union[str, Path]


def load_file(path: PathLike) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise InputReadError(str(path), e.strerror or str(e)) from e


def is_dir(path: PathLike) -> bool:
    target = Path(path)
    if not target.exists():
        raise InputReadError(str(path), "no such file or directory")
    return target.is_dir()


def list_yaml_files(directory: PathLike) -> List[str]:
    """
    Returns the sorted names of the YAML files directly inside `directory`.
    Subdirectories are not traversed.
    """
    root = Path(directory)
    try:
        entries = list(root.iterdir())
    except OSError as e:
        raise InputReadError(str(directory), e.strerror or str(e)) from e

    return sorted(
        entry.name for entry in entries
        if entry.is_file() and entry.suffix.lower() in YAML_EXTENSIONS
    )
