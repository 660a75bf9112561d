"""Filesystem sandbox utilities for safe path resolution."""

import os
from pathlib import Path


class ForbiddenPath(Exception):
    """Raised when a requested path escapes the configured sandbox."""


def resolve_sandbox_path(directory: str, user_path: str) -> Path:
    """Join ``user_path`` onto ``directory`` without leaving it.

    Normalization is purely lexical: symlinks inside the sandbox are followed
    later by the filesystem and are not checked here. The sandbox root itself
    is an acceptable result.
    """
    if "\x00" in user_path or os.path.isabs(user_path):
        raise ForbiddenPath

    directory_root = os.path.normpath(os.path.abspath(directory))
    target = os.path.normpath(os.path.join(directory_root, user_path))
    if target != directory_root and not target.startswith(
        directory_root.rstrip(os.sep) + os.sep
    ):
        raise ForbiddenPath

    return Path(target)
