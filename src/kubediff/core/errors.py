#!/usr/bin/env python3
"""
KUBEDIFF ERRORS
---------------
The failure taxonomy shared by every stage of the comparison pipeline.
Each error carries the context needed to locate the offending input:
the stream side, the file path or the resource identity.

Author: KubeDiff Team
Date: 2026-10-18
"""

from typing import Any, Optional


class KubeDiffError(Exception):
    """Base class for every error raised by the kubediff core."""


class DecodeError(KubeDiffError):
    """Malformed YAML input. Fatal for the comparison involving it."""

    def __init__(self, side: str, reason: str):
        self.side = side
        self.reason = reason
        super().__init__(f"failed to decode {side}: {reason}")


class SerializationError(KubeDiffError):
    """A document sequence could not be re-encoded canonically."""

    def __init__(self, side: str, reason: str):
        self.side = side
        self.reason = reason
        super().__init__(f"failed to normalize {side}: {reason}")


class InputReadError(KubeDiffError):
    """Underlying read failure for a file or directory."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"failed to read {path}: {reason}")


class AccessorError(KubeDiffError):
    """Remote query or dry-run failure other than 'not found'."""

    def __init__(self, identity: Optional[Any], reason: str):
        self.identity = identity
        self.reason = reason
        target = f" for {identity}" if identity is not None else ""
        super().__init__(f"cluster request failed{target}: {reason}")


class NotFoundError(AccessorError):
    """
    The remote resource does not exist.

    Never fatal: the reconciler absorbs it as an empty baseline
    (the resource is pending creation).
    """

    def __init__(self, identity: Optional[Any]):
        super().__init__(identity, "resource not found")
