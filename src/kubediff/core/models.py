#!/usr/bin/env python3
"""
KUBEDIFF CORE MODELS
--------------------
Defines the fundamental data structures used across the KubeDiff engine:
the single node representation of a decoded manifest, resource identities,
and classified diff output.

Author: KubeDiff Team
Date: 2026-10-18
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ruamel.yaml.comments import CommentedMap, CommentedSeq

from kubediff.core.config import NO_CHANGES_TEXT

# A decoded manifest: CommentedMap / CommentedSeq containers holding plain scalars
Document = Any


class NodeKind(str, Enum):
    """Tagged view over the three node shapes a document tree can hold."""
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


def node_kind(node: Any) -> NodeKind:
    if isinstance(node, dict):
        return NodeKind.MAPPING
    if isinstance(node, list):
        return NodeKind.SEQUENCE
    return NodeKind.SCALAR


def kind_of(doc: Document) -> Optional[str]:
    """
    Returns the lowercased Kind of a document, or None when it cannot be
    determined (not a mapping, no 'kind' key, or a non-string value).
    """
    if node_kind(doc) is not NodeKind.MAPPING:
        return None
    value = doc.get("kind")
    if not isinstance(value, str):
        return None
    return value.lower()


def to_plain(node: Any) -> Any:
    """Converts a document tree into builtin dicts and lists (for JSON bodies)."""
    kind = node_kind(node)
    if kind is NodeKind.MAPPING:
        return {str(k): to_plain(v) for k, v in node.items()}
    if kind is NodeKind.SEQUENCE:
        return [to_plain(item) for item in node]
    return node


def from_plain(node: Any) -> Any:
    """Wraps builtin dicts and lists (e.g. parsed JSON) into the document representation."""
    kind = node_kind(node)
    if kind is NodeKind.MAPPING:
        mapping = CommentedMap()
        for key, value in node.items():
            mapping[key] = from_plain(value)
        return mapping
    if kind is NodeKind.SEQUENCE:
        return CommentedSeq(from_plain(item) for item in node)
    return node


@dataclass(frozen=True)
class ResourceIdentity:
    """Where a local document lives on the cluster."""
    api_version: str
    kind: str
    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.kind} {self.namespace}/{self.name} ({self.api_version})"


@dataclass(frozen=True)
class ResourceMapping:
    """The queryable collection a (apiVersion, Kind) pair resolves to."""
    resource: str           # Plural resource name, e.g. 'deployments'
    group_version: str      # 'apps/v1', or 'v1' for the core group
    kind: str
    namespaced: bool

    @property
    def group(self) -> str:
        return self.group_version.rpartition("/")[0]

    @property
    def version(self) -> str:
        return self.group_version.rpartition("/")[2]

    @property
    def qualified_resource(self) -> str:
        """Fully qualified reference accepted by kubectl: resource.version.group"""
        parts = [self.resource, self.version]
        if self.group:
            parts.append(self.group)
        return ".".join(parts)


class LineKind(str, Enum):
    FILE_HEADER = "file-header"
    HUNK_HEADER = "hunk-header"
    ADDITION = "addition"
    DELETION = "deletion"
    CONTEXT = "context"


@dataclass(frozen=True)
class DiffLine:
    kind: LineKind
    text: str


@dataclass(frozen=True)
class DiffResult:
    """
    Classified unified diff output.

    A result without lines is the 'no changes' sentinel; the engine always
    hands out the shared NO_CHANGES instance for it.
    """
    lines: Tuple[DiffLine, ...] = ()

    @property
    def has_changes(self) -> bool:
        return bool(self.lines)

    def count(self, kind: LineKind) -> int:
        return sum(1 for line in self.lines if line.kind is kind)

    def render(self) -> str:
        if not self.lines:
            return NO_CHANGES_TEXT
        return "\n".join(line.text for line in self.lines)

    def __str__(self) -> str:
        return self.render()


NO_CHANGES = DiffResult()


class ReconcileState(str, Enum):
    """Per-resource stages of the cluster reconciliation pipeline."""
    PARSED = "parsed"
    LIVE_FETCHED = "live-fetched"
    NOT_FOUND = "not-found"
    DRY_RUN_APPLIED = "dry-run-applied"
    NORMALIZED = "normalized"
    DIFFED = "diffed"
    FAILED = "failed"


@dataclass
class ResourceReconciliation:
    """
    The running record of one resource moving through reconciliation.
    A record ends either DIFFED (with a diff) or FAILED (with an error).
    """
    identity: ResourceIdentity
    local: Document
    state: ReconcileState = ReconcileState.PARSED
    mapping: Optional[ResourceMapping] = None
    live: Optional[Document] = None
    predicted: Optional[Document] = None
    diff: Optional[DiffResult] = None
    error: Optional[Exception] = None
    history: List[ReconcileState] = field(default_factory=lambda: [ReconcileState.PARSED])

    def advance(self, state: ReconcileState):
        self.state = state
        self.history.append(state)

    def fail(self, error: Exception):
        self.error = error
        self.advance(ReconcileState.FAILED)

    @property
    def failed(self) -> bool:
        return self.state is ReconcileState.FAILED

    @property
    def created(self) -> bool:
        """True when the resource does not exist yet on the cluster."""
        return ReconcileState.NOT_FOUND in self.history

    def summary(self) -> Dict[str, Any]:
        return {
            "kind": self.identity.kind,
            "namespace": self.identity.namespace,
            "name": self.identity.name,
            "state": self.state.value,
            "created": self.created,
            "error": str(self.error) if self.error else None,
        }
