#!/usr/bin/env python3
"""
KUBEDIFF CONFIGURATION
----------------------
Defaults and the immutable option values handed to the pipeline.
Nothing here is mutated at runtime: callers build a DiffOptions once
and pass it into the engine.

Author: KubeDiff Team
Date: 2026-10-18
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Iterator, Mapping, Optional, Tuple

# Unified diff context window
DEFAULT_CONTEXT_LINES = 3

# Namespace used when neither the manifest nor the kubeconfig names one
DEFAULT_NAMESPACE = "default"

# Deadline (seconds) for every call to the cluster
DEFAULT_TIMEOUT = 60

# Field manager recorded by the server-side dry-run apply
FIELD_MANAGER = "kubediff"

# Bookkeeping rewritten by every apply; stripped from both sides before diffing
VOLATILE_FIELDS: Tuple[Tuple[str, ...], ...] = (
    ("metadata", "managedFields"),
)

NO_CHANGES_TEXT = "# No Changes"

# Diff labels for the two sides of a comparison
ORIGINAL_LABEL = "Original"
MODIFIED_LABEL = "Modified"
LIVE_LABEL = "Live"
PREDICTED_LABEL = "Predicted"

YAML_EXTENSIONS = (".yaml", ".yml")


class MaskRules(Mapping):
    """
    Read-only table: lowercase Kind -> frozenset of sensitive top-level fields.
    Extending it returns a new table; the original is never touched.
    """

    def __init__(self, rules: Optional[Mapping[str, Iterable[str]]] = None):
        table: Dict[str, FrozenSet[str]] = {}
        for kind, fields in (rules or {}).items():
            table[kind.lower()] = frozenset(fields)
        self._rules = MappingProxyType(table)

    def __getitem__(self, kind: str) -> FrozenSet[str]:
        return self._rules[kind.lower()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __hash__(self) -> int:
        return hash(frozenset(self._rules.items()))

    def __repr__(self) -> str:
        body = ", ".join(f"{k}: {sorted(v)}" for k, v in self._rules.items())
        return f"MaskRules({{{body}}})"

    def with_rule(self, kind: str, fields: Iterable[str]) -> "MaskRules":
        merged = dict(self._rules)
        merged[kind.lower()] = frozenset(fields)
        return MaskRules(merged)


def default_mask_rules() -> MaskRules:
    return MaskRules({
        "secret": ("data", "stringData"),
        "configmap": ("data", "binaryData"),
    })


def _normalize_kinds(kinds: Optional[Iterable[str]]) -> FrozenSet[str]:
    return frozenset(k.strip().lower() for k in (kinds or ()) if k and k.strip())


@dataclass(frozen=True)
class DiffOptions:
    """
    Everything that shapes a comparison besides its two inputs.

    Kind filters are normalized to lowercase at construction, so two option
    values built from differently-cased input compare equal.
    """
    secure: bool = False
    include_kinds: FrozenSet[str] = frozenset()
    exclude_kinds: FrozenSet[str] = frozenset()
    mask_rules: MaskRules = field(default_factory=default_mask_rules)
    context_lines: int = DEFAULT_CONTEXT_LINES

    def __post_init__(self):
        object.__setattr__(self, "include_kinds", _normalize_kinds(self.include_kinds))
        object.__setattr__(self, "exclude_kinds", _normalize_kinds(self.exclude_kinds))

    @property
    def filtering(self) -> bool:
        return bool(self.include_kinds or self.exclude_kinds)
