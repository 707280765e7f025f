#!/usr/bin/env python3
"""
KUBEDIFF SENSITIVE MASKER - Redaction Policy
--------------------------------------------
Redacts configured top-level fields (Secret data, ConfigMap data, ...)
in place, before the documents are serialized for diffing.

A masked value keeps the length of the original and ends with a digest
of it, so a changed secret still shows up as a changed line while its
content never reaches the output.

Author: KubeDiff Team
Date: 2026-10-18
"""

import hashlib
import json
import logging
from typing import Any, List, Optional

from kubediff.core.config import MaskRules, default_mask_rules
from kubediff.core.models import Document, NodeKind, kind_of, node_kind, to_plain

logger = logging.getLogger("kubediff.masker")

MASK_CHAR = "*"
DIGEST_CHARS = 8


def canonical_text(value: Any) -> str:
    """
    The textual form a value is hashed and measured in.

    Non-string scalars go through str(), which loses their type: the
    integer 1 and the string "1" mask identically.
    """
    if isinstance(value, str):
        return value
    if node_kind(value) is NodeKind.SCALAR:
        return str(value)
    return json.dumps(to_plain(value), separators=(",", ":"), ensure_ascii=False, default=str)


def mask_value(value: Any) -> str:
    """Returns a same-length, deterministic stand-in for `value`."""
    text = canonical_text(value)
    length = len(text)
    if length == 0:
        return ""

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
    if length <= DIGEST_CHARS:
        return digest[:length]

    # Prefix is pure padding: nothing of the original leaks through it
    return MASK_CHAR * (length - DIGEST_CHARS) + digest[:DIGEST_CHARS]


class SensitiveMasker:
    """
    Applies a MaskRules table to decoded documents.
    Only the direct values under each configured field are replaced.
    """

    def __init__(self, rules: Optional[MaskRules] = None):
        self.rules = rules if rules is not None else default_mask_rules()

    def mask(self, docs: List[Document]) -> List[Document]:
        """Masks every document in place and hands the same list on."""
        for doc in docs:
            masked = self.mask_document(doc)
            if masked:
                logger.debug("Masked %s", ", ".join(masked))
        return docs

    def mask_document(self, doc: Document) -> List[str]:
        """Masks a single document; returns the dotted paths that were redacted."""
        kind = kind_of(doc)
        if kind is None or kind not in self.rules:
            return []

        masked = []
        for field_name in sorted(self.rules[kind]):
            section = doc.get(field_name)
            if node_kind(section) is not NodeKind.MAPPING:
                continue

            for key in list(section.keys()):
                value = section[key]
                if node_kind(value) is not NodeKind.SCALAR:
                    logger.warning(
                        "Nested value under %s.%s collapsed into a single masked string",
                        field_name, key,
                    )
                section[key] = mask_value(value)
                masked.append(f"{field_name}.{key}")

        return masked
