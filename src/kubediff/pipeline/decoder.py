#!/usr/bin/env python3
"""
KUBEDIFF DECODER - The Reader
-----------------------------
Turns a raw multi-document YAML stream into an ordered list of Documents.

The round-trip loader keeps mapping keys in encounter order. Everything
that is presentation only (comments, anchors, quoting, block styles) is
discarded while rebuilding the tree, so the exporter can re-encode a
document without reintroducing formatting noise.

Author: KubeDiff Team
Date: 2026-10-18
"""

import logging
from typing import Any, List, Union

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq
from ruamel.yaml.error import YAMLError
from ruamel.yaml.scalarbool import ScalarBoolean

from kubediff.core.errors import DecodeError
from kubediff.core.models import Document, NodeKind, node_kind

logger = logging.getLogger("kubediff.decoder")


class DocumentDecoder:
    """Decodes byte streams holding one or more YAML documents."""

    def __init__(self):
        self.yaml = YAML(typ='rt')
        self.yaml.allow_duplicate_keys = False

    def decode(self, raw: Union[bytes, str, None], side: str = "input") -> List[Document]:
        """
        Returns every non-empty document of the stream, in stream order.

        Raises DecodeError naming `side` on undecodable bytes or any YAML
        syntax error; no partial result is ever returned.
        """
        text = self._to_text(raw, side)
        if not text.strip():
            return []

        docs: List[Document] = []
        try:
            for doc in self.yaml.load_all(text):
                if self._is_empty(doc):
                    continue
                docs.append(self._rebuild(doc))
        except YAMLError as e:
            raise DecodeError(side, str(e)) from e

        logger.debug("Decoded %d document(s) from %s", len(docs), side)
        return docs

    def _to_text(self, raw: Union[bytes, str, None], side: str) -> str:
        if raw is None:
            return ""
        if isinstance(raw, str):
            return raw.lstrip("\ufeff")
        try:
            # BOM-aware, like files saved by Windows editors
            return bytes(raw).decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise DecodeError(side, f"input is not valid UTF-8 ({e.reason} at byte {e.start})") from e

    @staticmethod
    def _is_empty(doc: Any) -> bool:
        if doc is None:
            return True
        return node_kind(doc) is not NodeKind.SCALAR and len(doc) == 0

    def _rebuild(self, node: Any) -> Any:
        """Copies a loaded node into the single plain representation."""
        kind = node_kind(node)
        if kind is NodeKind.MAPPING:
            mapping = CommentedMap()
            for key, value in node.items():
                mapping[self._scalar(key)] = self._rebuild(value)
            return mapping
        if kind is NodeKind.SEQUENCE:
            return CommentedSeq(self._rebuild(item) for item in node)
        return self._scalar(node)

    @staticmethod
    def _scalar(value: Any) -> Any:
        # ruamel wraps scalars in style-carrying subclasses; unwrap to builtins
        if value is None or isinstance(value, bool):
            return value
        # Anchored booleans load as ScalarBoolean, an int subclass
        if isinstance(value, ScalarBoolean):
            return bool(value)
        if isinstance(value, int):
            return int(value)
        if isinstance(value, float):
            return float(value)
        if isinstance(value, str):
            return str(value)
        return value
