#!/usr/bin/env python3
"""
KUBEDIFF EXPORTER - Canonical Serialization
-------------------------------------------
Converts document lists back into a single YAML string with a fixed
indentation convention. Keys keep their decoded order: re-encoding the
same tree always yields the same text.

Author: KubeDiff Team
Date: 2026-10-18
"""

import io
from typing import Any, List

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from kubediff.core.errors import SerializationError
from kubediff.core.models import Document


class ManifestExporter:
    """
    The Reconstructor: turns decoded (and possibly masked) documents
    into the text the diff engine compares.
    """

    def __init__(self):
        self.yaml = YAML(typ='rt')
        # Standard K8s: 2 spaces, but sequences are indented 4 (offset 2)
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self.yaml.width = 4096

    def export(self, docs: List[Document], side: str = "output") -> str:
        """
        Exports documents into one string, separated by '---'.
        Raises SerializationError naming `side` when a node cannot be represented.
        """
        stream = io.StringIO()

        for i, doc in enumerate(docs):
            # For multi-document output, we explicitly write the separator
            if i > 0:
                stream.write("---\n")
            try:
                self.yaml.dump(doc, stream)
            except (YAMLError, TypeError, ValueError) as e:
                raise SerializationError(side, str(e)) from e

        return stream.getvalue()

    def export_one(self, doc: Any, side: str = "output") -> bytes:
        """Serializes a single document to bytes, or b'' for an absent one."""
        if doc is None:
            return b""
        return self.export([doc], side).encode("utf-8")
