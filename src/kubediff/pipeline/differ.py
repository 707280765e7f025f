#!/usr/bin/env python3
"""
KUBEDIFF DIFF ENGINE
--------------------
Runs the comparison pipeline over two raw inputs:

    decode -> filter -> mask -> serialize -> unified diff -> classify

Each stage takes the document list from the previous one and hands the
result to the next; serialization always reads the final (filtered and
masked) tree.

Author: KubeDiff Team
Date: 2026-10-18
"""

import difflib
import logging
from typing import Iterable, List, Optional, Union

from kubediff.core.config import DiffOptions, MODIFIED_LABEL, ORIGINAL_LABEL
from kubediff.core.models import NO_CHANGES, DiffLine, DiffResult, Document, LineKind
from kubediff.pipeline.decoder import DocumentDecoder
from kubediff.pipeline.exporter import ManifestExporter
from kubediff.rules.filter import KindFilter
from kubediff.rules.masker import SensitiveMasker

logger = logging.getLogger("kubediff.differ")

Raw = Union[bytes, str, None]


def classify(diff_lines: Iterable[str]) -> DiffResult:
    """
    Tags each unified diff line by its prefix.

    '---'/'+++' only count as file headers before the first hunk, so a
    removed '--' line inside a hunk stays a deletion.
    """
    lines: List[DiffLine] = []
    in_hunk = False
    for text in diff_lines:
        if text.startswith("@@"):
            in_hunk = True
            kind = LineKind.HUNK_HEADER
        elif not in_hunk and text.startswith(("---", "+++")):
            kind = LineKind.FILE_HEADER
        elif text.startswith("+"):
            kind = LineKind.ADDITION
        elif text.startswith("-"):
            kind = LineKind.DELETION
        else:
            kind = LineKind.CONTEXT
        lines.append(DiffLine(kind, text))

    if not lines:
        return NO_CHANGES
    return DiffResult(tuple(lines))


class DiffEngine:
    """Semantic comparison of two multi-document manifests."""

    def __init__(self, options: Optional[DiffOptions] = None):
        self.options = options or DiffOptions()
        self.decoder = DocumentDecoder()
        self.exporter = ManifestExporter()
        self.kind_filter = KindFilter(self.options.include_kinds, self.options.exclude_kinds)
        self.masker = SensitiveMasker(self.options.mask_rules)

    def diff(self, raw_a: Raw, raw_b: Raw,
             from_label: str = ORIGINAL_LABEL, to_label: str = MODIFIED_LABEL) -> DiffResult:
        """
        Compares two raw inputs. Returns NO_CHANGES when they are equivalent
        after filtering and masking.
        """
        text_a = self.normalize(raw_a, "first file")
        text_b = self.normalize(raw_b, "second file")
        return self.compare_text(text_a, text_b, from_label, to_label)

    def normalize(self, raw: Raw, side: str) -> str:
        """Decodes, filters, masks and re-serializes one side."""
        docs = self.decoder.decode(raw, side)
        docs = self.prepare(docs)
        return self.exporter.export(docs, side)

    def prepare(self, docs: List[Document]) -> List[Document]:
        if self.options.filtering:
            docs = self.kind_filter.apply(docs)
        if self.options.secure:
            docs = self.masker.mask(docs)
        return docs

    def compare_text(self, text_a: str, text_b: str,
                     from_label: str = ORIGINAL_LABEL, to_label: str = MODIFIED_LABEL) -> DiffResult:
        diff_lines = difflib.unified_diff(
            text_a.splitlines(),
            text_b.splitlines(),
            fromfile=from_label,
            tofile=to_label,
            n=self.options.context_lines,
            lineterm="",
        )
        result = classify(diff_lines)
        logger.debug(
            "Diff computed: +%d -%d",
            result.count(LineKind.ADDITION), result.count(LineKind.DELETION),
        )
        return result
