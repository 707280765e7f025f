#!/usr/bin/env python3
"""
KUBEDIFF KIND FILTER - The Gatekeeper
-------------------------------------
Selects which documents take part in a comparison, by Kind.

Policy, in order:
  1. No include and no exclude set: everything passes, order untouched.
  2. Unknown Kind: dropped under an allow-list, kept otherwise
     (exclusion cannot apply to something that cannot be identified).
  3. Known Kind: must be in the include set (when one is given), and
     must not be in the exclude set. Exclusion wins over inclusion.

Author: KubeDiff Team
Date: 2026-10-18
"""

import logging
from typing import FrozenSet, Iterable, List, Optional

from kubediff.core.models import Document, kind_of

logger = logging.getLogger("kubediff.filter")


class KindFilter:
    """Include/exclude filtering on the case-insensitive 'kind' field."""

    def __init__(self, include: Optional[Iterable[str]] = None,
                 exclude: Optional[Iterable[str]] = None):
        self.include: FrozenSet[str] = frozenset(k.lower() for k in (include or ()))
        self.exclude: FrozenSet[str] = frozenset(k.lower() for k in (exclude or ()))

    @property
    def active(self) -> bool:
        return bool(self.include or self.exclude)

    def accepts(self, doc: Document) -> bool:
        kind = kind_of(doc)

        if kind is None:
            # Strict allow-listing treats unknowns as non-matching
            return not self.include

        if self.include and kind not in self.include:
            return False

        return kind not in self.exclude

    def apply(self, docs: List[Document]) -> List[Document]:
        """Returns the surviving documents in their original order."""
        if not self.active:
            return docs

        kept = [doc for doc in docs if self.accepts(doc)]
        if len(kept) != len(docs):
            logger.debug("Kind filter dropped %d of %d document(s)", len(docs) - len(kept), len(docs))
        return kept
