#!/usr/bin/env python3
"""
KUBEDIFF CLUSTER RECONCILER
---------------------------
Answers "what would change if I applied this manifest?" for every
resource of a local input. Each resource walks an explicit sequence:

    PARSED -> LIVE_FETCHED | NOT_FOUND -> DRY_RUN_APPLIED -> NORMALIZED -> DIFFED

or stops in FAILED, carrying its identity and the error. The server, not
local logic, computes the merge: the predicted state is the result of a
forced server-side dry-run apply.

Processing is sequential and fail-fast per input: the first FAILED
resource ends the run for the rest of that input.

Author: KubeDiff Team
Date: 2026-10-18
"""

import json
import logging
from typing import List, Optional, Union

from kubediff.cluster.accessor import ClusterAccessor
from kubediff.core.config import DiffOptions, LIVE_LABEL, PREDICTED_LABEL, VOLATILE_FIELDS
from kubediff.core.errors import AccessorError, DecodeError, KubeDiffError, NotFoundError
from kubediff.core.models import (
    Document, NodeKind, ReconcileState, ResourceIdentity,
    ResourceReconciliation, node_kind, to_plain,
)
from kubediff.pipeline.decoder import DocumentDecoder
from kubediff.pipeline.differ import DiffEngine
from kubediff.pipeline.exporter import ManifestExporter

logger = logging.getLogger("kubediff.reconciler")


def remove_nested_field(doc: Document, *path: str) -> bool:
    """Deletes doc[path[0]]...[path[-1]] if present. Returns True when removed."""
    node = doc
    for key in path[:-1]:
        if node_kind(node) is not NodeKind.MAPPING or key not in node:
            return False
        node = node[key]
    if node_kind(node) is not NodeKind.MAPPING or path[-1] not in node:
        return False
    del node[path[-1]]
    return True


class ClusterReconciler:
    """Diffs live cluster state against the predicted result of applying a local input."""

    def __init__(self, accessor: ClusterAccessor, options: Optional[DiffOptions] = None):
        self.accessor = accessor
        self.options = options or DiffOptions()
        self.decoder = DocumentDecoder()
        self.exporter = ManifestExporter()
        self.engine = DiffEngine(self.options)

    def reconcile(self, raw: Union[bytes, str], source: str = "input") -> List[ResourceReconciliation]:
        """
        Runs every resource of `raw` through the pipeline, in document order.

        A DecodeError for the input itself propagates. Resource failures are
        recorded: the returned list ends with the FAILED record and the
        resources after it are not processed.
        """
        records = self.parse(raw, source)
        processed: List[ResourceReconciliation] = []

        for record in records:
            processed.append(self.run(record))
            if record.failed:
                skipped = len(records) - len(processed)
                if skipped:
                    logger.warning("Skipping %d remaining resource(s) of %s after failure", skipped, source)
                break

        return processed

    def parse(self, raw: Union[bytes, str], source: str) -> List[ResourceReconciliation]:
        docs = self.decoder.decode(raw, source)
        return [
            ResourceReconciliation(identity=self.identify(doc, index, source), local=doc)
            for index, doc in enumerate(docs)
        ]

    def identify(self, doc: Document, index: int, source: str) -> ResourceIdentity:
        """Builds the identity of a local document, defaulting its namespace."""
        if node_kind(doc) is not NodeKind.MAPPING:
            raise DecodeError(source, f"document {index} is not a mapping")

        metadata = doc.get("metadata")
        if node_kind(metadata) is not NodeKind.MAPPING:
            metadata = {}

        api_version = doc.get("apiVersion")
        kind = doc.get("kind")
        name = metadata.get("name")
        for label, value in (("apiVersion", api_version), ("kind", kind), ("metadata.name", name)):
            if not isinstance(value, str) or not value:
                raise DecodeError(source, f"document {index} is missing '{label}'")

        namespace = metadata.get("namespace") or self.accessor.default_namespace
        return ResourceIdentity(api_version=api_version, kind=kind, namespace=str(namespace), name=name)

    def run(self, record: ResourceReconciliation) -> ResourceReconciliation:
        """Drives one resource from PARSED to DIFFED, or to FAILED."""
        try:
            self._fetch_live(record)
            self._dry_run(record)
            self._normalize(record)
            self._diff(record)
        except KubeDiffError as e:
            logger.error("Reconciliation failed for %s: %s", record.identity, e)
            record.fail(e)
        return record

    def _fetch_live(self, record: ResourceReconciliation):
        identity = record.identity
        record.mapping = self.accessor.resolve(identity.api_version, identity.kind)
        try:
            record.live = self.accessor.get(record.mapping, identity.name, identity.namespace)
        except NotFoundError:
            logger.info("%s does not exist yet; diffing against an empty baseline", identity)
            record.live = None
            record.advance(ReconcileState.NOT_FOUND)
            return
        record.advance(ReconcileState.LIVE_FETCHED)

    def _dry_run(self, record: ResourceReconciliation):
        identity = record.identity
        body = json.dumps(to_plain(record.local), default=str).encode("utf-8")
        try:
            record.predicted = self.accessor.dry_run_apply(
                record.mapping, identity.name, identity.namespace, body, force=True,
            )
        except NotFoundError as e:
            # During apply, not-found means a missing parent (e.g. namespace): fatal
            raise AccessorError(identity, f"dry-run apply failed: {e.reason}") from e
        record.advance(ReconcileState.DRY_RUN_APPLIED)

    def _normalize(self, record: ResourceReconciliation):
        for path in VOLATILE_FIELDS:
            if record.live is not None:
                remove_nested_field(record.live, *path)
            remove_nested_field(record.predicted, *path)
        record.advance(ReconcileState.NORMALIZED)

    def _diff(self, record: ResourceReconciliation):
        live_raw = self.exporter.export_one(record.live, "live state")
        predicted_raw = self.exporter.export_one(record.predicted, "predicted state")
        record.diff = self.engine.diff(live_raw, predicted_raw, LIVE_LABEL, PREDICTED_LABEL)
        record.advance(ReconcileState.DIFFED)
