#!/usr/bin/env python3
"""
KUBEDIFF ENGINE - The Orchestrator
----------------------------------
Runs comparisons over files, directories and the live cluster, one unit
at a time. A failing unit is captured in its own report and the batch
moves on; the caller decides whether any failure is fatal overall.

Author: KubeDiff Team
Date: 2026-10-18
"""

import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from kubediff.cluster.accessor import ClusterAccessor
from kubediff.cluster.reconciler import ClusterReconciler
from kubediff.core.config import DiffOptions
from kubediff.core.errors import KubeDiffError
from kubediff.core.loader import PathLike, is_dir, list_yaml_files, load_file
from kubediff.pipeline.differ import DiffEngine

logger = logging.getLogger("kubediff.engine")

STATUS_CHANGED = "CHANGED"
STATUS_UNCHANGED = "UNCHANGED"
STATUS_ERROR = "ERROR"


class ComparisonEngine:
    """
    Principal orchestrator for manifest comparisons.
    Holds the options for every unit of a batch; the cluster accessor is
    only needed for cluster comparisons.
    """

    def __init__(self, options: Optional[DiffOptions] = None,
                 accessor: Optional[ClusterAccessor] = None):
        self.options = options or DiffOptions()
        self.accessor = accessor
        self.differ = DiffEngine(self.options)

    def compare_files(self, path_a: PathLike, path_b: PathLike) -> Dict[str, Any]:
        """Compares two manifest files."""
        name = f"{path_a} -> {path_b}"
        try:
            diff = self.differ.diff(load_file(path_a), load_file(path_b))
        except KubeDiffError as e:
            return self._unit_error(name, e)
        return self._diff_report(name, diff)

    def compare_directories(self, dir_a: PathLike, dir_b: PathLike) -> List[Dict[str, Any]]:
        """
        Compares every YAML file present in either directory, by file name.
        A file missing on one side is compared against empty input.
        """
        names_a = set(list_yaml_files(dir_a))
        names_b = set(list_yaml_files(dir_b))

        reports = []
        for name in sorted(names_a | names_b):
            try:
                raw_a = load_file(Path(dir_a) / name) if name in names_a else b""
                raw_b = load_file(Path(dir_b) / name) if name in names_b else b""
                diff = self.differ.diff(raw_a, raw_b)
            except KubeDiffError as e:
                reports.append(self._unit_error(name, e))
                continue
            report = self._diff_report(name, diff)
            report["only_in"] = None if name in names_a and name in names_b else ("a" if name in names_a else "b")
            reports.append(report)
        return reports

    def compare_cluster(self, path: PathLike) -> List[Dict[str, Any]]:
        """
        Reconciles a local file, or every YAML file of a directory, against
        the cluster. One report per file.
        """
        if self.accessor is None:
            raise ValueError("cluster comparison requires a ClusterAccessor")

        reconciler = ClusterReconciler(self.accessor, self.options)
        root = Path(path)
        if is_dir(root):
            targets = [(name, root / name) for name in list_yaml_files(root)]
        else:
            targets = [(root.name, root)]

        reports = []
        for name, file_path in targets:
            try:
                records = reconciler.reconcile(load_file(file_path), name)
            except KubeDiffError as e:
                reports.append(self._unit_error(name, e))
                continue
            reports.append(self._cluster_report(name, records))
        return reports

    def generate_summary(self, reports: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Totals for the end-of-run table."""
        total = len(reports)
        return {
            "total_units": total,
            "changed": sum(1 for r in reports if r.get("status") == STATUS_CHANGED),
            "unchanged": sum(1 for r in reports if r.get("status") == STATUS_UNCHANGED),
            "errors": sum(1 for r in reports if r.get("status") == STATUS_ERROR),
            "summary_timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        }

    def _diff_report(self, name: str, diff) -> Dict[str, Any]:
        return {
            "name": name,
            "status": STATUS_CHANGED if diff.has_changes else STATUS_UNCHANGED,
            "success": True,
            "diff": diff,
            "timestamp": time.time(),
        }

    def _cluster_report(self, name: str, records) -> Dict[str, Any]:
        failed = next((r for r in records if r.failed), None)
        if failed is not None:
            status = STATUS_ERROR
        elif any(r.diff is not None and r.diff.has_changes for r in records):
            status = STATUS_CHANGED
        else:
            status = STATUS_UNCHANGED

        report = {
            "name": name,
            "status": status,
            "success": failed is None,
            "resources": records,
            "timestamp": time.time(),
        }
        if failed is not None:
            report["error"] = str(failed.error)
            report["error_kind"] = type(failed.error).__name__
        return report

    def _unit_error(self, name: str, error: Exception) -> Dict[str, Any]:
        logger.error("Error processing %s: %s", name, error)
        return {
            "name": name,
            "status": STATUS_ERROR,
            "success": False,
            "error": str(error),
            "error_kind": type(error).__name__,
            "timestamp": time.time(),
        }
