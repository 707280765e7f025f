#!/usr/bin/env python3
"""
KUBEDIFF CLI
------------
Command-line entry point. Translates flags into DiffOptions, picks the
comparison mode (file, directory or cluster) and renders the results.

Author: KubeDiff Team
Date: 2026-10-18
"""

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional, Sequence

from kubediff.cli.formatter import KubeFormatter
from kubediff.cluster.accessor import KubectlAccessor
from kubediff.core.config import DiffOptions
from kubediff.core.engine import STATUS_ERROR, ComparisonEngine
from kubediff.core.errors import KubeDiffError
from kubediff.core.loader import is_dir

VERSION = "kubediff v1.0.0"

logger = logging.getLogger("kubediff.cli")


def _kinds(values: Optional[List[str]]) -> List[str]:
    """Flattens repeated, comma-separated --include/--exclude values."""
    kinds = []
    for value in values or []:
        kinds.extend(part.strip() for part in value.split(",") if part.strip())
    return kinds


class KubeDiffCLI:
    """
    CLI wrapper that translates user commands into Engine actions.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="kubediff",
            description="KubeDiff - semantic diffs for Kubernetes manifests",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="Compares files, directories (-d) or a local manifest against the live cluster (-c).",
        )
        self._setup_args()

    def _setup_args(self):
        self.parser.add_argument("-v", "--version", action="version", version=VERSION)
        self.parser.add_argument("paths", nargs="+", metavar="PATH", help="One path in cluster mode, two otherwise")
        self.parser.add_argument("-d", "--dir", action="store_true", help="Compare two directories")
        self.parser.add_argument("-s", "--secure", action="store_true",
                                 help="Mask sensitive data in Secrets and ConfigMaps")
        self.parser.add_argument("-c", "--cluster-mode", action="store_true",
                                 help="Compare local files with live cluster resources")
        self.parser.add_argument("--kube-context", default=None, help="Kubernetes context to use")
        self.parser.add_argument("-i", "--include", action="append", metavar="KINDS",
                                 help="Only compare these Kinds (case-insensitive, comma-separated)")
        self.parser.add_argument("-e", "--exclude", action="append", metavar="KINDS",
                                 help="Skip these Kinds (case-insensitive, comma-separated)")
        self.parser.add_argument("--no-color", action="store_true", help="Plain, uncolored output")
        self.parser.add_argument("--debug", action="store_true", help="Verbose pipeline logging")

    def run(self, argv: Optional[Sequence[str]] = None) -> int:
        """Primary routing entry point. Returns the process exit code."""
        args = self.parser.parse_args(argv)

        logging.basicConfig(
            level=logging.DEBUG if args.debug else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )

        self.formatter = KubeFormatter(color=not args.no_color)
        options = DiffOptions(
            secure=args.secure,
            include_kinds=_kinds(args.include),
            exclude_kinds=_kinds(args.exclude),
        )

        try:
            if args.cluster_mode:
                if len(args.paths) != 1:
                    self.parser.error("cluster mode requires exactly 1 argument (local path)")
                return self._run_cluster(args.paths[0], options, args.kube_context)

            if len(args.paths) != 2:
                self.parser.error("requires exactly 2 arguments (path1 path2) for file mode")
            path_a, path_b = args.paths

            if args.dir:
                if not (is_dir(path_a) and is_dir(path_b)):
                    self.parser.error("both arguments must be directories when -d is used")
                return self._run_dirs(path_a, path_b, options)

            for path in (path_a, path_b):
                if is_dir(path):
                    self.parser.error(f"{path} is a directory; use -d to diff directories")
            return self._run_files(path_a, path_b, options)

        except KubeDiffError as e:
            self.formatter.display_error("kubediff", str(e))
            return 1

    def _run_files(self, path_a: str, path_b: str, options: DiffOptions) -> int:
        report = ComparisonEngine(options).compare_files(path_a, path_b)
        if report["status"] == STATUS_ERROR:
            self.formatter.display_error(report["name"], report["error"])
            return 1
        self.formatter.display_diff(report["diff"])
        return 0

    def _run_dirs(self, dir_a: str, dir_b: str, options: DiffOptions) -> int:
        engine = ComparisonEngine(options)
        reports = engine.compare_directories(dir_a, dir_b)
        for report in reports:
            if report["status"] == STATUS_ERROR:
                self.formatter.display_error(report["name"], report["error"])
                continue
            self.formatter.display_unit(f"# Diff for {report['name']}:", report["diff"])
        return self._finish(engine, reports)

    def _run_cluster(self, path: str, options: DiffOptions, kube_context: Optional[str]) -> int:
        engine = ComparisonEngine(options, accessor=KubectlAccessor(context=kube_context))
        reports = engine.compare_cluster(path)
        for report in reports:
            for record in report.get("resources", []):
                if record.failed:
                    self.formatter.display_error(f"{report['name']} [{record.identity}]", str(record.error))
                    continue
                identity = record.identity
                header = (
                    f"# Diff for {report['name']} (Cluster vs Local) "
                    f"[{identity.kind} {identity.namespace}/{identity.name}]:"
                )
                self.formatter.display_unit(header, record.diff)
            if "resources" not in report:
                self.formatter.display_error(report["name"], report["error"])
        return self._finish(engine, reports)

    def _finish(self, engine: ComparisonEngine, reports: List[Dict[str, Any]]) -> int:
        self.formatter.print_final_table(reports, engine.generate_summary(reports))
        return 1 if any(r["status"] == STATUS_ERROR for r in reports) else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Application entry point with interrupt handling."""
    try:
        return KubeDiffCLI().run(argv)
    except KeyboardInterrupt:
        print("\nTerminated by user.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
