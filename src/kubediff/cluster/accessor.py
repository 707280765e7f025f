#!/usr/bin/env python3
"""
KUBEDIFF CLUSTER ACCESSOR
-------------------------
The remote capability the reconciler consumes: resolve a Kind to its
collection, read live objects, and run a server-side dry-run apply.

ClusterAccessor is the contract. KubectlAccessor fulfils it through the
kubectl binary, so the active kubeconfig, contexts and auth plugins all
work exactly as they do for kubectl itself.

Author: KubeDiff Team
Date: 2026-10-18
"""

import json
import logging
import subprocess
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from kubediff.core.config import DEFAULT_NAMESPACE, DEFAULT_TIMEOUT, FIELD_MANAGER
from kubediff.core.errors import AccessorError, NotFoundError
from kubediff.core.models import Document, ResourceMapping, from_plain

logger = logging.getLogger("kubediff.accessor")


class ClusterAccessor(ABC):
    """Synchronous access to the authoritative (remote) state."""

    @property
    @abstractmethod
    def default_namespace(self) -> str:
        """Namespace applied to namespaced manifests that do not set one."""

    @abstractmethod
    def resolve(self, api_version: str, kind: str) -> ResourceMapping:
        """Maps (apiVersion, Kind) to its collection and scope."""

    @abstractmethod
    def get(self, mapping: ResourceMapping, name: str, namespace: Optional[str]) -> Document:
        """Returns the live object. Raises NotFoundError when it does not exist."""

    @abstractmethod
    def dry_run_apply(self, mapping: ResourceMapping, name: str, namespace: Optional[str],
                      body: bytes, force: bool = True) -> Document:
        """Returns the object as it would be after a server-side apply of `body`."""


class KubectlAccessor(ClusterAccessor):
    """ClusterAccessor backed by the kubectl command line."""

    def __init__(self, context: Optional[str] = None, kubectl: str = "kubectl",
                 timeout: float = DEFAULT_TIMEOUT, field_manager: str = FIELD_MANAGER):
        self.context = context
        self.kubectl = kubectl
        self.timeout = timeout
        self.field_manager = field_manager
        self._namespace: Optional[str] = None
        # Discovery results per group/version, kept for the accessor's lifetime
        self._discovery: Dict[str, List[Dict[str, Any]]] = {}

    @property
    def default_namespace(self) -> str:
        if self._namespace is None:
            self._namespace = self._context_namespace() or DEFAULT_NAMESPACE
        return self._namespace

    def _context_namespace(self) -> str:
        try:
            out = self._run(["config", "view", "--minify", "-o", "jsonpath={..namespace}"])
        except AccessorError as e:
            logger.debug("No namespace from kubeconfig (%s); using '%s'", e.reason, DEFAULT_NAMESPACE)
            return ""
        return out.strip()

    def resolve(self, api_version: str, kind: str) -> ResourceMapping:
        for entry in self._resources(api_version):
            # Subresources ('deployments/scale') share the parent's kind
            if entry.get("kind") == kind and "/" not in entry.get("name", ""):
                return ResourceMapping(
                    resource=entry["name"],
                    group_version=api_version,
                    kind=kind,
                    namespaced=bool(entry.get("namespaced")),
                )
        raise AccessorError(f"{kind} ({api_version})", "no matching resource served by the cluster")

    def _resources(self, api_version: str) -> List[Dict[str, Any]]:
        if api_version not in self._discovery:
            path = f"/api/{api_version}" if "/" not in api_version else f"/apis/{api_version}"
            try:
                payload = self._run_json(["get", "--raw", path], target=api_version)
            except NotFoundError as e:
                # An unserved API group is a resolution failure, not a missing object
                raise AccessorError(api_version, "API group/version not served by the cluster") from e
            self._discovery[api_version] = list(payload.get("resources", []))
        return self._discovery[api_version]

    def get(self, mapping: ResourceMapping, name: str, namespace: Optional[str]) -> Document:
        args = ["get", mapping.qualified_resource, name, "-o", "json", "--ignore-not-found"]
        args += self._namespace_args(mapping, namespace)
        target = self._target(mapping, name, namespace)

        out = self._run(args, target=target)
        if not out.strip():
            raise NotFoundError(target)
        return from_plain(self._parse(out, target))

    def dry_run_apply(self, mapping: ResourceMapping, name: str, namespace: Optional[str],
                      body: bytes, force: bool = True) -> Document:
        args = [
            "apply", "--server-side", "--dry-run=server",
            f"--field-manager={self.field_manager}",
            "-o", "json", "-f", "-",
        ]
        if force:
            args.append("--force-conflicts")
        args += self._namespace_args(mapping, namespace)
        target = self._target(mapping, name, namespace)

        out = self._run(args, stdin=body, target=target)
        return from_plain(self._parse(out, target))

    @staticmethod
    def _namespace_args(mapping: ResourceMapping, namespace: Optional[str]) -> List[str]:
        if mapping.namespaced and namespace:
            return ["-n", namespace]
        return []

    @staticmethod
    def _target(mapping: ResourceMapping, name: str, namespace: Optional[str]) -> str:
        if mapping.namespaced and namespace:
            return f"{mapping.kind} {namespace}/{name}"
        return f"{mapping.kind} {name}"

    def _run_json(self, args: Sequence[str], target: Optional[str] = None) -> Dict[str, Any]:
        return self._parse(self._run(args, target=target), target)

    @staticmethod
    def _parse(out: str, target: Optional[str]) -> Dict[str, Any]:
        try:
            payload = json.loads(out)
        except json.JSONDecodeError as e:
            raise AccessorError(target, f"unreadable kubectl output: {e}") from e
        if not isinstance(payload, dict):
            raise AccessorError(target, "kubectl returned a non-object payload")
        return payload

    def _run(self, args: Sequence[str], stdin: Optional[bytes] = None,
             target: Optional[str] = None) -> str:
        argv = [self.kubectl]
        if self.context:
            argv += ["--context", self.context]
        argv += list(args)
        logger.debug("Running: %s", " ".join(argv))

        try:
            proc = subprocess.run(
                argv,
                input=stdin,
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise AccessorError(target, f"'{self.kubectl}' executable not found") from e
        except subprocess.TimeoutExpired as e:
            raise AccessorError(target, f"kubectl timed out after {self.timeout}s") from e

        stdout = proc.stdout.decode("utf-8", errors="replace")
        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", errors="replace").strip()
            if "(NotFound)" in stderr:
                raise NotFoundError(target)
            raise AccessorError(target, stderr or f"kubectl exited with status {proc.returncode}")
        return stdout
