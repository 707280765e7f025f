import json
import subprocess

import pytest

from kubediff.cluster import accessor as accessor_module
from kubediff.cluster.accessor import KubectlAccessor
from kubediff.core.errors import AccessorError, NotFoundError
from kubediff.core.models import ResourceMapping

CORE_V1 = {
    "kind": "APIResourceList",
    "groupVersion": "v1",
    "resources": [
        {"name": "namespaces", "kind": "Namespace", "namespaced": False},
        {"name": "services", "kind": "Service", "namespaced": True},
        {"name": "services/status", "kind": "Service", "namespaced": True},
    ],
}

APPS_V1 = {
    "kind": "APIResourceList",
    "groupVersion": "apps/v1",
    "resources": [
        {"name": "deployments/scale", "kind": "Scale", "namespaced": True},
        {"name": "deployments", "kind": "Deployment", "namespaced": True},
    ],
}

DEPLOYMENTS = ResourceMapping("deployments", "apps/v1", "Deployment", True)
NAMESPACES = ResourceMapping("namespaces", "v1", "Namespace", False)


class FakeKubectl:
    """Stands in for subprocess.run; replies are matched on the kubectl subcommand."""

    def __init__(self):
        self.calls = []
        self.replies = {}

    def reply(self, verb, stdout=b"", stderr=b"", returncode=0):
        if isinstance(stdout, dict):
            stdout = json.dumps(stdout).encode()
        self.replies[verb] = (stdout, stderr, returncode)

    def __call__(self, argv, input=None, capture_output=False, timeout=None, check=False):
        self.calls.append({"argv": argv, "input": input, "timeout": timeout})
        args = argv[3:] if argv[1] == "--context" else argv[1:]
        verb = f"raw {args[2]}" if args[:2] == ["get", "--raw"] else args[0]
        stdout, stderr, returncode = self.replies.get(verb, (b"", b"", 0))
        return subprocess.CompletedProcess(argv, returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def kubectl(monkeypatch):
    fake = FakeKubectl()
    monkeypatch.setattr(accessor_module.subprocess, "run", fake)
    return fake


def test_resolve_core_group_uses_api_path(kubectl):
    kubectl.reply("raw /api/v1", CORE_V1)
    mapping = KubectlAccessor().resolve("v1", "Service")

    assert mapping == ResourceMapping("services", "v1", "Service", True)
    assert mapping.qualified_resource == "services.v1"
    assert kubectl.calls[0]["argv"] == ["kubectl", "get", "--raw", "/api/v1"]


def test_resolve_named_group_skips_subresources(kubectl):
    kubectl.reply("raw /apis/apps/v1", APPS_V1)
    mapping = KubectlAccessor().resolve("apps/v1", "Deployment")

    assert mapping.resource == "deployments"
    assert mapping.qualified_resource == "deployments.v1.apps"


def test_discovery_is_cached_per_group_version(kubectl):
    kubectl.reply("raw /api/v1", CORE_V1)
    acc = KubectlAccessor()
    acc.resolve("v1", "Service")
    acc.resolve("v1", "Namespace")
    assert len(kubectl.calls) == 1


def test_unknown_kind_is_an_accessor_error(kubectl):
    kubectl.reply("raw /api/v1", CORE_V1)
    with pytest.raises(AccessorError) as exc:
        KubectlAccessor().resolve("v1", "Widget")
    assert not isinstance(exc.value, NotFoundError)


def test_unserved_group_is_not_mistaken_for_a_missing_object(kubectl):
    kubectl.reply("raw /apis/example.com/v1",
                  stderr=b"Error from server (NotFound): the server could not find the requested resource",
                  returncode=1)
    with pytest.raises(AccessorError) as exc:
        KubectlAccessor().resolve("example.com/v1", "Widget")
    assert not isinstance(exc.value, NotFoundError)


def test_get_returns_live_object(kubectl):
    kubectl.reply("get", {"kind": "Deployment", "metadata": {"name": "web", "namespace": "shop"}})
    live = KubectlAccessor(context="staging").get(DEPLOYMENTS, "web", "shop")

    assert live["metadata"]["name"] == "web"
    assert kubectl.calls[0]["argv"] == [
        "kubectl", "--context", "staging", "get", "deployments.v1.apps", "web",
        "-o", "json", "--ignore-not-found", "-n", "shop",
    ]


def test_get_of_absent_object_raises_not_found(kubectl):
    kubectl.reply("get", b"")
    with pytest.raises(NotFoundError):
        KubectlAccessor().get(DEPLOYMENTS, "web", "shop")


def test_cluster_scoped_get_has_no_namespace(kubectl):
    kubectl.reply("get", {"kind": "Namespace", "metadata": {"name": "shop"}})
    KubectlAccessor().get(NAMESPACES, "shop", "default")
    assert "-n" not in kubectl.calls[0]["argv"]


def test_dry_run_apply_is_server_side_and_forced(kubectl):
    kubectl.reply("apply", {"kind": "Deployment", "metadata": {"name": "web"}, "spec": {"replicas": 3}})
    body = b'{"kind": "Deployment"}'

    predicted = KubectlAccessor(timeout=5).dry_run_apply(DEPLOYMENTS, "web", "shop", body, force=True)

    call = kubectl.calls[0]
    assert predicted["spec"]["replicas"] == 3
    assert call["input"] == body
    assert call["timeout"] == 5
    for flag in ("--server-side", "--dry-run=server", "--force-conflicts",
                 "--field-manager=kubediff", "-f", "-"):
        assert flag in call["argv"]
    assert call["argv"][-2:] == ["-n", "shop"]


def test_non_zero_exit_is_an_accessor_error(kubectl):
    kubectl.reply("apply", stderr=b"error: Apply failed with 1 conflict", returncode=1)
    with pytest.raises(AccessorError) as exc:
        KubectlAccessor().dry_run_apply(DEPLOYMENTS, "web", "shop", b"{}")
    assert "conflict" in exc.value.reason


def test_unreadable_output_is_an_accessor_error(kubectl):
    kubectl.reply("get", b"<html>proxy error</html>")
    with pytest.raises(AccessorError):
        KubectlAccessor().get(DEPLOYMENTS, "web", "shop")


def test_missing_binary_is_an_accessor_error(monkeypatch):
    def missing(*args, **kwargs):
        raise FileNotFoundError("kubectl")
    monkeypatch.setattr(accessor_module.subprocess, "run", missing)

    with pytest.raises(AccessorError) as exc:
        KubectlAccessor().get(DEPLOYMENTS, "web", "shop")
    assert "not found" in exc.value.reason


def test_timeout_is_an_accessor_error(monkeypatch):
    def hang(argv, **kwargs):
        raise subprocess.TimeoutExpired(argv, kwargs.get("timeout"))
    monkeypatch.setattr(accessor_module.subprocess, "run", hang)

    with pytest.raises(AccessorError) as exc:
        KubectlAccessor(timeout=1).get(DEPLOYMENTS, "web", "shop")
    assert "timed out" in exc.value.reason


@pytest.mark.parametrize("stdout, expected", [
    (b"team-a", "team-a"),
    (b"", "default"),
])
def test_default_namespace_comes_from_kubeconfig(kubectl, stdout, expected):
    kubectl.reply("config", stdout)
    assert KubectlAccessor().default_namespace == expected


def test_default_namespace_falls_back_when_kubeconfig_fails(kubectl):
    kubectl.reply("config", stderr=b"error: no configuration", returncode=1)
    assert KubectlAccessor().default_namespace == "default"
