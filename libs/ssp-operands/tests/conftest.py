"""Pytest configuration and fixtures for SSP operand tests."""

import copy
from typing import Any, Callable, Optional
from unittest.mock import MagicMock

import pytest
from kubernetes.client.exceptions import ApiException
from kubernetes.dynamic import DynamicClient

from ssp_operands import DesiredObject, ObjectKey, Request
from ssp_operands.store import key_of


def _parse_selector(label_selector: Optional[str]) -> list[tuple[str, str, str]]:
    """Parse the equality based selectors the operands use."""
    requirements = []
    for part in (label_selector or "").split(","):
        if not part:
            continue
        if "!=" in part:
            key, value = part.split("!=", 1)
            requirements.append((key, "!=", value))
        else:
            key, value = part.split("=", 1)
            requirements.append((key, "=", value))
    return requirements


def _matches(labels: dict[str, str], requirements: list[tuple[str, str, str]]) -> bool:
    for key, op, value in requirements:
        if op == "=" and labels.get(key) != value:
            return False
        if op == "!=" and labels.get(key) == value:
            return False
    return True


class FakeStore:
    """
    In-memory stand-in for ResourceStore.

    Assigns resourceVersions like the API server and rejects replaces
    carrying a stale one with a 409.
    """

    def __init__(self):
        self.objects: dict[ObjectKey, dict[str, Any]] = {}
        self.calls: list[tuple[str, Any]] = []
        self.errors: dict[tuple[str, str], Exception] = {}
        # Stands in for API server defaulting, applied to every create and replace
        self.defaulter: Optional[Callable[[dict[str, Any]], None]] = None
        self._revision = 0

    def _next_version(self) -> str:
        self._revision += 1
        return str(self._revision)

    def _maybe_fail(self, method: str, name: str) -> None:
        error = self.errors.get((method, name))
        if error is not None:
            raise error

    def _write(self, manifest: dict[str, Any]) -> dict[str, Any]:
        stored = copy.deepcopy(manifest)
        if self.defaulter is not None:
            self.defaulter(stored)
        return self.put(stored)

    def put(self, manifest: dict[str, Any]) -> dict[str, Any]:
        """Seed an object as if another client created it."""
        stored = copy.deepcopy(manifest)
        metadata = stored.setdefault("metadata", {})
        metadata["resourceVersion"] = self._next_version()
        metadata.setdefault("uid", f"uid-{metadata['name']}")
        self.objects[key_of(stored)] = stored
        return copy.deepcopy(stored)

    def writes(self) -> list[tuple[str, Any]]:
        return [call for call in self.calls if call[0] in ("create", "replace", "delete")]

    def get(self, key: ObjectKey) -> Optional[dict[str, Any]]:
        self.calls.append(("get", key))
        self._maybe_fail("get", key.name)
        found = self.objects.get(key)
        return copy.deepcopy(found) if found is not None else None

    def create(self, manifest: dict[str, Any]) -> dict[str, Any]:
        key = key_of(manifest)
        self.calls.append(("create", key))
        self._maybe_fail("create", key.name)
        if key in self.objects:
            raise ApiException(status=409, reason="AlreadyExists")
        if manifest["metadata"].get("resourceVersion"):
            raise ApiException(status=400, reason="resourceVersion should not be set")
        return self._write(manifest)

    def replace(self, manifest: dict[str, Any]) -> dict[str, Any]:
        key = key_of(manifest)
        self.calls.append(("replace", key))
        self._maybe_fail("replace", key.name)
        current = self.objects.get(key)
        if current is None:
            raise ApiException(status=404, reason="NotFound")
        if manifest["metadata"].get("resourceVersion") != current["metadata"]["resourceVersion"]:
            raise ApiException(status=409, reason="Conflict")
        return self._write(manifest)

    def delete(self, key: ObjectKey) -> bool:
        self.calls.append(("delete", key))
        self._maybe_fail("delete", key.name)
        return self.objects.pop(key, None) is not None

    def list(
        self,
        api_version: str,
        kind: str,
        namespace: Optional[str] = None,
        label_selector: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        self.calls.append(("list", (kind, namespace, label_selector)))
        requirements = _parse_selector(label_selector)
        return [
            copy.deepcopy(obj)
            for key, obj in self.objects.items()
            if key.api_version == api_version
            and key.kind == kind
            and (namespace is None or key.namespace == namespace)
            and _matches(obj["metadata"].get("labels") or {}, requirements)
        ]


@pytest.fixture
def fake_store():
    """In-memory store."""
    return FakeStore()


@pytest.fixture
def reconcile_request(fake_store):
    """Reconciliation request against the in-memory store."""
    return Request(
        store=fake_store,
        namespace="kubevirt",
        templates_namespace="openshift",
        validator_replicas=2,
    )


@pytest.fixture
def mock_dynamic_client():
    """Mock dynamic client returning the same resource for every kind."""
    client = MagicMock(spec=DynamicClient)
    resource = MagicMock()
    client.resources = MagicMock()
    client.resources.get.return_value = resource
    return client


@pytest.fixture
def sample_role():
    """Sample namespaced role."""
    return DesiredObject.from_manifest({
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "Role",
        "metadata": {"name": "test-role", "namespace": "test-ns"},
        "rules": [
            {"apiGroups": [""], "resources": ["pods"], "verbs": ["get", "list"]},
        ],
    })


def make_template(
    name: str,
    version: str,
    namespace: str = "openshift",
    template_type: str = "base",
) -> dict[str, Any]:
    """Build a template manifest labeled like the common templates."""
    return {
        "apiVersion": "template.openshift.io/v1",
        "kind": "Template",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "labels": {
                "template.kubevirt.io/type": template_type,
                "template.kubevirt.io/version": version,
                f"os.template.kubevirt.io/{name}": "true",
                "flavor.template.kubevirt.io/small": "true",
                "workload.template.kubevirt.io/server": "true",
            },
        },
        "objects": [{"kind": "VirtualMachine", "metadata": {"name": "${NAME}"}}],
        "parameters": [{"name": "NAME", "generate": "expression"}],
    }


@pytest.fixture
def template_factory():
    """Factory for template manifests."""
    return make_template
