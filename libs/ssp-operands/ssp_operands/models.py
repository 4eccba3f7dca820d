"""Resource models for the SSP operands."""

import copy
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OperationResult(str, Enum):
    """Outcome of reconciling a single object."""

    CREATED = "Created"
    UPDATED = "Updated"
    UNCHANGED = "Unchanged"


class ClusterConfig(BaseModel):
    """Cluster configuration."""

    name: str = "default"
    kubeconfig_path: Optional[str] = None
    kubeconfig_data: Optional[str] = None  # Base64 encoded kubeconfig
    context: Optional[str] = None  # Specific context to use


class ObjectKey(BaseModel):
    """Identity of an object in the cluster."""

    model_config = ConfigDict(frozen=True)

    api_version: str
    kind: str
    name: str
    namespace: Optional[str] = None  # None for cluster scoped objects

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.kind} {self.namespace}/{self.name}"
        return f"{self.kind} {self.name}"


class DesiredObject(BaseModel):
    """
    Immutable description of an object the operator wants in the cluster.

    The manifest is never handed out directly; callers get deep copies so a
    merge or a create cannot change the desired state of a later pass.
    """

    model_config = ConfigDict(frozen=True)

    manifest: dict[str, Any]

    @field_validator("manifest")
    @classmethod
    def _check_manifest(cls, manifest: dict[str, Any]) -> dict[str, Any]:
        for field in ("apiVersion", "kind"):
            if not manifest.get(field):
                raise ValueError(f"manifest is missing {field}")
        if not (manifest.get("metadata") or {}).get("name"):
            raise ValueError("manifest is missing metadata.name")
        return copy.deepcopy(manifest)

    @classmethod
    def from_manifest(cls, manifest: dict[str, Any]) -> "DesiredObject":
        """Build a desired object from a Kubernetes manifest."""
        return cls(manifest=manifest)

    @property
    def kind(self) -> str:
        return self.manifest["kind"]

    @property
    def name(self) -> str:
        return self.manifest["metadata"]["name"]

    @property
    def namespace(self) -> Optional[str]:
        return self.manifest["metadata"].get("namespace") or None

    @property
    def key(self) -> ObjectKey:
        return ObjectKey(
            api_version=self.manifest["apiVersion"],
            kind=self.kind,
            name=self.name,
            namespace=self.namespace,
        )

    @property
    def labels(self) -> dict[str, str]:
        return dict(self.manifest["metadata"].get("labels") or {})

    @property
    def annotations(self) -> dict[str, str]:
        return dict(self.manifest["metadata"].get("annotations") or {})

    def to_manifest(self) -> dict[str, Any]:
        """Return a deep copy of the manifest."""
        return copy.deepcopy(self.manifest)

    def with_namespace(self, namespace: Optional[str]) -> "DesiredObject":
        """Return a copy of this object placed in another namespace."""
        manifest = self.to_manifest()
        if namespace:
            manifest["metadata"]["namespace"] = namespace
        else:
            manifest["metadata"].pop("namespace", None)
        return DesiredObject(manifest=manifest)

    def with_annotations(self, annotations: dict[str, str]) -> "DesiredObject":
        """Return a copy of this object with extra annotations."""
        manifest = self.to_manifest()
        metadata = manifest["metadata"]
        metadata["annotations"] = {**(metadata.get("annotations") or {}), **annotations}
        return DesiredObject(manifest=manifest)


class ResourceStatus(BaseModel):
    """Outcome of one reconciliation operation."""

    kind: str
    name: str
    namespace: Optional[str] = None
    result: Optional[OperationResult] = None
    error: Optional[str] = None

    @classmethod
    def for_key(cls, key: ObjectKey, result: OperationResult) -> "ResourceStatus":
        return cls(kind=key.kind, name=key.name, namespace=key.namespace, result=result)

    @classmethod
    def from_error(cls, key: ObjectKey, error: Exception) -> "ResourceStatus":
        return cls(kind=key.kind, name=key.name, namespace=key.namespace, error=str(error))

    @property
    def failed(self) -> bool:
        return self.error is not None


class StatusSummary(BaseModel):
    """Counts of reconciliation outcomes, for logging."""

    created: int = 0
    updated: int = 0
    unchanged: int = 0
    failed: int = 0
    failures: list[str] = Field(default_factory=list)

    @classmethod
    def from_statuses(cls, statuses: list[ResourceStatus]) -> "StatusSummary":
        summary = cls()
        for status in statuses:
            if status.failed:
                summary.failed += 1
                summary.failures.append(f"{status.kind} {status.name}: {status.error}")
            elif status.result == OperationResult.CREATED:
                summary.created += 1
            elif status.result == OperationResult.UPDATED:
                summary.updated += 1
            else:
                summary.unchanged += 1
        return summary
