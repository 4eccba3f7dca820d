"""Create-or-update reconciliation of single objects."""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .constants import (
    APP_COMPONENT_LABEL,
    APP_MANAGED_BY_LABEL,
    APP_NAME_LABEL,
    MANAGED_BY,
    SYSTEM_METADATA_FIELDS,
)
from .merge import MergeFunc, merge_function_for
from .models import DesiredObject, ObjectKey, OperationResult, ResourceStatus
from .store import ResourceStore

logger = logging.getLogger(__name__)


@dataclass
class Request:
    """
    Inputs of one reconciliation pass.

    Attributes:
        store: Store for the target cluster
        namespace: Namespace the operator installs its workloads into
        templates_namespace: Namespace holding the common templates
        validator_replicas: Replica count of the template validator
    """

    store: ResourceStore
    namespace: str
    templates_namespace: str
    validator_replicas: int = 2


def app_labels(name: str, component: str) -> dict[str, str]:
    """Labels marking an object as owned by an operand."""
    return {
        APP_NAME_LABEL: name,
        APP_COMPONENT_LABEL: component,
        APP_MANAGED_BY_LABEL: MANAGED_BY,
    }


@dataclass(frozen=True)
class ReconcileConfig:
    """
    What to reconcile and how.

    Attributes:
        desired: Desired state of the object
        labels: Ownership labels asserted on every create and update
        merge_fn: Copies owned fields from the desired manifest into the
            manifest found in the cluster
    """

    desired: DesiredObject
    labels: dict[str, str] = field(default_factory=dict)
    merge_fn: Optional[MergeFunc] = None

    @classmethod
    def for_object(
        cls,
        desired: DesiredObject,
        labels: dict[str, str],
        merge_fn: Optional[MergeFunc] = None,
    ) -> "ReconcileConfig":
        """Build a config, picking the merge function registered for the kind."""
        return cls(
            desired=desired,
            labels=dict(labels),
            merge_fn=merge_fn or merge_function_for(desired.kind),
        )


@dataclass(frozen=True)
class ReconcileOperation:
    """One step of a reconciliation run, bound to the object it touches."""

    key: ObjectKey
    func: Callable[[Request], ResourceStatus]

    def __call__(self, request: Request) -> ResourceStatus:
        return self.func(request)


def _apply_labels(manifest: dict[str, Any], labels: dict[str, str]) -> None:
    if not labels:
        return
    metadata = manifest.setdefault("metadata", {})
    metadata["labels"] = {**(metadata.get("labels") or {}), **labels}


def _merge_metadata(desired: dict[str, Any], found: dict[str, Any]) -> None:
    desired_metadata = desired.get("metadata") or {}
    metadata = found.setdefault("metadata", {})
    for field_name in ("labels", "annotations"):
        values = desired_metadata.get(field_name)
        if values:
            metadata[field_name] = {**(metadata.get(field_name) or {}), **values}


def reconcile(request: Request, config: ReconcileConfig) -> ResourceStatus:
    """
    Create an object, or bring the existing one in line with the desired state.

    The object is always read fresh from the store, and written back with
    the resourceVersion it was read at, so a concurrent change makes the
    write fail instead of being overwritten.

    Args:
        request: Reconciliation request
        config: Object, labels and merge function

    Returns:
        Status with Created, Updated or Unchanged

    Raises:
        ApiException: If reading or writing the object fails
        UnsupportedKindError: If the config has no merge function and none
            is registered for the kind
    """
    key = config.desired.key
    merge_fn = config.merge_fn or merge_function_for(key.kind)

    desired = config.desired.to_manifest()
    _apply_labels(desired, config.labels)

    found = request.store.get(key)
    if found is None:
        metadata = desired.setdefault("metadata", {})
        for field_name in SYSTEM_METADATA_FIELDS:
            metadata.pop(field_name, None)
        request.store.create(desired)
        logger.info(f"Created {key}")
        return ResourceStatus.for_key(key, OperationResult.CREATED)

    original = copy.deepcopy(found)
    _merge_metadata(desired, found)
    merge_fn(desired, found)
    # Merge functions may rewrite labels; ownership must survive them
    _apply_labels(found, config.labels)

    if found == original:
        logger.debug(f"{key} is up to date")
        return ResourceStatus.for_key(key, OperationResult.UNCHANGED)

    request.store.replace(found)
    logger.info(f"Updated {key}")
    return ResourceStatus.for_key(key, OperationResult.UPDATED)


def operation(config: ReconcileConfig) -> ReconcileOperation:
    """Bind a config into an operation for the status aggregator."""

    def _reconcile(request: Request) -> ResourceStatus:
        return reconcile(request, config)

    return ReconcileOperation(key=config.desired.key, func=_reconcile)
