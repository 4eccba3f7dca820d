"""Kind specific merge functions.

A merge function copies the fields the operator owns from the desired
manifest into the manifest read from the cluster, in place. It must leave
metadata owned by the API server alone (uid, resourceVersion,
creationTimestamp) and anything another controller fills in.
"""

import copy
from typing import Any, Callable

from .constants import DEPRECATED_LABEL_PREFIXES
from .exceptions import UnsupportedKindError

Manifest = dict[str, Any]
MergeFunc = Callable[[Manifest, Manifest], None]


def _copy_field(desired: Manifest, found: Manifest, field: str) -> None:
    if field in desired:
        found[field] = copy.deepcopy(desired[field])
    else:
        found.pop(field, None)


def _overlay(desired: Any, found: Any) -> Any:
    """
    Lay desired values over a value read from the cluster.

    Mappings are merged key by key, so fields the API server defaults
    (a port's protocol, a Deployment's strategy) survive. Lists of the
    same length are merged item by item; anything else takes the desired
    value.
    """
    if isinstance(desired, dict) and isinstance(found, dict):
        merged = copy.deepcopy(found)
        for key, value in desired.items():
            merged[key] = _overlay(value, found[key]) if key in found else copy.deepcopy(value)
        return merged
    if isinstance(desired, list) and isinstance(found, list) and len(desired) == len(found):
        return [_overlay(item, found_item) for item, found_item in zip(desired, found)]
    return copy.deepcopy(desired)


def _overlay_field(desired: Manifest, found: Manifest, field: str) -> None:
    if field in desired:
        found[field] = _overlay(desired[field], found.get(field))
    else:
        found.pop(field, None)


def keep_existing(desired: Manifest, found: Manifest) -> None:
    """Merge nothing beyond labels and annotations."""


def merge_rules(desired: Manifest, found: Manifest) -> None:
    """Roles and cluster roles."""
    _copy_field(desired, found, "rules")


def merge_binding(desired: Manifest, found: Manifest) -> None:
    """Role bindings and cluster role bindings."""
    _copy_field(desired, found, "subjects")
    _copy_field(desired, found, "roleRef")


def merge_template(desired: Manifest, found: Manifest) -> None:
    _copy_field(desired, found, "objects")
    _copy_field(desired, found, "parameters")


def merge_service(desired: Manifest, found: Manifest) -> None:
    # clusterIP and friends are allocated by the API server
    spec = found.setdefault("spec", {})
    desired_spec = desired.get("spec") or {}
    _overlay_field(desired_spec, spec, "ports")
    _copy_field(desired_spec, spec, "selector")


def merge_deployment(desired: Manifest, found: Manifest) -> None:
    _overlay_field(desired, found, "spec")


def merge_webhooks(desired: Manifest, found: Manifest) -> None:
    """
    Replace the webhooks of a webhook configuration.

    Webhooks are matched by name. A webhook already in the cluster keeps
    the fields the API server defaulted and the caBundle the service CA
    operator injected into its clientConfig.
    """
    existing = {webhook.get("name"): webhook for webhook in found.get("webhooks") or []}
    found["webhooks"] = [
        _overlay(webhook, existing.get(webhook.get("name")))
        for webhook in desired.get("webhooks") or []
    ]


def strip_deprecated_labels(desired: Manifest, found: Manifest) -> None:
    """
    Remove the os, flavor and workload labels of a deprecated template.

    Without them an older template no longer matches the selectors the UI
    uses to offer templates.
    """
    labels = (found.get("metadata") or {}).get("labels") or {}
    for key in list(labels):
        if key.startswith(DEPRECATED_LABEL_PREFIXES):
            del labels[key]


MERGE_FUNCTIONS: dict[str, MergeFunc] = {
    "Namespace": keep_existing,
    "ServiceAccount": keep_existing,
    "Role": merge_rules,
    "ClusterRole": merge_rules,
    "RoleBinding": merge_binding,
    "ClusterRoleBinding": merge_binding,
    "Template": merge_template,
    "Service": merge_service,
    "Deployment": merge_deployment,
    "ValidatingWebhookConfiguration": merge_webhooks,
}


def merge_function_for(kind: str) -> MergeFunc:
    """
    Get the merge function registered for a kind.

    Raises:
        UnsupportedKindError: If the kind has no merge function
    """
    try:
        return MERGE_FUNCTIONS[kind]
    except KeyError:
        raise UnsupportedKindError(kind) from None
