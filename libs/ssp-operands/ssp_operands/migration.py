"""Migration of templates deployed by older versions."""

import copy
import logging
from typing import Any

from .constants import (
    TEMPLATE_API_VERSION,
    TEMPLATE_DEPRECATED_ANNOTATION,
    TEMPLATE_KIND,
    TEMPLATE_TYPE_BASE,
    TEMPLATE_TYPE_LABEL,
    TEMPLATE_VERSION_LABEL,
)
from .merge import strip_deprecated_labels
from .models import DesiredObject
from .reconcile import ReconcileConfig, ReconcileOperation, Request, operation
from .selectors import Operator, Selector, requirement

logger = logging.getLogger(__name__)


def older_templates_selector(version: str) -> Selector:
    """
    Select base templates labeled with any version but the given one.

    Raises:
        AssertionError: If the selector cannot be built. The keys are
            constants, so this only happens on a programming error.
    """
    try:
        return Selector().add(
            requirement(TEMPLATE_TYPE_LABEL, Operator.EQUALS, TEMPLATE_TYPE_BASE),
            requirement(TEMPLATE_VERSION_LABEL, Operator.NOT_EQUALS, version),
        )
    except ValueError as e:
        raise AssertionError(
            f"Failed creating label selector for '{TEMPLATE_TYPE_LABEL}={TEMPLATE_TYPE_BASE}' "
            f"and '{TEMPLATE_VERSION_LABEL}!={version}': {e}"
        ) from e


def deprecate_operation(template: dict[str, Any], labels: dict[str, str]) -> ReconcileOperation:
    """
    Build the operation deprecating one older template.

    The operation marks the template deprecated and drops its os, flavor
    and workload labels. The labels are dropped from the desired manifest
    as well, so a template deleted meanwhile is not recreated with them.
    It only refers to the template passed in here.
    """
    manifest = copy.deepcopy(template)
    strip_deprecated_labels({}, manifest)
    desired = DesiredObject.from_manifest(manifest).with_annotations(
        {TEMPLATE_DEPRECATED_ANNOTATION: "true"}
    )
    return operation(
        ReconcileConfig.for_object(desired, labels, merge_fn=strip_deprecated_labels)
    )


def plan_migration(
    request: Request, version: str, labels: dict[str, str]
) -> list[ReconcileOperation]:
    """
    Plan the deprecation of templates left over from older versions.

    Lists the base templates in the templates namespace whose version label
    differs from the current version. Nothing is written here; the returned
    operations do the writes when run.

    Args:
        request: Reconciliation request
        version: Current common templates version
        labels: Ownership labels of the operand

    Returns:
        One operation per older template, empty on a fresh install

    Raises:
        ApiException: If listing the templates fails
    """
    selector = older_templates_selector(version)
    templates = request.store.list(
        TEMPLATE_API_VERSION,
        TEMPLATE_KIND,
        namespace=request.templates_namespace,
        label_selector=str(selector),
    )
    if templates:
        logger.info(
            f"Found {len(templates)} templates older than {version} "
            f"in namespace {request.templates_namespace}"
        )
    return [deprecate_operation(template, labels) for template in templates]
