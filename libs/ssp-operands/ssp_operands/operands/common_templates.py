"""Common templates operand.

Deploys the golden images namespace with its RBAC, the versioned bundle of
VM templates, and deprecates templates left by older versions.
"""

import logging

from ..bundle import BundleCache
from ..cleanup import delete_all
from ..constants import (
    APP_COMPONENT_TEMPLATING,
    COMMON_TEMPLATES_COMPONENT,
    COMMON_TEMPLATES_VERSION,
    GOLDEN_IMAGES_NAMESPACE,
    TEMPLATE_API_VERSION,
    TEMPLATE_KIND,
)
from ..merge import merge_template
from ..migration import plan_migration
from ..models import DesiredObject, ResourceStatus
from ..reconcile import ReconcileConfig, ReconcileOperation, Request, operation
from ..status import collect_resource_status
from .base import Operand

logger = logging.getLogger(__name__)

VIEW_ROLE_NAME = "os-images.kubevirt.io:view"
EDIT_ROLE_NAME = "os-images.kubevirt.io:edit"

_RBAC_API_VERSION = "rbac.authorization.k8s.io/v1"
_CDI_GROUP = "cdi.kubevirt.io"


def new_golden_images_namespace(name: str) -> DesiredObject:
    return DesiredObject.from_manifest({
        "apiVersion": "v1",
        "kind": "Namespace",
        "metadata": {"name": name},
    })


def new_view_role(namespace: str) -> DesiredObject:
    return DesiredObject.from_manifest({
        "apiVersion": _RBAC_API_VERSION,
        "kind": "Role",
        "metadata": {"name": VIEW_ROLE_NAME, "namespace": namespace},
        "rules": [
            {
                "apiGroups": [_CDI_GROUP],
                "resources": ["datavolumes"],
                "verbs": ["get", "list", "watch"],
            },
            {
                "apiGroups": [_CDI_GROUP],
                "resources": ["datavolumes/source"],
                "verbs": ["create"],
            },
            {
                "apiGroups": [""],
                "resources": ["persistentvolumeclaims"],
                "verbs": ["get", "list", "watch"],
            },
        ],
    })


def new_view_role_binding(namespace: str) -> DesiredObject:
    return DesiredObject.from_manifest({
        "apiVersion": _RBAC_API_VERSION,
        "kind": "RoleBinding",
        "metadata": {"name": VIEW_ROLE_NAME, "namespace": namespace},
        "roleRef": {
            "kind": "Role",
            "name": VIEW_ROLE_NAME,
            "apiGroup": "rbac.authorization.k8s.io",
        },
        "subjects": [
            {
                "kind": "Group",
                "name": "system:authenticated",
                "apiGroup": "rbac.authorization.k8s.io",
            }
        ],
    })


def new_edit_role() -> DesiredObject:
    return DesiredObject.from_manifest({
        "apiVersion": _RBAC_API_VERSION,
        "kind": "ClusterRole",
        "metadata": {"name": EDIT_ROLE_NAME},
        "rules": [
            {
                "apiGroups": [_CDI_GROUP],
                "resources": ["datavolumes"],
                "verbs": ["get", "list", "watch", "create", "update", "patch", "delete"],
            },
            {
                "apiGroups": [_CDI_GROUP],
                "resources": ["datavolumes/source"],
                "verbs": ["create"],
            },
            {
                "apiGroups": [""],
                "resources": ["persistentvolumeclaims"],
                "verbs": ["get", "list", "watch", "create", "update", "patch", "delete"],
            },
            {
                "apiGroups": [""],
                "resources": ["persistentvolumeclaims/status"],
                "verbs": ["get", "list", "watch"],
            },
        ],
    })


class CommonTemplatesOperand(Operand):
    """Reconciles the common templates and the golden images namespace."""

    name = COMMON_TEMPLATES_COMPONENT
    component = APP_COMPONENT_TEMPLATING

    def __init__(self, bundle: BundleCache, version: str = COMMON_TEMPLATES_VERSION):
        """
        Initialize the operand.

        Args:
            bundle: Cache of the templates bundle, owned by this operand
            version: Common templates version deployed by this operator
        """
        self.bundle = bundle
        self.version = version

    def watch_types(self) -> list[tuple[str, str]]:
        return [
            (_RBAC_API_VERSION, "ClusterRole"),
            (_RBAC_API_VERSION, "Role"),
            (_RBAC_API_VERSION, "RoleBinding"),
            ("v1", "Namespace"),
            (TEMPLATE_API_VERSION, TEMPLATE_KIND),
        ]

    def _static_objects(self) -> list[DesiredObject]:
        return [
            new_golden_images_namespace(GOLDEN_IMAGES_NAMESPACE),
            new_view_role(GOLDEN_IMAGES_NAMESPACE),
            new_view_role_binding(GOLDEN_IMAGES_NAMESPACE),
            new_edit_role(),
        ]

    def _templates(self, request: Request) -> list[DesiredObject]:
        return [
            template.with_namespace(request.templates_namespace)
            for template in self.bundle.load(self.version)
        ]

    def operations(self, request: Request) -> list[ReconcileOperation]:
        """
        Build the operations of one pass, in the order they must run.

        Raises:
            ApiException: If listing older templates fails
            BundleError: If the templates bundle cannot be loaded
        """
        operations = [
            operation(ReconcileConfig.for_object(obj, self.labels))
            for obj in self._static_objects()
        ]
        operations.extend(plan_migration(request, self.version, self.labels))
        operations.extend(
            operation(ReconcileConfig.for_object(template, self.labels, merge_fn=merge_template))
            for template in self._templates(request)
        )
        return operations

    def reconcile(self, request: Request) -> list[ResourceStatus]:
        return collect_resource_status(request, self.operations(request))

    def cleanup(self, request: Request) -> None:
        objects = self._static_objects()
        objects.extend(
            template.with_namespace(request.templates_namespace)
            for template in self.bundle.cached()
        )
        logger.info(f"Deleting {len(objects)} {self.name} objects")
        delete_all(request, objects)
