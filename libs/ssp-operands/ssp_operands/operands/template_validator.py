"""Template validator operand.

Deploys the admission webhook that validates VirtualMachines against the
template they were created from.
"""

import logging

from ..cleanup import delete_all
from ..constants import APP_COMPONENT_TEMPLATING
from ..models import DesiredObject, ResourceStatus
from ..reconcile import ReconcileConfig, ReconcileOperation, Request, operation
from ..status import collect_resource_status
from .base import Operand

logger = logging.getLogger(__name__)

CONTAINER_PORT = 8443
KUBEVIRT_IO = "kubevirt.io"
SECRET_NAME = "virt-template-validator-certs"
VIRT_TEMPLATE_VALIDATOR = "virt-template-validator"
CLUSTER_ROLE_NAME = "template:view"
CLUSTER_ROLE_BINDING_NAME = "template-validator"
WEBHOOK_NAME = VIRT_TEMPLATE_VALIDATOR
SERVICE_ACCOUNT_NAME = "template-validator"
SERVICE_NAME = VIRT_TEMPLATE_VALIDATOR
DEPLOYMENT_NAME = VIRT_TEMPLATE_VALIDATOR

KUBEVIRT_WEBHOOK_VERSIONS = ("v1alpha3", "v1")

_RBAC_API_VERSION = "rbac.authorization.k8s.io/v1"


def common_labels() -> dict[str, str]:
    return {KUBEVIRT_IO: VIRT_TEMPLATE_VALIDATOR}


def new_cluster_role() -> DesiredObject:
    return DesiredObject.from_manifest({
        "apiVersion": _RBAC_API_VERSION,
        "kind": "ClusterRole",
        "metadata": {"name": CLUSTER_ROLE_NAME, "labels": {KUBEVIRT_IO: ""}},
        "rules": [
            {
                "apiGroups": ["template.openshift.io"],
                "resources": ["templates"],
                "verbs": ["get", "list", "watch"],
            }
        ],
    })


def new_service_account(namespace: str) -> DesiredObject:
    return DesiredObject.from_manifest({
        "apiVersion": "v1",
        "kind": "ServiceAccount",
        "metadata": {
            "name": SERVICE_ACCOUNT_NAME,
            "namespace": namespace,
            "labels": common_labels(),
        },
    })


def new_cluster_role_binding(namespace: str) -> DesiredObject:
    return DesiredObject.from_manifest({
        "apiVersion": _RBAC_API_VERSION,
        "kind": "ClusterRoleBinding",
        "metadata": {"name": CLUSTER_ROLE_BINDING_NAME, "labels": common_labels()},
        "roleRef": {
            "kind": "ClusterRole",
            "name": CLUSTER_ROLE_NAME,
            "apiGroup": "rbac.authorization.k8s.io",
        },
        "subjects": [
            {
                "kind": "ServiceAccount",
                "name": SERVICE_ACCOUNT_NAME,
                "namespace": namespace,
            }
        ],
    })


def new_service(namespace: str) -> DesiredObject:
    return DesiredObject.from_manifest({
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {
            "name": SERVICE_NAME,
            "namespace": namespace,
            "labels": common_labels(),
            "annotations": {
                "service.beta.openshift.io/serving-cert-secret-name": SECRET_NAME,
            },
        },
        "spec": {
            "ports": [{"name": "webhook", "port": 443, "targetPort": CONTAINER_PORT}],
            "selector": common_labels(),
        },
    })


def new_deployment(namespace: str, replicas: int, image: str) -> DesiredObject:
    volume_name = "tls"
    cert_mount_path = "/etc/webhook/certs"

    return DesiredObject.from_manifest({
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {
            "name": DEPLOYMENT_NAME,
            "namespace": namespace,
            "labels": {"name": VIRT_TEMPLATE_VALIDATOR},
        },
        "spec": {
            "replicas": replicas,
            "selector": {"matchLabels": common_labels()},
            "template": {
                "metadata": {"name": VIRT_TEMPLATE_VALIDATOR, "labels": common_labels()},
                "spec": {
                    "serviceAccountName": SERVICE_ACCOUNT_NAME,
                    "containers": [
                        {
                            "name": "webhook",
                            "image": image,
                            "imagePullPolicy": "Always",
                            "args": [
                                "-v=2",
                                f"--port={CONTAINER_PORT}",
                                f"--cert-dir={cert_mount_path}",
                            ],
                            "volumeMounts": [
                                {
                                    "name": volume_name,
                                    "mountPath": cert_mount_path,
                                    "readOnly": True,
                                }
                            ],
                            "securityContext": {"readOnlyRootFilesystem": True},
                            "ports": [
                                {
                                    "name": "webhook",
                                    "containerPort": CONTAINER_PORT,
                                    "protocol": "TCP",
                                }
                            ],
                        }
                    ],
                    "volumes": [
                        {"name": volume_name, "secret": {"secretName": SECRET_NAME}}
                    ],
                },
            },
        },
    })


def new_validating_webhook(namespace: str) -> DesiredObject:
    rules = [
        {
            "operations": ["CREATE", "UPDATE"],
            "apiGroups": [KUBEVIRT_IO],
            "apiVersions": [version],
            "resources": ["virtualmachines"],
        }
        for version in KUBEVIRT_WEBHOOK_VERSIONS
    ]

    return DesiredObject.from_manifest({
        "apiVersion": "admissionregistration.k8s.io/v1",
        "kind": "ValidatingWebhookConfiguration",
        "metadata": {
            "name": WEBHOOK_NAME,
            "annotations": {"service.beta.openshift.io/inject-cabundle": "true"},
        },
        "webhooks": [
            {
                "name": "virt-template-admission.kubevirt.io",
                "clientConfig": {
                    "service": {
                        "name": SERVICE_NAME,
                        "namespace": namespace,
                        "path": "/virtualmachine-template-validate",
                    }
                },
                "rules": rules,
                "failurePolicy": "Fail",
                "sideEffects": "None",
                "admissionReviewVersions": ["v1beta1"],
            }
        ],
    })


class TemplateValidatorOperand(Operand):
    """Reconciles the template validator webhook and its RBAC."""

    name = "template-validator"
    component = APP_COMPONENT_TEMPLATING

    def __init__(self, image: str):
        """
        Initialize the operand.

        Args:
            image: Template validator container image
        """
        self.image = image

    def watch_types(self) -> list[tuple[str, str]]:
        return [
            (_RBAC_API_VERSION, "ClusterRole"),
            (_RBAC_API_VERSION, "ClusterRoleBinding"),
            ("v1", "ServiceAccount"),
            ("v1", "Service"),
            ("apps/v1", "Deployment"),
            ("admissionregistration.k8s.io/v1", "ValidatingWebhookConfiguration"),
        ]

    def _objects(self, request: Request) -> list[DesiredObject]:
        # The binding refers to the role and the service account
        return [
            new_cluster_role(),
            new_service_account(request.namespace),
            new_cluster_role_binding(request.namespace),
            new_service(request.namespace),
            new_deployment(request.namespace, request.validator_replicas, self.image),
            new_validating_webhook(request.namespace),
        ]

    def operations(self, request: Request) -> list[ReconcileOperation]:
        return [
            operation(ReconcileConfig.for_object(obj, self.labels))
            for obj in self._objects(request)
        ]

    def reconcile(self, request: Request) -> list[ResourceStatus]:
        return collect_resource_status(request, self.operations(request))

    def cleanup(self, request: Request) -> None:
        objects = self._objects(request)
        logger.info(f"Deleting {len(objects)} {self.name} objects")
        delete_all(request, objects)
