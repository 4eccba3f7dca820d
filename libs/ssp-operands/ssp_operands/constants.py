"""Label, annotation and naming constants shared by the operands.

The label and annotation keys below are read by other tooling and must not
be renamed.
"""

# Ownership labels
APP_NAME_LABEL = "app.kubernetes.io/name"
APP_COMPONENT_LABEL = "app.kubernetes.io/component"
APP_MANAGED_BY_LABEL = "app.kubernetes.io/managed-by"
MANAGED_BY = "ssp-operator"

APP_COMPONENT_TEMPLATING = "templating"

# Template categorization
TEMPLATE_TYPE_LABEL = "template.kubevirt.io/type"
TEMPLATE_VERSION_LABEL = "template.kubevirt.io/version"
TEMPLATE_TYPE_BASE = "base"
TEMPLATE_DEPRECATED_ANNOTATION = "template.kubevirt.io/deprecated"

TEMPLATE_OS_LABEL_PREFIX = "os.template.kubevirt.io/"
TEMPLATE_FLAVOR_LABEL_PREFIX = "flavor.template.kubevirt.io/"
TEMPLATE_WORKLOAD_LABEL_PREFIX = "workload.template.kubevirt.io/"

DEPRECATED_LABEL_PREFIXES = (
    TEMPLATE_OS_LABEL_PREFIX,
    TEMPLATE_FLAVOR_LABEL_PREFIX,
    TEMPLATE_WORKLOAD_LABEL_PREFIX,
)

TEMPLATE_API_VERSION = "template.openshift.io/v1"
TEMPLATE_KIND = "Template"

# Common templates bundle
COMMON_TEMPLATES_VERSION = "v0.13.1"
COMMON_TEMPLATES_COMPONENT = "common-templates"
BUNDLE_DIR = "data/common-templates-bundle"
BUNDLE_EXTENSION = "yaml"

GOLDEN_IMAGES_NAMESPACE = "kubevirt-os-images"

# Metadata fields owned by the API server
SYSTEM_METADATA_FIELDS = (
    "uid",
    "resourceVersion",
    "generation",
    "creationTimestamp",
    "deletionTimestamp",
    "deletionGracePeriodSeconds",
    "managedFields",
    "selfLink",
)
