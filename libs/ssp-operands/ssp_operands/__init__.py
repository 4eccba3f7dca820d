"""SSP Operands - Reconciliation of the SSP operator's cluster objects."""

from .bundle import BundleCache, bundle_path, file_loader, read_bundle
from .cleanup import delete_all
from .cluster import ClusterConnection
from .config import Settings, configure_logging, get_settings
from .exceptions import (
    BundleError,
    OperandError,
    ReconcileError,
    UnsupportedKindError,
)
from .merge import MERGE_FUNCTIONS, merge_function_for
from .migration import older_templates_selector, plan_migration
from .models import (
    ClusterConfig,
    DesiredObject,
    ObjectKey,
    OperationResult,
    ResourceStatus,
    StatusSummary,
)
from .reconcile import (
    ReconcileConfig,
    ReconcileOperation,
    Request,
    app_labels,
    operation,
    reconcile,
)
from .selectors import Operator, Requirement, Selector, requirement
from .status import collect_resource_status
from .store import ResourceStore, is_conflict, is_not_found

__version__ = "0.1.0"

__all__ = [
    # Cluster access
    "ClusterConnection",
    "ResourceStore",
    "is_not_found",
    "is_conflict",
    # Reconciliation
    "Request",
    "ReconcileConfig",
    "ReconcileOperation",
    "reconcile",
    "operation",
    "app_labels",
    "collect_resource_status",
    "delete_all",
    "MERGE_FUNCTIONS",
    "merge_function_for",
    # Migration
    "plan_migration",
    "older_templates_selector",
    # Bundle
    "BundleCache",
    "bundle_path",
    "file_loader",
    "read_bundle",
    # Selectors
    "Operator",
    "Requirement",
    "Selector",
    "requirement",
    # Configuration
    "Settings",
    "get_settings",
    "configure_logging",
    # Models
    "ClusterConfig",
    "DesiredObject",
    "ObjectKey",
    "OperationResult",
    "ResourceStatus",
    "StatusSummary",
    # Errors
    "OperandError",
    "BundleError",
    "ReconcileError",
    "UnsupportedKindError",
]
