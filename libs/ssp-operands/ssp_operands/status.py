"""Sequential execution of reconciliation operations."""

import logging
from typing import Iterable

from .exceptions import ReconcileError
from .models import ResourceStatus, StatusSummary
from .reconcile import ReconcileOperation, Request
from .store import is_not_found

logger = logging.getLogger(__name__)


def collect_resource_status(
    request: Request, operations: Iterable[ReconcileOperation]
) -> list[ResourceStatus]:
    """
    Run operations in order and collect their statuses.

    Order matters: a namespace has to exist before the roles inside it,
    and roles before their bindings. The run stops at the first operation
    that fails with anything other than a 404; nothing already applied is
    rolled back and nothing is retried.

    Args:
        request: Reconciliation request
        operations: Operations to run, in dependency order

    Returns:
        One status per operation

    Raises:
        ReconcileError: If an operation fails. Carries the statuses collected
            so far, the failed one last, and the original exception.
    """
    statuses: list[ResourceStatus] = []
    for operation in operations:
        try:
            status = operation(request)
        except Exception as e:
            statuses.append(ResourceStatus.from_error(operation.key, e))
            if is_not_found(e):
                logger.warning(f"{operation.key} reported not found, continuing: {e}")
                continue
            logger.error(f"Failed to reconcile {operation.key}: {e}", exc_info=True)
            raise ReconcileError(statuses, e) from e
        statuses.append(status)

    summary = StatusSummary.from_statuses(statuses)
    logger.debug(
        f"Reconciled {len(statuses)} objects: {summary.created} created, "
        f"{summary.updated} updated, {summary.unchanged} unchanged, {summary.failed} failed"
    )
    return statuses
