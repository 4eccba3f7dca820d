"""Exceptions raised by the SSP operand reconcilers."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ResourceStatus


class OperandError(Exception):
    """Base class for operand errors."""

    pass


class BundleError(OperandError):
    """Raised when the templates bundle cannot be read or is empty.

    This is a configuration fault. The operator cannot make progress without
    a bundle, so callers are expected to treat it as fatal.
    """

    pass


class UnsupportedKindError(OperandError):
    """Raised when no merge function is registered for an object kind."""

    def __init__(self, kind: str):
        super().__init__(f"No merge function registered for kind {kind!r}")
        self.kind = kind


class ReconcileError(OperandError):
    """Raised when a reconciliation run stops on a failed operation.

    Attributes:
        statuses: Statuses collected before the run stopped, the failed
            operation's status last
        error: The exception raised by the failed operation
    """

    def __init__(self, statuses: list["ResourceStatus"], error: Exception):
        super().__init__(f"Reconciliation stopped after {len(statuses)} operation(s): {error}")
        self.statuses = statuses
        self.error = error
