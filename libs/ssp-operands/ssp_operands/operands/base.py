"""Operand interface."""

from abc import ABC, abstractmethod

from ..models import ResourceStatus
from ..reconcile import Request, app_labels


class Operand(ABC):
    """
    A group of objects the operator reconciles together.

    Subclasses build their objects, hand reconcile operations to the status
    aggregator in dependency order, and delete the same objects on cleanup.
    """

    name: str
    component: str

    @property
    def labels(self) -> dict[str, str]:
        """Ownership labels put on every object of this operand."""
        return app_labels(self.name, self.component)

    @abstractmethod
    def watch_types(self) -> list[tuple[str, str]]:
        """
        Get the object types the operator should watch for this operand.

        Returns:
            List of (apiVersion, kind) pairs
        """
        pass

    @abstractmethod
    def reconcile(self, request: Request) -> list[ResourceStatus]:
        """
        Reconcile all objects of this operand.

        Args:
            request: Reconciliation request

        Returns:
            One status per object

        Raises:
            ReconcileError: If an object fails to reconcile
        """
        pass

    @abstractmethod
    def cleanup(self, request: Request) -> None:
        """
        Delete all objects of this operand.

        Args:
            request: Reconciliation request
        """
        pass
