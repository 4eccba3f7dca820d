"""Teardown of operand objects."""

import logging
from typing import Iterable

from kubernetes.client.exceptions import ApiException

from .models import DesiredObject
from .reconcile import Request

logger = logging.getLogger(__name__)


def delete_all(request: Request, objects: Iterable[DesiredObject]) -> None:
    """
    Delete every listed object.

    Objects that are already gone count as deleted. The first other error
    stops the pass; objects deleted before it stay deleted.

    Args:
        request: Reconciliation request
        objects: Objects to delete

    Raises:
        ApiException: If a deletion fails for a reason other than a 404
    """
    for obj in objects:
        try:
            if not request.store.delete(obj.key):
                logger.debug(f"{obj.key} already deleted")
        except ApiException as e:
            logger.error(f'Error deleting "{obj.name}": {e}')
            raise
