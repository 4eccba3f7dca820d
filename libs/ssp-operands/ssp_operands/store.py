"""Kubernetes object store backed by the dynamic client."""

import logging
from typing import Any, Optional

from kubernetes.client.exceptions import ApiException
from kubernetes.dynamic import DynamicClient
from kubernetes.dynamic.exceptions import ResourceNotFoundError

from .models import ObjectKey

logger = logging.getLogger(__name__)


def is_not_found(error: BaseException) -> bool:
    """Check whether an error is an API 404."""
    return isinstance(error, ApiException) and error.status == 404


def is_conflict(error: BaseException) -> bool:
    """Check whether an error is an API 409, e.g. a stale resourceVersion."""
    return isinstance(error, ApiException) and error.status == 409


def key_of(manifest: dict[str, Any]) -> ObjectKey:
    """Build the key of a manifest."""
    metadata = manifest.get("metadata") or {}
    return ObjectKey(
        api_version=manifest["apiVersion"],
        kind=manifest["kind"],
        name=metadata["name"],
        namespace=metadata.get("namespace") or None,
    )


class ResourceStore:
    """
    Reads and writes Kubernetes objects as plain manifests.

    Every call carries the configured request timeout. A kind the cluster does
    not serve reads as absent. Other errors than the 404 cases documented
    on each method are raised as ApiException.
    """

    def __init__(self, client: DynamicClient, request_timeout: Optional[float] = None):
        """
        Initialize the store.

        Args:
            client: Dynamic client for the target cluster
            request_timeout: Timeout in seconds applied to every API call
        """
        self.client = client
        self.request_timeout = request_timeout

    def _resource(self, api_version: str, kind: str):
        return self.client.resources.get(api_version=api_version, kind=kind)

    def _call_options(self) -> dict[str, Any]:
        if self.request_timeout is None:
            return {}
        return {"_request_timeout": self.request_timeout}

    def get(self, key: ObjectKey) -> Optional[dict[str, Any]]:
        """
        Get an object.

        Args:
            key: Object identity

        Returns:
            The object manifest, or None if not found
        """
        try:
            resource = self._resource(key.api_version, key.kind)
            found = resource.get(name=key.name, namespace=key.namespace, **self._call_options())
        except ResourceNotFoundError:
            logger.debug(f"{key.kind} is not served by the cluster")
            return None
        except ApiException as e:
            if e.status == 404:
                return None
            raise
        return found.to_dict()

    def create(self, manifest: dict[str, Any]) -> dict[str, Any]:
        """
        Create an object.

        Raises:
            ApiException: If creation fails
        """
        key = key_of(manifest)
        resource = self._resource(key.api_version, key.kind)
        created = resource.create(body=manifest, namespace=key.namespace, **self._call_options())
        return created.to_dict()

    def replace(self, manifest: dict[str, Any]) -> dict[str, Any]:
        """
        Replace an object.

        The manifest should carry the resourceVersion it was read at; the API
        server rejects the write with a 409 if the object changed since.

        Raises:
            ApiException: If the replace fails
        """
        key = key_of(manifest)
        resource = self._resource(key.api_version, key.kind)
        replaced = resource.replace(
            body=manifest,
            name=key.name,
            namespace=key.namespace,
            **self._call_options(),
        )
        return replaced.to_dict()

    def delete(self, key: ObjectKey) -> bool:
        """
        Delete an object.

        Args:
            key: Object identity

        Returns:
            True if deleted, False if not found

        Raises:
            ApiException: If deletion fails
        """
        try:
            resource = self._resource(key.api_version, key.kind)
            resource.delete(name=key.name, namespace=key.namespace, **self._call_options())
            return True
        except ResourceNotFoundError:
            logger.debug(f"{key.kind} is not served by the cluster")
            return False
        except ApiException as e:
            if e.status == 404:
                return False
            raise

    def list(
        self,
        api_version: str,
        kind: str,
        namespace: Optional[str] = None,
        label_selector: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """
        List objects.

        A 404, or a kind the cluster does not serve, is reported as an
        empty list: there is nothing to list.

        Args:
            api_version: API group version, e.g. "template.openshift.io/v1"
            kind: Object kind
            namespace: Namespace to list in, None for all or cluster scoped
            label_selector: Label selector string

        Returns:
            List of object manifests
        """
        try:
            resource = self._resource(api_version, kind)
            result = resource.get(
                namespace=namespace,
                label_selector=label_selector,
                **self._call_options(),
            )
        except ResourceNotFoundError:
            logger.debug(f"{kind} is not served by the cluster, nothing to list")
            return []
        except ApiException as e:
            if e.status == 404:
                logger.debug(f"No {kind} objects to list in namespace {namespace}")
                return []
            raise
        items = result.to_dict().get("items") or []
        for item in items:
            # List items come back without their type
            item.setdefault("apiVersion", api_version)
            item.setdefault("kind", kind)
        return items
