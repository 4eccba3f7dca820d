"""Loading of the common templates bundle."""

import logging
import threading
from pathlib import Path
from typing import Callable, Optional

import yaml

from .constants import BUNDLE_EXTENSION
from .exceptions import BundleError
from .models import DesiredObject

logger = logging.getLogger(__name__)

BundleLoader = Callable[[str], list[DesiredObject]]


def bundle_path(
    directory: str | Path, component: str, version: str, extension: str = BUNDLE_EXTENSION
) -> Path:
    """Path of a bundle file: <directory>/<component>-<version>.<extension>."""
    return Path(directory) / f"{component}-{version}.{extension}"


def read_bundle(path: str | Path) -> list[DesiredObject]:
    """
    Read a multi-document YAML bundle.

    Empty documents are skipped.

    Args:
        path: Bundle file

    Returns:
        Objects in the order they appear in the file

    Raises:
        BundleError: If the file cannot be read or parsed
    """
    try:
        with open(path, encoding="utf-8") as f:
            documents = list(yaml.safe_load_all(f))
    except (OSError, yaml.YAMLError) as e:
        raise BundleError(f"Error reading from template bundle {path}: {e}") from e

    objects = []
    for index, document in enumerate(documents):
        if document is None:
            continue
        if not isinstance(document, dict):
            raise BundleError(f"Document {index} in {path} is not a mapping")
        try:
            objects.append(DesiredObject.from_manifest(document))
        except ValueError as e:
            raise BundleError(f"Document {index} in {path} is not a valid object: {e}") from e
    return objects


def file_loader(directory: str | Path, component: str) -> BundleLoader:
    """Build a loader reading <directory>/<component>-<version>.yaml."""

    def _load(version: str) -> list[DesiredObject]:
        return read_bundle(bundle_path(directory, component, version))

    return _load


class BundleCache:
    """
    Loads the bundle once per process.

    The first call to load() runs the loader while holding a lock; callers
    arriving meanwhile wait and then get the same objects. Every later call
    returns the cached objects, whatever version it asks for. A failed load
    is cached as well: the error is raised again on every call and the
    loader is never retried.
    """

    def __init__(self, loader: BundleLoader):
        """
        Initialize bundle cache.

        Args:
            loader: Reads the bundle for a version
        """
        self._loader = loader
        self._lock = threading.Lock()
        self._loaded = False
        self._objects: tuple[DesiredObject, ...] = ()
        self._error: Optional[BundleError] = None

    @classmethod
    def from_directory(cls, directory: str | Path, component: str) -> "BundleCache":
        return cls(file_loader(directory, component))

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self, version: str) -> tuple[DesiredObject, ...]:
        """
        Get the bundle, loading it on the first call.

        Args:
            version: Bundle version, only used by the first call

        Returns:
            Bundle objects

        Raises:
            BundleError: If the bundle cannot be read or holds no objects
        """
        if not self._loaded:
            with self._lock:
                if not self._loaded:
                    self._load(version)

        if self._error is not None:
            # Same error every call, without the frames of earlier raises
            raise self._error.with_traceback(None)
        return self._objects

    def _load(self, version: str) -> None:
        try:
            objects = self._loader(version)
            if not objects:
                raise BundleError("No templates could be found in the installed bundle")
            self._objects = tuple(objects)
            logger.info(f"Loaded {len(self._objects)} objects from bundle version {version}")
        except BundleError as e:
            logger.error(f"Error reading from template bundle, {e}")
            self._error = e
        except Exception as e:
            logger.error(f"Error reading from template bundle, {e}", exc_info=True)
            self._error = BundleError(f"Error reading from template bundle: {e}")
            self._error.__cause__ = e
        finally:
            self._loaded = True

    def cached(self) -> tuple[DesiredObject, ...]:
        """Objects loaded so far, empty if the bundle has not been loaded."""
        return self._objects
