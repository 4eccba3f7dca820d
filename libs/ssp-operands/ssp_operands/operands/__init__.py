"""Operands reconciled by the SSP operator."""

from ..bundle import BundleCache
from ..config import Settings
from ..constants import COMMON_TEMPLATES_COMPONENT
from ..reconcile import Request
from ..store import ResourceStore
from .base import Operand
from .common_templates import CommonTemplatesOperand
from .template_validator import TemplateValidatorOperand


def get_operands(settings: Settings) -> list[Operand]:
    """
    Build the operands in the order they are reconciled.

    Each call creates a new bundle cache, so the caller should build the
    operands once and keep them for the life of the process.
    """
    bundle = BundleCache.from_directory(settings.bundle_dir, COMMON_TEMPLATES_COMPONENT)
    return [
        CommonTemplatesOperand(bundle, version=settings.common_templates_version),
        TemplateValidatorOperand(image=settings.template_validator_image),
    ]


def build_request(settings: Settings, store: ResourceStore) -> Request:
    """Build a reconciliation request from settings."""
    return Request(
        store=store,
        namespace=settings.namespace,
        templates_namespace=settings.templates_namespace,
        validator_replicas=settings.template_validator_replicas,
    )


__all__ = [
    "Operand",
    "CommonTemplatesOperand",
    "TemplateValidatorOperand",
    "get_operands",
    "build_request",
]
