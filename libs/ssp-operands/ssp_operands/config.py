"""Configuration management for the SSP operands."""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import BUNDLE_DIR, COMMON_TEMPLATES_VERSION
from .models import ClusterConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    """Operator settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Service Settings
    service_name: str = "ssp-operator"
    log_level: str = "INFO"

    # Kubernetes Settings
    kubeconfig_path: Optional[str] = Field(
        default=None,
        description="Path to kubeconfig file, in-cluster config when unset",
    )
    kube_context: Optional[str] = None
    request_timeout_seconds: float = 30.0

    # Operand Settings
    namespace: str = Field(
        default="kubevirt",
        description="Namespace the template validator is deployed into",
    )
    templates_namespace: str = Field(
        default="openshift",
        description="Namespace the common templates are deployed into",
    )
    common_templates_version: str = COMMON_TEMPLATES_VERSION
    bundle_dir: str = BUNDLE_DIR
    template_validator_image: str = "quay.io/kubevirt/kubevirt-template-validator:latest"
    template_validator_replicas: int = Field(default=2, ge=0)

    def cluster_config(self) -> ClusterConfig:
        """Cluster configuration derived from these settings."""
        return ClusterConfig(
            name=self.service_name,
            kubeconfig_path=self.kubeconfig_path,
            context=self.kube_context,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the operator process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
