"""Configuration model exports.

    from panelgate.config.models import CoordinatorConfig, StorageConfig
"""

from panelgate.config.models.coordination import (
    CoordinatorConfig,
    CreditConfig,
    IdempotencyConfig,
)
from panelgate.config.models.observability import LoggingConfig, ObservabilityConfig
from panelgate.config.models.providers import ImageProviderConfig, ProvidersConfig
from panelgate.config.models.storage import StorageConfig

__all__ = [
    "CoordinatorConfig",
    "CreditConfig",
    "IdempotencyConfig",
    "ImageProviderConfig",
    "LoggingConfig",
    "ObservabilityConfig",
    "ProvidersConfig",
    "StorageConfig",
]
