# version-publisher - Core Services
# Pure logic over injected ports

from version_publisher.core.services.catalog import CatalogSynchronizer, extract_summary
from version_publisher.core.services.materialize import MaterializeResult, PageMaterializer
from version_publisher.core.services.notify import (
    NotificationConfig,
    NotificationDispatcher,
    NotificationStatus,
    compose_body,
    compose_subject,
)

__all__ = [
    "CatalogSynchronizer",
    "MaterializeResult",
    "NotificationConfig",
    "NotificationDispatcher",
    "NotificationStatus",
    "PageMaterializer",
    "compose_body",
    "compose_subject",
    "extract_summary",
]
