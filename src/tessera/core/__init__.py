# src/tessera/core/__init__.py
"""Core infrastructure: Configuration, Canonical JSON, Stores, Templates, Logging."""

from tessera.core.canonical import canonical_json
from tessera.core.config import (
    TesseraSettings,
    WidgetModuleSettings,
    load_settings,
)
from tessera.core.logging import (
    configure_logging,
)
from tessera.core.permissions import CapabilityPermissions, PermissionService
from tessera.core.store import (
    DocumentStore,
    JsonDocumentStore,
    MemoryDocumentStore,
)
from tessera.core.templates import TemplateError, WidgetTemplates

__all__ = [
    "CapabilityPermissions",
    "DocumentStore",
    "JsonDocumentStore",
    "MemoryDocumentStore",
    "PermissionService",
    "TemplateError",
    "TesseraSettings",
    "WidgetModuleSettings",
    "WidgetTemplates",
    "canonical_json",
    "configure_logging",
    "load_settings",
]
