# src/tessera/engine/bootstrap.py
"""Build a site from settings: store, services, registry and widget types.

This is the only place collaborators are wired together. Everything else
receives them explicitly.
"""

from dataclasses import dataclass
from pathlib import Path

import structlog

from tessera.core.config import TesseraSettings
from tessera.core.permissions import CapabilityPermissions
from tessera.core.store import DocumentStore, JsonDocumentStore, MemoryDocumentStore
from tessera.core.templates import WidgetTemplates
from tessera.engine.loader import ContentLoader
from tessera.engine.render import AreaRenderer
from tessera.schemas.service import BasicSchemaService
from tessera.widgets.config_base import WidgetConfigError
from tessera.widgets.context import WidgetServices
from tessera.widgets.manager import WidgetPluginManager, WidgetRegistry

logger = structlog.get_logger()


@dataclass(frozen=True)
class Site:
    """A wired set of widget types and the collaborators they share."""

    registry: WidgetRegistry
    services: WidgetServices
    loader: ContentLoader
    renderer: AreaRenderer


def build_site(
    settings: TesseraSettings,
    *,
    store: DocumentStore | None = None,
    plugins: WidgetPluginManager | None = None,
    base_dir: Path | None = None,
) -> Site:
    """Construct every configured widget type.

    Args:
        settings: Validated site settings
        store: Document store to use instead of the configured one
        plugins: Plugin manager to resolve widget classes; defaults to one
            with the built-in widget types registered
        base_dir: Directory relative paths in settings are resolved against

    Returns:
        The wired Site

    Raises:
        WidgetConfigError: If a widget module names an unknown plugin or is
            misconfigured
        ValueError: If two widget modules resolve to the same type name
    """
    if store is None:
        store = _build_store(settings, base_dir)
    if plugins is None:
        plugins = WidgetPluginManager()
        plugins.register_builtin_plugins()

    registry = WidgetRegistry()
    schemas = BasicSchemaService(store=store, registry=registry)
    document_schemas = {
        doc_type: schemas.compose({"add_fields": doc_settings.add_fields})
        for doc_type, doc_settings in settings.document_types.items()
    }
    loader = ContentLoader(registry, schemas, document_schemas)
    services = WidgetServices(
        schemas=schemas,
        permissions=CapabilityPermissions(settings.permissions.superuser_capability),
        store=store,
        templates=WidgetTemplates(
            [_resolve(directory, base_dir) for directory in settings.templates.directories]
        ),
        replayer=loader,
    )

    for module in settings.widgets:
        widget_cls = plugins.get_widget_type_by_name(module.plugin)
        if widget_cls is None:
            raise WidgetConfigError(
                f"Widget module {module.module}: unknown widget plugin '{module.plugin}'"
            )
        widget_type = widget_cls(module.module, dict(module.options), services)
        registry.register(widget_type)
        logger.debug(
            "Registered widget type",
            widget_type=widget_type.name,
            module=module.module,
            plugin=module.plugin,
        )

    return Site(
        registry=registry,
        services=services,
        loader=loader,
        renderer=AreaRenderer(registry, loader),
    )


def _resolve(path: str, base_dir: Path | None) -> Path:
    p = Path(path)
    if base_dir and not p.is_absolute():
        return base_dir / p
    return p


def _build_store(settings: TesseraSettings, base_dir: Path | None) -> DocumentStore:
    if settings.store.path is None:
        return MemoryDocumentStore()
    return JsonDocumentStore(_resolve(settings.store.path, base_dir))
