"""Widget types: base class, configuration, plugin discovery and registry."""

from tessera.widgets.base import BaseWidgetType
from tessera.widgets.config_base import FieldGroup, WidgetConfig, WidgetConfigError
from tessera.widgets.context import WidgetServices
from tessera.widgets.hookspecs import hookimpl
from tessera.widgets.manager import WidgetPluginManager, WidgetRegistry
from tessera.widgets.protocols import ContentReplayer, WidgetTypeProtocol

__all__ = [
    "BaseWidgetType",
    "ContentReplayer",
    "FieldGroup",
    "WidgetConfig",
    "WidgetConfigError",
    "WidgetPluginManager",
    "WidgetRegistry",
    "WidgetServices",
    "WidgetTypeProtocol",
    "hookimpl",
]
