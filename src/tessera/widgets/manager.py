# src/tessera/widgets/manager.py
"""Widget plugin discovery and the per-site widget type registry.

Two distinct registries:
- WidgetPluginManager maps plugin names to widget type CLASSES (pluggy)
- WidgetRegistry maps widget type names to configured INSTANCES

A site is built by picking classes from the first and registering
instances in the second.
"""

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

import pluggy

from tessera.widgets.hookspecs import PROJECT_NAME, TesseraWidgetSpec

if TYPE_CHECKING:
    from tessera.widgets.base import BaseWidgetType


class WidgetPluginManager:
    """Manages widget plugin registration and lookup.

    Usage:
        plugins = WidgetPluginManager()
        plugins.register_builtin_plugins()

        cls = plugins.get_widget_type_by_name("rich-text")
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(TesseraWidgetSpec)

        # Cache - map plugin name to class for duplicate detection
        self._widget_types: dict[str, type["BaseWidgetType"]] = {}

    def register_builtin_plugins(self) -> None:
        """Register the built-in widget types.

        Call this once at startup to make built-in widgets discoverable.
        """
        from tessera.widgets.builtin.hookimpl import builtin_widgets

        self.register(builtin_widgets)

    def register(self, plugin: Any) -> None:
        """Register a plugin.

        Args:
            plugin: Plugin instance implementing hook methods
        """
        self._pm.register(plugin)
        self._refresh_caches()

    def _refresh_caches(self) -> None:
        """Refresh plugin caches from hooks.

        Raises:
            ValueError: If two plugins declare the same plugin name
        """
        new_widget_types: dict[str, type["BaseWidgetType"]] = {}

        for widget_types in self._pm.hook.tessera_get_widget_types():
            for cls in widget_types:
                plugin_name = cls.plugin_name
                if plugin_name in new_widget_types:
                    raise ValueError(
                        f"Duplicate widget plugin name: '{plugin_name}'. "
                        f"Already registered by {new_widget_types[plugin_name].__name__}"
                    )
                new_widget_types[plugin_name] = cls

        self._widget_types = new_widget_types

    def get_widget_types(self) -> list[type["BaseWidgetType"]]:
        """Get all registered widget type classes."""
        return list(self._widget_types.values())

    def get_widget_type_by_name(self, plugin_name: str) -> type["BaseWidgetType"] | None:
        """Get widget type class by plugin name."""
        return self._widget_types.get(plugin_name)


class WidgetRegistry:
    """Configured widget types of one site, keyed by widget type name.

    This is the lookup areas use to find the manager of a stored widget
    from its `type` value.
    """

    def __init__(self) -> None:
        self._by_name: dict[str, "BaseWidgetType"] = {}

    def register(self, widget_type: "BaseWidgetType") -> None:
        """Register a configured widget type.

        Raises:
            ValueError: If another widget type already uses the same name
        """
        existing = self._by_name.get(widget_type.name)
        if existing is not None:
            raise ValueError(
                f"Duplicate widget type name: '{widget_type.name}'. "
                f"Already registered by module {existing.module_name}"
            )
        self._by_name[widget_type.name] = widget_type

    def get(self, name: str) -> "BaseWidgetType | None":
        """Get widget type by name, or None."""
        return self._by_name.get(name)

    def require(self, name: str) -> "BaseWidgetType":
        """Get widget type by name.

        Raises:
            KeyError: If no widget type has that name
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise KeyError(f"No widget type named '{name}'") from None

    def get_by_module(self, module_name: str) -> "BaseWidgetType | None":
        """Get widget type by the module that configured it."""
        for widget_type in self._by_name.values():
            if widget_type.module_name == module_name:
                return widget_type
        return None

    def names(self) -> list[str]:
        return list(self._by_name)

    def __iter__(self) -> Iterator["BaseWidgetType"]:
        return iter(list(self._by_name.values()))

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name
