"""pluggy hook specifications for tessera widget plugins.

Plugins implement these hooks to make widget type classes available to
site configuration (`plugin:` in the widgets settings).

Usage (implementing a plugin):
    from tessera.widgets.hookspecs import hookimpl

    class MyWidgets:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def tessera_get_widget_types(self):
            return [HeroWidget]
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from tessera.widgets.base import BaseWidgetType

# Project name for pluggy
PROJECT_NAME = "tessera"

# Hook specification marker
hookspec = pluggy.HookspecMarker(PROJECT_NAME)

# Hook implementation marker (for plugins to use)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class TesseraWidgetSpec:
    """Hook specifications for widget type plugins."""

    @hookspec
    def tessera_get_widget_types(self) -> list[type["BaseWidgetType"]]:  # type: ignore[empty-body]
        """Return widget type classes.

        Returns:
            List of widget type classes (not instances)
        """
