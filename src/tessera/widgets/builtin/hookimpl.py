"""Hook implementation for built-in widget types."""

from typing import Any

from tessera.widgets.hookspecs import hookimpl


class TesseraBuiltinWidgets:
    """Hook implementer for built-in widget types."""

    @hookimpl
    def tessera_get_widget_types(self) -> list[type[Any]]:
        """Return built-in widget type classes."""
        from tessera.widgets.base import BaseWidgetType
        from tessera.widgets.builtin.images import ImageWidget
        from tessera.widgets.builtin.rich_text import RichTextWidget

        return [BaseWidgetType, RichTextWidget, ImageWidget]


# Singleton instance for registration
builtin_widgets = TesseraBuiltinWidgets()
