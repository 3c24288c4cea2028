"""Area rendering: widget markup wrapped with embedded data.

Each widget is wrapped in an element carrying two data attributes read by
browser-side hydration code:
- data-widget: filter_for_data_attribute(widget), as canonical JSON
- data-options: filter_options_for_data_attribute(options), as canonical JSON
"""

from collections.abc import Mapping
from typing import Any

import structlog
from markupsafe import Markup

from tessera.contracts import Area, RequestContext, WidgetRecord
from tessera.core.canonical import canonical_json
from tessera.engine.loader import ContentLoader
from tessera.widgets.base import BaseWidgetType
from tessera.widgets.manager import WidgetRegistry

logger = structlog.get_logger()

WRAPPER_CLASS = "tessera-widget"


class AreaRenderer:
    """Renders areas widget by widget.

    Deferred widget loads run first, so every deferred widget type on the
    page is loaded exactly once, just before its markup is produced.
    """

    def __init__(self, registry: WidgetRegistry, loader: ContentLoader) -> None:
        self._registry = registry
        self._loader = loader

    async def render_area(
        self,
        ctx: RequestContext,
        area: Area,
        options: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> Markup:
        """Render every widget of area.

        Args:
            ctx: Request context
            area: Area to render
            options: Placement options keyed by widget type name

        Returns:
            Concatenated wrapper markup. Widgets of unknown types are skipped.
        """
        await self._loader.load_deferred(ctx)

        parts: list[Markup] = []
        for widget in area.items:
            widget_type = self._registry.get(widget.type)
            if widget_type is None:
                logger.warning("Skipping widget of unknown type", widget_type=widget.type)
                continue
            widget_options = dict((options or {}).get(widget.type, {}))
            parts.append(await self.render_widget(ctx, widget_type, widget, widget_options))
        return Markup("").join(parts)

    async def render_widget(
        self,
        ctx: RequestContext,
        widget_type: BaseWidgetType,
        widget: WidgetRecord,
        options: Mapping[str, Any],
    ) -> Markup:
        """Render one widget inside its wrapper element."""
        inner = Markup(await widget_type.output(ctx, widget, options))
        classes = " ".join([WRAPPER_CLASS, *widget_type.get_widget_wrapper_classes(widget)])
        # Markup.format escapes every argument that is not already Markup
        return Markup(
            '<div class="{}" data-widget-type="{}" data-widget="{}" data-options="{}">{}</div>'
        ).format(
            classes,
            widget.type,
            canonical_json(widget_type.filter_for_data_attribute(widget)),
            canonical_json(widget_type.filter_options_for_data_attribute(options)),
            inner,
        )
