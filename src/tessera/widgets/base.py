# src/tessera/widgets/base.py
"""Base class for all widget types.

A widget type turns a declarative field schema into:
- validated persisted data (sanitize)
- permission-scoped editor metadata (allowed_schema, get_browser_data)
- a minimized payload embeddable in markup (filter_for_data_attribute)

and enriches widgets in batches (load), so that one join serves every
widget of the type on a page.

Many widget types need nothing beyond options: an `add_fields` list and a
`<module>/widget.html` template. Subclass when a type needs custom loading,
emptiness rules or CSS classes.

Example:
    class HeroWidget(BaseWidgetType):
        plugin_name = "hero"
        default_config = {
            "add_fields": [{"name": "title", "type": "string", "default": "untitled"}],
        }

        def is_empty(self, widget: WidgetRecord) -> bool:
            return not widget.get("title")
"""

import logging
import re
from collections.abc import Callable, Mapping, Sequence
from typing import Any, ClassVar

from tessera.contracts import (
    FORBIDDEN_FIELD_NAMES,
    Document,
    FieldType,
    RequestContext,
    SchemaField,
    WidgetRecord,
)
from tessera.core.ids import generate_id, launder_id
from tessera.core.permanent import clone_permanent
from tessera.widgets.config_base import WidgetConfig, WidgetConfigError
from tessera.widgets.context import WidgetServices

logger = logging.getLogger(__name__)

_MODULE_SUFFIX = re.compile(r"-widgets$")

# Options whose list values accumulate from class defaults to module options
_ACCUMULATING_OPTIONS = ("add_fields", "remove_fields")


def _merge_config(defaults: Mapping[str, Any], config: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(defaults)
    for key, value in config.items():
        if key in _ACCUMULATING_OPTIONS and key in merged:
            merged[key] = [*merged[key], *value]
        else:
            merged[key] = value
    return merged


class BaseWidgetType:
    """A configured widget type.

    Instances are created once per widget module at startup and live for
    the process lifetime. The composed schema is cached on the instance.

    Args:
        module_name: Module configuring this type, e.g. "hero-widgets"
        config: Module options (see WidgetConfig)
        services: Injected collaborators

    Raises:
        WidgetConfigError: If the label is missing, an option is invalid or
            the schema uses a forbidden field name
    """

    plugin_name: ClassVar[str] = "widget"

    # Options applied before the module's own; subclasses override
    default_config: ClassVar[dict[str, Any]] = {}

    def __init__(
        self,
        module_name: str,
        config: dict[str, Any],
        services: WidgetServices,
    ) -> None:
        self.module_name = module_name
        self.config = _merge_config(self.default_config, config)
        self.services = services
        self.options = WidgetConfig.from_dict(self.config, module_name=module_name)

        self.label = self.options.label
        self.name = self.options.name or _MODULE_SUFFIX.sub("", module_name)
        self.template = self.options.template
        self.action = self.options.action or f"/modules/{module_name}"

        self.schema: tuple[SchemaField, ...] = tuple(self.compose_schema())
        # Persisted fields that from_dict() reads back as derived
        self.underscore_fields: frozenset[str] = frozenset(
            schema_field.name
            for schema_field in self.schema
            if schema_field.name.startswith("_")
            and schema_field.type != FieldType.JOIN.value
        )
        logger.debug(
            "Widget type %s composed with %d fields", self.name, len(self.schema)
        )

    @property
    def defer(self) -> bool:
        return self.options.defer

    @property
    def player_data(self) -> bool | list[str]:
        return self.options.player_data

    # === Schema ===

    def compose_schema(self) -> list[SchemaField]:
        """Compose the schema from `add_fields`, `remove_fields`, etc.

        Runs once, at construction. A field named `_id` or `type` would
        collide with the widget's own identity, so it is a configuration
        error, reported before any request is served.
        """
        try:
            schema = self.services.schemas.compose(self.options.compose_options())
        except ValueError as e:
            raise WidgetConfigError(f"Widget type {self.name}: invalid schema: {e}") from e

        for schema_field in schema:
            if schema_field.name in FORBIDDEN_FIELD_NAMES:
                raise WidgetConfigError(
                    f"Widget type {self.name}: the field name {schema_field.name} is forbidden"
                )
        return schema

    def allowed_schema(self, ctx: RequestContext) -> list[SchemaField]:
        """Return the fields the current actor may see and edit.

        A field is allowed when it declares no `permission`, or the actor
        holds that capability. Order is preserved.
        """
        permissions = self.services.permissions
        return [
            schema_field
            for schema_field in self.schema
            if not schema_field.permission or permissions.can(ctx, schema_field.permission)
        ]

    # === Write path ===

    async def sanitize(
        self,
        ctx: RequestContext,
        data: Any,
        options: Mapping[str, Any] | None = None,
    ) -> WidgetRecord:
        """Build a new, validated widget from untrusted input.

        Nothing in data is trusted blindly:
        - Defaults come from the full schema, so fields the actor cannot
          edit (contextual ones included) still get a value
        - Only fields of the allowed schema are converted from data
        - `type` is always this widget type's name

        Args:
            ctx: Request context
            data: Untrusted widget data; anything that is not a mapping is
                treated as an empty one
            options: Placement options for this area, including any
                defaults for the widget type

        Returns:
            A new WidgetRecord. data is never mutated.
        """
        if isinstance(data, WidgetRecord):
            record = data
            data = record.to_dict()
            for name in self.underscore_fields:
                if name in record.derived and name not in data:
                    data[name] = record.derived[name]
        if not isinstance(data, Mapping):
            data = {}

        values = self.services.schemas.new_instance(self.schema)
        await self.services.schemas.convert(ctx, self.allowed_schema(ctx), data, values)

        return WidgetRecord(
            id=launder_id(data.get("_id")) or generate_id(),
            type=self.name,
            fields=values,
        )

    # === Read path ===

    async def load(self, ctx: RequestContext, widgets: Sequence[WidgetRecord]) -> None:
        """Perform joins and nested loading for a batch of widgets, in place.

        The whole batch is handled in one call so that joins cost one round
        trip regardless of how many widgets are on the page. Override to
        add custom joins or API calls, but keep them batched.

        Precondition: a batch is either entirely virtual (previews built in
        the editor) or entirely persisted. Virtual widgets never went
        through document loading, so widgets nested inside them are loaded
        here by replaying the nested-content pipeline with joins disabled.

        Also implements the `scene` option: the request is upgraded to the
        configured asset scene.
        """
        if self.options.scene:
            ctx.scene = self.options.scene

        for widget in widgets:
            widget.adopt_fields(self.underscore_fields)
        await self.services.schemas.join(ctx, self.schema, widgets)

        if not (widgets and widgets[0].virtual):
            return

        assert all(widget.virtual for widget in widgets), (
            f"Widget type {self.name}: batch mixes virtual and persisted widgets"
        )

        replayer = self.services.replayer
        if replayer is None:
            raise RuntimeError(
                f"Widget type {self.name}: cannot load virtual widgets "
                "without a content replayer"
            )
        await replayer.replay(ctx, widgets, joins=False)

    # === Render time ===

    async def output(
        self,
        ctx: RequestContext,
        widget: WidgetRecord,
        options: Mapping[str, Any] | None = None,
    ) -> str:
        """Render the widget's template with `widget`, `options` and `manager`."""
        templates = self.services.templates
        if templates is None:
            raise RuntimeError(
                f"Widget type {self.name}: no template engine configured"
            )
        return await templates.render(
            f"{self.module_name}/{self.template}.html",
            widget=widget,
            options=options if options is not None else {},
            manager=self,
        )

    def filter_for_data_attribute(self, widget: WidgetRecord) -> dict[str, Any]:
        """Return the data to embed in the widget's markup.

        Join results are never included: they can weigh megabytes and may
        expose documents to visitors who should not see them. Override with
        care, and prefer an API route for data needed only on interaction.

        - Actors who can edit the widget get every permanent property
        - Otherwise `player_data` decides: True gives every permanent
          property, a list gives the named fields only, False gives {}
        """
        data: dict[str, Any] = clone_permanent(widget.to_dict())
        if widget.editable or self.options.player_data is True:
            return data
        if isinstance(self.options.player_data, list):
            permanent_fields: dict[str, Any] = clone_permanent(widget.fields)
            return {
                key: permanent_fields[key]
                for key in self.options.player_data
                if key in permanent_fields
            }
        return {}

    def filter_options_for_data_attribute(
        self, options: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        """Return placement options safe to embed in markup.

        Same rule as widget data: derived properties and callables go.
        """
        return clone_permanent(options or {})

    def get_browser_data(self, ctx: RequestContext) -> dict[str, Any] | None:
        """Return the descriptor sent to the editor runtime.

        Anonymous requests get nothing. The `browser` option, if set,
        takes precedence over the defaults.
        """
        if not ctx.is_authenticated:
            return None
        data: dict[str, Any] = {
            "name": self.name,
            "label": self.label,
            "action": self.action,
            "schema": [schema_field.to_browser() for schema_field in self.allowed_schema(ctx)],
            "contextual": self.options.contextual,
            "skipInitialModal": self.options.skip_initial_modal,
        }
        data.update(self.options.browser)
        return data

    # === Hooks for subclasses ===

    def add_search_texts(self, widget: WidgetRecord, texts: list[dict[str, Any]]) -> None:
        """Append search index texts for widget."""
        self.services.schemas.index_fields(self.schema, widget, texts)

    def is_empty(self, widget: WidgetRecord) -> bool:
        """Return True if widget should count as empty.

        By default any widget makes its area non-empty.
        """
        return False

    def get_widget_wrapper_classes(self, widget: WidgetRecord) -> list[str]:
        """CSS classes for the outer wrapper element."""
        return []

    def get_widget_classes(self, widget: WidgetRecord) -> list[str]:
        """CSS classes for the widget's own element (used by templates)."""
        return []

    # === Tasks ===

    async def list(self, echo: Callable[[str], Any]) -> None:
        """List every stored occurrence of this widget type.

        Emits one `<slug>:<dotPath>` line per occurrence. Read-only.
        """
        from tessera.engine.walker import each_widget

        async def visit(document: Document, widget: WidgetRecord, dot_path: str) -> None:
            if widget.type == self.name:
                echo(f"{document.slug}:{dot_path}")

        await each_widget(self.services.store, visit)
