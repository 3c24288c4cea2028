# src/tessera/widgets/protocols.py
"""Protocols defining the contracts between widget types and their hosts.

These protocols are used for type checking and for runtime isinstance
checks at registration boundaries, not for behavior.
"""

from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from tessera.contracts import Document, RequestContext, SchemaField, WidgetRecord


@runtime_checkable
class ContentReplayer(Protocol):
    """Loads content nested inside already-fetched records.

    Shared by documents and widget batches. Documents are replayed with
    joins enabled; widget batches are replayed with joins disabled because
    their joins already ran and a widget's `type` is not a document type.
    """

    async def replay(
        self,
        ctx: "RequestContext",
        records: "Sequence[Document | WidgetRecord]",
        *,
        joins: bool = True,
    ) -> None:
        """Load every widget nested in records, once per widget type.

        Args:
            ctx: Request context
            records: Documents or widgets whose nested areas need loading
            joins: Whether to run document-level joins on records first
        """
        ...


@runtime_checkable
class WidgetTypeProtocol(Protocol):
    """Protocol for widget types.

    Lifecycle:
    1. __init__(module_name, config, services) - schema composed and cached
    2. sanitize(ctx, data) - on every save
    3. load(ctx, widgets) - once per batch on read
    4. output(ctx, widget, options) - at render time
    """

    name: str
    label: str
    module_name: str
    schema: "Sequence[SchemaField]"

    @property
    def defer(self) -> bool:
        """Whether load() should run as late as possible."""
        ...

    def allowed_schema(self, ctx: "RequestContext") -> "list[SchemaField]":
        """Fields the request's actor may see and edit."""
        ...

    async def sanitize(
        self,
        ctx: "RequestContext",
        data: Any,
        options: Mapping[str, Any] | None = None,
    ) -> "WidgetRecord":
        """Build a validated widget from untrusted data."""
        ...

    async def load(
        self, ctx: "RequestContext", widgets: "Sequence[WidgetRecord]"
    ) -> None:
        """Enrich a batch of widgets of this type in place."""
        ...

    async def output(
        self,
        ctx: "RequestContext",
        widget: "WidgetRecord",
        options: Mapping[str, Any] | None = None,
    ) -> str:
        """Render markup for one widget."""
        ...

    def filter_for_data_attribute(self, widget: "WidgetRecord") -> dict[str, Any]:
        """Data safe to embed in markup for this widget."""
        ...

    def filter_options_for_data_attribute(
        self, options: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        """Placement options safe to embed in markup."""
        ...

    def get_browser_data(self, ctx: "RequestContext") -> dict[str, Any] | None:
        """Editor runtime descriptor, or None for anonymous requests."""
        ...

    def get_widget_wrapper_classes(self, widget: "WidgetRecord") -> list[str]:
        """Extra CSS classes for the wrapper element."""
        ...

    async def list(self, echo: Callable[[str], Any]) -> None:
        """Report every stored occurrence of this widget type."""
        ...
