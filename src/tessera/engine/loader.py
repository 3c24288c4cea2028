# src/tessera/engine/loader.py
"""Nested-content loading for documents and widget batches.

ContentLoader finds every widget nested in a set of records, groups them
by widget type and calls each type's load() once with the whole group.
Widget types that defer loading are queued on the request instead, and
loaded together by load_deferred() right before rendering, so a page with
forty image widgets in ten areas still costs one image query.
"""

from collections.abc import Mapping, Sequence

import structlog

from tessera.contracts import Document, RequestContext, SchemaField, WidgetRecord
from tessera.engine.walker import iter_widgets
from tessera.schemas.service import SchemaService
from tessera.widgets.manager import WidgetRegistry

logger = structlog.get_logger()


class ContentLoader:
    """Loads widgets nested in documents or in other widgets.

    Args:
        registry: Widget types of the site
        schemas: Schema service used for document-level joins
        document_schemas: Schema per document type; documents of other
            types are not joined
    """

    def __init__(
        self,
        registry: WidgetRegistry,
        schemas: SchemaService,
        document_schemas: Mapping[str, Sequence[SchemaField]] | None = None,
    ) -> None:
        self._registry = registry
        self._schemas = schemas
        self._document_schemas = dict(document_schemas or {})

    async def load_documents(
        self, ctx: RequestContext, documents: Sequence[Document]
    ) -> None:
        """Run document joins, then load every widget nested in documents."""
        await self.replay(ctx, documents, joins=True)

    async def replay(
        self,
        ctx: RequestContext,
        records: Sequence[Document | WidgetRecord],
        *,
        joins: bool = True,
    ) -> None:
        """Load every widget nested in records, once per widget type.

        Widget batches must be replayed with joins=False: their own joins
        already ran, and a widget's `type` is not a document type.

        Positional order is preserved inside each batch. An `_edit` flag on
        a record is propagated to the widgets nested in it.

        Widgets nested in a virtual widget are left to that widget's own
        load(), which replays them, so each widget is loaded once.
        """
        if joins:
            await self._join_records(ctx, records)

        batches: dict[str, list[WidgetRecord]] = {}
        for record in records:
            editable = bool(record.derived.get("_edit"))
            for widget, _dot_path in iter_widgets(record, into_virtual=False):
                if editable:
                    widget.derived["_edit"] = True
                batches.setdefault(widget.type, []).append(widget)

        for type_name, widgets in batches.items():
            widget_type = self._registry.get(type_name)
            if widget_type is None:
                logger.warning(
                    "Skipping widgets of unknown type",
                    widget_type=type_name,
                    count=len(widgets),
                )
                continue
            if widget_type.defer:
                ctx.defer(type_name, widgets)
                continue
            await widget_type.load(ctx, widgets)

    async def load_deferred(self, ctx: RequestContext) -> None:
        """Load every deferred batch, one load() call per widget type.

        Loading a batch may defer more widgets (nested deferred types), so
        the queue is drained until empty.
        """
        while ctx.deferred:
            for type_name, widgets in ctx.take_deferred().items():
                logger.debug(
                    "Loading deferred widgets", widget_type=type_name, count=len(widgets)
                )
                await self._registry.require(type_name).load(ctx, widgets)

    async def _join_records(
        self, ctx: RequestContext, records: Sequence[Document | WidgetRecord]
    ) -> None:
        by_type: dict[str, list[Document | WidgetRecord]] = {}
        for record in records:
            if record.type in self._document_schemas:
                by_type.setdefault(record.type, []).append(record)
        for doc_type, group in by_type.items():
            await self._schemas.join(ctx, self._document_schemas[doc_type], group)
