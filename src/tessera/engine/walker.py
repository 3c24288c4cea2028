"""Walk widgets nested in documents and other widgets.

Dot paths follow the persisted layout, so `body.items.0` is the first widget
of the `body` area and `body.items.0.columns.items.2` the third widget of a
`columns` area inside it.
"""

from collections.abc import Awaitable, Callable, Iterator, Mapping
from typing import Any

from tessera.contracts import Area, Document, WidgetRecord
from tessera.core.store import DocumentStore

WidgetVisitor = Callable[[Document, WidgetRecord, str], Awaitable[None]]


def iter_widgets(
    record: Document | WidgetRecord, prefix: str = "", *, into_virtual: bool = True
) -> Iterator[tuple[WidgetRecord, str]]:
    """Yield (widget, dot_path) for every widget nested in record, depth first.

    record itself is never yielded. With into_virtual=False a virtual widget
    is yielded but its own nested widgets are not: its load() replays them.
    """
    for key, value in record.fields.items():
        yield from _walk(value, f"{prefix}.{key}" if prefix else key, into_virtual)


def _walk(value: Any, path: str, into_virtual: bool) -> Iterator[tuple[WidgetRecord, str]]:
    if isinstance(value, Area):
        for index, widget in enumerate(value.items):
            widget_path = f"{path}.items.{index}"
            yield widget, widget_path
            if into_virtual or not widget.virtual:
                yield from iter_widgets(widget, widget_path, into_virtual=into_virtual)
    elif isinstance(value, Mapping):
        for key, item in value.items():
            yield from _walk(item, f"{path}.{key}", into_virtual)
    elif isinstance(value, list):
        for index, item in enumerate(value):
            yield from _walk(item, f"{path}.{index}", into_virtual)


async def each_widget(store: DocumentStore, visitor: WidgetVisitor) -> None:
    """Call visitor(document, widget, dot_path) for every stored widget."""
    async for document in store.iterate():
        for widget, dot_path in iter_widgets(document):
            await visitor(document, widget, dot_path)
