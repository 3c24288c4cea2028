# src/tessera/widgets/builtin/rich_text.py
"""Rich text widget: one HTML content field."""

from typing import Any, ClassVar

from markupsafe import Markup

from tessera.contracts import WidgetRecord
from tessera.widgets.base import BaseWidgetType


def _plain_text(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return Markup(value).striptags()


class RichTextWidget(BaseWidgetType):
    """HTML content edited in place.

    Counts as empty when the content holds no text once tags are stripped,
    so an area holding only `<p></p>` is still empty.
    """

    plugin_name: ClassVar[str] = "rich-text"
    default_config: ClassVar[dict[str, Any]] = {
        "add_fields": [{"name": "content", "type": "string", "default": ""}],
        "contextual": True,
    }

    def is_empty(self, widget: WidgetRecord) -> bool:
        return not _plain_text(widget.get("content"))

    def add_search_texts(self, widget: WidgetRecord, texts: list[dict[str, Any]]) -> None:
        text = _plain_text(widget.get("content"))
        if text:
            texts.append({"field": "content", "text": text, "weight": 10})
