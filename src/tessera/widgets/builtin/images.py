# src/tessera/widgets/builtin/images.py
"""Image widget: a slideshow of image documents."""

from typing import Any, ClassVar

from tessera.contracts import WidgetRecord
from tessera.widgets.base import BaseWidgetType


class ImageWidget(BaseWidgetType):
    """Displays `image` documents selected by id.

    Loading is deferred so that every image widget on a page shares a
    single join, including widgets nested inside other widgets.
    """

    plugin_name: ClassVar[str] = "images"
    default_config: ClassVar[dict[str, Any]] = {
        "defer": True,
        "add_fields": [
            {
                "name": "_images",
                "type": "join",
                "label": "Images",
                "with_type": "image",
                "ids_field": "imageIds",
            },
        ],
    }

    def is_empty(self, widget: WidgetRecord) -> bool:
        return not widget.get("imageIds")

    def get_widget_wrapper_classes(self, widget: WidgetRecord) -> list[str]:
        count = len(widget.get("imageIds") or [])
        return ["tessera-images", "tessera-images--single" if count == 1 else "tessera-images--multiple"]
