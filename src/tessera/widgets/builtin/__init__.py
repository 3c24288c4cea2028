"""Built-in widget types."""

from tessera.widgets.builtin.images import ImageWidget
from tessera.widgets.builtin.rich_text import RichTextWidget

__all__ = ["ImageWidget", "RichTextWidget"]
