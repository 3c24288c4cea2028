"""Services injected into every widget type.

Widget types never reach into global state: everything they need from the
hosting system arrives through WidgetServices at construction.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tessera.core.permissions import PermissionService
    from tessera.core.store import DocumentStore
    from tessera.core.templates import WidgetTemplates
    from tessera.schemas.service import SchemaService
    from tessera.widgets.protocols import ContentReplayer


@dataclass(frozen=True)
class WidgetServices:
    """Collaborators shared by all widget types of a site.

    Attributes:
        schemas: Schema compiler (compose, convert, join)
        permissions: Permission evaluation for field-level capabilities
        store: Document store scanned by the list task
        templates: Template engine for output(); optional for headless use
        replayer: Nested-content loader used for virtual widget batches
    """

    schemas: "SchemaService"
    permissions: "PermissionService"
    store: "DocumentStore"
    templates: "WidgetTemplates | None" = None
    replayer: "ContentReplayer | None" = None
