"""Shared contracts for cross-boundary data types.

All dataclasses and enums that cross subsystem boundaries MUST be defined
here. Internal types are whitelisted in .contracts-whitelist.yaml.

Import pattern:
    from tessera.contracts import WidgetRecord, RequestContext, SchemaField
"""

from tessera.contracts.enums import FieldType, MetaType
from tessera.contracts.data import (
    FORBIDDEN_FIELD_NAMES,
    Area,
    Document,
    SchemaField,
    WidgetRecord,
)
from tessera.contracts.request import Actor, RequestContext

__all__ = [
    # enums
    "FieldType",
    "MetaType",
    # data
    "FORBIDDEN_FIELD_NAMES",
    "Area",
    "Document",
    "SchemaField",
    "WidgetRecord",
    # request
    "Actor",
    "RequestContext",
]
