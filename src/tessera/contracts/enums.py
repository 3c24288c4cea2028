"""Markers and kinds used across subsystem boundaries.

CRITICAL: MetaType values are written into persisted content. Changing a
value orphans every stored widget or area that carries it.
"""

from enum import Enum


class MetaType(str, Enum):
    """Structural marker stored in the `metaType` key of persisted content.

    Uses (str, Enum) because this IS stored with every widget and area.
    """

    WIDGET = "widget"
    AREA = "area"


class FieldType(str, Enum):
    """Field types understood by the reference schema service.

    Schemas may declare other types; the reference service leaves their
    values at the schema default.
    """

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    SELECT = "select"
    ARRAY = "array"
    AREA = "area"
    JOIN = "join"
