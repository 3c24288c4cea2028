"""Schema services consumed by widget types."""

from tessera.schemas.service import BasicSchemaService, SchemaService

__all__ = [
    "BasicSchemaService",
    "SchemaService",
]
