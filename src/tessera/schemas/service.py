# src/tessera/schemas/service.py
"""Schema composition, conversion and joins.

SchemaService is the contract widget types consume. BasicSchemaService is
the reference implementation shipped with tessera:

- compose: add_fields / remove_fields / arrange_fields directives
- new_instance: schema defaults
- convert: Pydantic type adapters for scalar fields, recursion for arrays,
  widget sanitization for areas
- join: one document store round trip per join field per batch
- index_fields: search texts from string fields
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pydantic import TypeAdapter

from tessera.contracts import (
    Area,
    Document,
    FieldType,
    RequestContext,
    SchemaField,
    WidgetRecord,
)
from tessera.core.ids import generate_id, launder_id, launder_ids

if TYPE_CHECKING:
    from tessera.core.store import DocumentStore
    from tessera.widgets.manager import WidgetRegistry

logger = logging.getLogger(__name__)

Record = WidgetRecord | Document

_STRING: TypeAdapter[str] = TypeAdapter(str)
_INTEGER: TypeAdapter[int] = TypeAdapter(int)
_FLOAT: TypeAdapter[float] = TypeAdapter(float)
_BOOLEAN: TypeAdapter[bool] = TypeAdapter(bool)

_SCALAR_ADAPTERS: dict[str, TypeAdapter[Any]] = {
    FieldType.INTEGER.value: _INTEGER,
    FieldType.FLOAT.value: _FLOAT,
    FieldType.BOOLEAN.value: _BOOLEAN,
}


@runtime_checkable
class SchemaService(Protocol):
    """Protocol for schema compilers.

    Widget types never interpret field types themselves; every
    type-specific behavior goes through this contract.
    """

    def compose(self, options: Mapping[str, Any]) -> list[SchemaField]:
        """Build an ordered field list from schema-shaping options.

        Raises:
            ValueError: If a field definition is invalid
        """
        ...

    def new_instance(self, schema: Sequence[SchemaField]) -> dict[str, Any]:
        """Return a dict of default values for every field of schema."""
        ...

    async def convert(
        self,
        ctx: RequestContext,
        schema: Sequence[SchemaField],
        data: Mapping[str, Any],
        output: dict[str, Any],
    ) -> None:
        """Convert untrusted data for the given fields into output, in place."""
        ...

    async def join(
        self,
        ctx: RequestContext,
        schema: Sequence[SchemaField],
        records: Sequence[Record],
    ) -> None:
        """Attach related documents to every record of the batch, in place."""
        ...

    def index_fields(
        self,
        schema: Sequence[SchemaField],
        record: Record,
        texts: list[dict[str, Any]],
    ) -> None:
        """Append search texts for record's fields to texts."""
        ...


class BasicSchemaService:
    """Reference SchemaService backed by Pydantic type adapters.

    Args:
        store: Document store used for joins. Required only if a schema
            declares join fields.
        registry: Widget registry used to sanitize widgets nested in area
            fields. Without it, area fields keep their (empty) default.
    """

    def __init__(
        self,
        store: DocumentStore | None = None,
        registry: WidgetRegistry | None = None,
    ) -> None:
        self._store = store
        self._registry = registry

    # === Composition ===

    def compose(self, options: Mapping[str, Any]) -> list[SchemaField]:
        fields: dict[str, SchemaField] = {}
        for raw in options.get("add_fields") or []:
            schema_field = (
                raw if isinstance(raw, SchemaField) else SchemaField.model_validate(raw)
            )
            if schema_field.type == FieldType.JOIN.value and not schema_field.ids_field:
                raise ValueError(
                    f"join field '{schema_field.name}' must declare ids_field"
                )
            # Redefining a field replaces it in its original position
            fields[schema_field.name] = schema_field

        for name in options.get("remove_fields") or []:
            fields.pop(name, None)

        arranged: list[SchemaField] = []
        placed: set[str] = set()
        for group in options.get("arrange_fields") or []:
            for name in group.get("fields") or []:
                if name in fields and name not in placed:
                    arranged.append(fields[name].model_copy(update={"group": group["name"]}))
                    placed.add(name)
        arranged.extend(f for name, f in fields.items() if name not in placed)
        return arranged

    def new_instance(self, schema: Sequence[SchemaField]) -> dict[str, Any]:
        instance: dict[str, Any] = {}
        for schema_field in schema:
            if schema_field.type == FieldType.JOIN.value:
                # Joins persist their ids; the joined documents are derived
                if schema_field.ids_field:
                    instance[schema_field.ids_field] = []
                continue
            if schema_field.type == FieldType.AREA.value:
                instance[schema_field.name] = Area()
                continue
            if schema_field.type == FieldType.ARRAY.value and schema_field.default is None:
                instance[schema_field.name] = []
                continue
            instance[schema_field.name] = copy.deepcopy(schema_field.default)
        return instance

    # === Conversion ===

    async def convert(
        self,
        ctx: RequestContext,
        schema: Sequence[SchemaField],
        data: Mapping[str, Any],
        output: dict[str, Any],
    ) -> None:
        for schema_field in schema:
            if schema_field.type == FieldType.JOIN.value:
                ids_field = schema_field.ids_field
                if ids_field and ids_field in data:
                    output[ids_field] = launder_ids(data[ids_field])
                continue

            if schema_field.name not in data:
                continue

            try:
                output[schema_field.name] = await self._convert_value(
                    ctx, schema_field, data[schema_field.name]
                )
            except ValueError as e:
                # Bad values never fail a save; the default stays in place
                logger.debug(
                    "Keeping default for field %s: %s", schema_field.name, e
                )

    async def _convert_value(
        self, ctx: RequestContext, schema_field: SchemaField, value: Any
    ) -> Any:
        field_type = schema_field.type

        if field_type == FieldType.STRING.value:
            text = _STRING.validate_python(value).strip()
            if schema_field.required and not text:
                raise ValueError("required field is empty")
            return text

        if field_type in _SCALAR_ADAPTERS:
            return _SCALAR_ADAPTERS[field_type].validate_python(value)

        if field_type == FieldType.SELECT.value:
            if not isinstance(value, str):
                raise ValueError("select value must be a string")
            if schema_field.choices is not None and value not in schema_field.choices:
                raise ValueError(f"'{value}' is not a valid choice")
            return value

        if field_type == FieldType.ARRAY.value:
            return await self._convert_array(ctx, schema_field, value)

        if field_type == FieldType.AREA.value:
            return await self._convert_area(ctx, schema_field, value)

        raise ValueError(f"unsupported field type '{field_type}'")

    async def _convert_array(
        self, ctx: RequestContext, schema_field: SchemaField, value: Any
    ) -> list[dict[str, Any]]:
        if not isinstance(value, list):
            raise ValueError("array value must be a list")
        sub_schema = schema_field.sub_schema or ()
        items: list[dict[str, Any]] = []
        for raw in value:
            if not isinstance(raw, Mapping):
                continue
            item = self.new_instance(sub_schema)
            await self.convert(ctx, sub_schema, raw, item)
            item["_id"] = launder_id(raw.get("_id")) or generate_id()
            items.append(item)
        return items

    async def _convert_area(
        self, ctx: RequestContext, schema_field: SchemaField, value: Any
    ) -> Area:
        if isinstance(value, Area):
            raw_items: Any = [widget.to_dict() for widget in value.items]
        elif isinstance(value, Mapping):
            raw_items = value.get("items") or []
        else:
            raw_items = value
        if not isinstance(raw_items, list):
            raise ValueError("area items must be a list")
        if self._registry is None:
            raise ValueError("no widget registry to sanitize area items")

        widgets: list[WidgetRecord] = []
        for raw in raw_items:
            if isinstance(raw, WidgetRecord):
                raw = raw.to_dict()
            if not isinstance(raw, Mapping):
                continue
            type_name = raw.get("type")
            if schema_field.widgets is not None and type_name not in schema_field.widgets:
                logger.debug(
                    "Dropping %r widget not allowed in area %s", type_name, schema_field.name
                )
                continue
            manager = self._registry.get(type_name) if isinstance(type_name, str) else None
            if manager is None:
                logger.debug("Dropping widget of unknown type %r", type_name)
                continue
            widgets.append(await manager.sanitize(ctx, raw))
        return Area(items=widgets)

    # === Joins ===

    async def join(
        self,
        ctx: RequestContext,
        schema: Sequence[SchemaField],
        records: Sequence[Record],
    ) -> None:
        join_fields = [f for f in schema if f.type == FieldType.JOIN.value]
        if not join_fields or not records:
            return
        if self._store is None:
            raise RuntimeError(
                "Cannot join: BasicSchemaService was created without a document store"
            )

        for schema_field in join_fields:
            ids_field = schema_field.ids_field or ""
            # One round trip for the whole batch, whatever its size
            wanted: list[str] = []
            seen: set[str] = set()
            for record in records:
                for doc_id in record.get(ids_field) or []:
                    if doc_id not in seen:
                        seen.add(doc_id)
                        wanted.append(doc_id)

            found = (
                await self._store.find_by_ids(ctx, wanted, doc_type=schema_field.with_type)
                if wanted
                else []
            )
            by_id = {document.id: document for document in found}
            for record in records:
                record.derived[schema_field.name] = [
                    by_id[doc_id]
                    for doc_id in record.get(ids_field) or []
                    if doc_id in by_id
                ]

    # === Search ===

    def index_fields(
        self,
        schema: Sequence[SchemaField],
        record: Record,
        texts: list[dict[str, Any]],
    ) -> None:
        for schema_field in schema:
            if schema_field.type not in (FieldType.STRING.value, FieldType.SELECT.value):
                continue
            value = record.get(schema_field.name)
            if isinstance(value, str) and value.strip():
                texts.append(
                    {
                        "field": schema_field.name,
                        "text": value.strip(),
                        "weight": 1,
                    }
                )
