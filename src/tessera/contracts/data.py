# src/tessera/contracts/data.py
"""Content data contracts: schema fields, widgets, areas and documents.

Records keep persistent and derived values apart:

- `fields` holds schema-declared values. They are persisted and may be
  embedded in markup for browser-side code.
- `derived` holds join results and transient flags such as `_edit`. They
  are never persisted and never embedded by default.

Underscore-prefixed keys are only read as derived at the dict boundary
(`from_dict`), where the persisted format still marks them that way.
"""

from __future__ import annotations

import copy
from collections.abc import Collection, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict

from tessera.contracts.enums import MetaType

# A widget's identity and type are owned by the widget type, never the schema
FORBIDDEN_FIELD_NAMES: frozenset[str] = frozenset({"_id", "type"})

_WIDGET_KEYS = frozenset({"_id", "type", "metaType", "_virtual"})
_DOCUMENT_KEYS = frozenset({"_id", "slug", "type"})


class SchemaField(BaseModel):
    """One named, typed field of a widget or document schema.

    Frozen so a composed schema can be cached for the process lifetime.
    Extra attributes are allowed: schema compilers attach their own
    metadata (help text, min/max, ...) and it is passed through untouched.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str
    type: str
    label: str | None = None
    permission: str | None = None
    default: Any = None
    required: bool = False
    contextual: bool = False
    group: str | None = None
    choices: tuple[str, ...] | None = None
    with_type: str | None = None
    ids_field: str | None = None
    widgets: tuple[str, ...] | None = None
    sub_schema: tuple[SchemaField, ...] | None = None

    def to_browser(self) -> dict[str, Any]:
        """JSON-ready representation for the editor runtime."""
        return self.model_dump(mode="json", exclude_none=True)


SchemaField.model_rebuild()


def _to_persisted(value: Any) -> Any:
    """Deep copy a value into its persisted (plain dict/list) form."""
    if isinstance(value, (Area, WidgetRecord)):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {key: _to_persisted(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_persisted(item) for item in value]
    return copy.deepcopy(value)


def _revive(value: Any) -> Any:
    """Turn persisted areas back into Area objects, recursively."""
    if isinstance(value, Mapping):
        if value.get("metaType") == MetaType.AREA:
            return Area.from_dict(value)
        return {key: _revive(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_revive(item) for item in value]
    return value


def _split(
    data: Mapping[str, Any],
    reserved: frozenset[str],
    keep: frozenset[str] = frozenset(),
) -> tuple[dict[str, Any], dict[str, Any]]:
    fields: dict[str, Any] = {}
    derived: dict[str, Any] = {}
    for key, value in data.items():
        if key in reserved:
            continue
        if key.startswith("_") and key not in keep:
            derived[key] = value
        else:
            fields[key] = _revive(value)
    return fields, derived


class _RecordAccess:
    """Mapping-style reads over persistent fields, then derived values.

    Templates use `widget.title` / `widget._images`; Jinja2 falls back to
    item access when attribute access fails, which lands here.
    """

    fields: dict[str, Any]
    derived: dict[str, Any]

    def __getitem__(self, key: str) -> Any:
        if key in self.fields:
            return self.fields[key]
        return self.derived[key]

    def __contains__(self, key: object) -> bool:
        return key in self.fields or key in self.derived

    def get(self, key: str, default: Any = None) -> Any:
        """Return a persistent or derived value, or default."""
        try:
            return self[key]
        except KeyError:
            return default


@dataclass
class WidgetRecord(_RecordAccess):
    """An instance of a widget placed in an area.

    `virtual` marks widgets that are not backed by a persisted document,
    such as live previews in the editor.
    """

    id: str
    type: str
    fields: dict[str, Any] = field(default_factory=dict)
    derived: dict[str, Any] = field(default_factory=dict)
    virtual: bool = False

    @property
    def meta_type(self) -> MetaType:
        return MetaType.WIDGET

    @property
    def editable(self) -> bool:
        """Whether the current actor may edit this widget."""
        return bool(self.derived.get("_edit"))

    def to_dict(self) -> dict[str, Any]:
        """Persisted form. Derived values are never included.

        Identity keys are written last so no field can override them.
        """
        data: dict[str, Any] = _to_persisted(self.fields)
        data["_id"] = self.id
        data["type"] = self.type
        data["metaType"] = MetaType.WIDGET.value
        return data

    def adopt_fields(self, names: Collection[str]) -> None:
        """Move schema fields that were read back as derived into fields.

        from_dict() cannot tell a persisted `_note` field from a derived
        value without the schema; the widget type calls this with its
        underscore-named persistent fields.
        """
        for name in names:
            if name in self.derived and name not in self.fields:
                self.fields[name] = self.derived.pop(name)

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], field_names: Collection[str] = ()
    ) -> WidgetRecord:
        """Read a persisted widget.

        Underscore-prefixed keys are read as derived unless listed in
        field_names.
        """
        fields, derived = _split(data, _WIDGET_KEYS, frozenset(field_names))
        return cls(
            id=str(data.get("_id") or ""),
            type=str(data.get("type") or ""),
            fields=fields,
            derived=derived,
            virtual=bool(data.get("_virtual", False)),
        )


@dataclass
class Area:
    """An ordered list of widgets stored under one field."""

    items: list[WidgetRecord] = field(default_factory=list)

    @property
    def meta_type(self) -> MetaType:
        return MetaType.AREA

    def __iter__(self) -> Iterator[WidgetRecord]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def to_dict(self) -> dict[str, Any]:
        return {
            "metaType": MetaType.AREA.value,
            "items": [widget.to_dict() for widget in self.items],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Area:
        raw_items = data.get("items") or []
        return cls(
            items=[
                WidgetRecord.from_dict(item)
                for item in raw_items
                if isinstance(item, Mapping)
            ]
        )


@dataclass
class Document(_RecordAccess):
    """A persisted document (page, piece, image...) owning areas."""

    id: str
    slug: str
    type: str
    fields: dict[str, Any] = field(default_factory=dict)
    derived: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"_id": self.id, "slug": self.slug, "type": self.type}
        data.update(_to_persisted(self.fields))
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Document:
        fields, derived = _split(data, _DOCUMENT_KEYS)
        return cls(
            id=str(data.get("_id") or ""),
            slug=str(data.get("slug") or ""),
            type=str(data.get("type") or ""),
            fields=fields,
            derived=derived,
        )
