# src/tessera/widgets/config_base.py
"""Typed configuration for widget types.

Provides:
- Strict validation (reject unknown options)
- A factory method with clear error messages naming the widget module
- Schema-shaping options (add_fields, remove_fields, arrange_fields)

Example usage:
    cfg = WidgetConfig.from_dict(
        {"label": "Hero", "add_fields": [{"name": "title", "type": "string"}]},
        module_name="hero-widgets",
    )
"""

from typing import Any, Self

from pydantic import BaseModel, Field, ValidationError, field_validator


class WidgetConfigError(Exception):
    """Raised when a widget type is misconfigured.

    Always fatal: it is raised while the widget type is constructed, never
    while serving a request.
    """

    pass


class FieldGroup(BaseModel):
    """A named group of fields for arrange_fields."""

    model_config = {"extra": "forbid", "frozen": True}

    name: str
    label: str | None = None
    fields: list[str] = Field(default_factory=list)


class WidgetConfig(BaseModel):
    """Options accepted by every widget type.

    player_data controls what anonymous visitors receive in the widget's
    data attribute:
    - False (default): an empty object
    - True: every permanent field
    - list of names: only those fields
    Actors with editing privileges always receive every permanent field.
    """

    model_config = {"extra": "forbid", "frozen": True}

    label: str
    name: str | None = None
    player_data: bool | list[str] = False
    scene: str | None = None
    defer: bool = False
    template: str = "widget"
    contextual: bool = False
    skip_initial_modal: bool = False
    action: str | None = None
    browser: dict[str, Any] = Field(default_factory=dict)
    add_fields: list[dict[str, Any]] = Field(default_factory=list)
    remove_fields: list[str] = Field(default_factory=list)
    arrange_fields: list[FieldGroup] = Field(default_factory=list)

    @field_validator("label")
    @classmethod
    def validate_label_not_empty(cls, v: str) -> str:
        """Validate that label is not empty or whitespace-only."""
        if not v or not v.strip():
            raise ValueError("label cannot be empty")
        return v

    @classmethod
    def from_dict(cls, config: dict[str, Any], *, module_name: str) -> Self:
        """Create config from dict with clear error on validation failure.

        Args:
            config: Widget module options
            module_name: Module being configured, used in error messages

        Returns:
            Validated configuration instance.

        Raises:
            WidgetConfigError: If the label is missing or any option is invalid.
        """
        if not config.get("label"):
            raise WidgetConfigError(
                f"You must specify the label option for widget module {module_name}"
            )
        try:
            return cls(**config)
        except ValidationError as e:
            raise WidgetConfigError(
                f"Invalid configuration for widget module {module_name}: {e}"
            ) from e

    def compose_options(self) -> dict[str, Any]:
        """Schema-shaping options in the form SchemaService.compose accepts."""
        return {
            "add_fields": [dict(f) for f in self.add_fields],
            "remove_fields": list(self.remove_fields),
            "arrange_fields": [group.model_dump() for group in self.arrange_fields],
        }
