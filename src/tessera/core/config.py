"""
Configuration schema and loading for tessera sites.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.

Widget module options are validated later, by the widget type that owns
them, because each widget type may extend the option set.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class WidgetModuleSettings(BaseModel):
    """One configured widget module.

    Example YAML:
        widgets:
          - module: hero-widgets
            plugin: widget
            options:
              label: Hero
              add_fields:
                - {name: title, type: string, default: untitled}
    """

    model_config = {"frozen": True}

    module: str = Field(description="Module name; the widget type name derives from it")
    plugin: str = Field(
        default="widget",
        description="Registered widget plugin implementing this module",
    )
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Widget type options (label, add_fields, player_data, ...)",
    )

    @field_validator("module")
    @classmethod
    def validate_module_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("module cannot be empty")
        return v


class DocumentStoreSettings(BaseModel):
    """Where documents come from.

    With no path, the site starts with an empty in-memory store.
    """

    model_config = {"frozen": True}

    path: str | None = Field(
        default=None,
        description="JSON file holding a list of documents",
    )


class TemplateSettings(BaseModel):
    """Template lookup configuration."""

    model_config = {"frozen": True}

    directories: list[str] = Field(
        default_factory=list,
        description="Directories searched for <module>/<template>.html",
    )


class PermissionSettings(BaseModel):
    """Permission evaluation configuration."""

    model_config = {"frozen": True}

    superuser_capability: str | None = Field(
        default="admin",
        description="Capability that implies every other capability",
    )


class DocumentTypeSettings(BaseModel):
    """Schema of a document type, used for document-level joins."""

    model_config = {"frozen": True}

    add_fields: list[dict[str, Any]] = Field(default_factory=list)


class LoggingSettings(BaseModel):
    """Logging configuration."""

    model_config = {"frozen": True}

    level: str = Field(default="INFO", description="Log level name")
    json_output: bool = Field(default=False, description="Emit JSON log lines")


class TesseraSettings(BaseModel):
    """Top-level settings for a tessera site."""

    model_config = {"frozen": True}

    widgets: list[WidgetModuleSettings] = Field(
        default_factory=list,
        description="Widget modules to register, in order",
    )
    store: DocumentStoreSettings = Field(default_factory=DocumentStoreSettings)
    templates: TemplateSettings = Field(default_factory=TemplateSettings)
    permissions: PermissionSettings = Field(default_factory=PermissionSettings)
    document_types: dict[str, DocumentTypeSettings] = Field(default_factory=dict)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @model_validator(mode="after")
    def validate_unique_modules(self) -> "TesseraSettings":
        """Each widget module may be configured only once."""
        seen: set[str] = set()
        for widget in self.widgets:
            if widget.module in seen:
                raise ValueError(f"Widget module '{widget.module}' configured twice")
            seen.add(widget.module)
        return self


def load_settings(config_path: Path) -> TesseraSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (TESSERA_*) - highest priority
    2. Config file (settings.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: TESSERA_STORE__PATH for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated TesseraSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Explicit check for file existence (Dynaconf silently accepts missing files)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="TESSERA",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase top-level keys; Pydantic expects lowercase
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {
        k.lower(): v
        for k, v in dynaconf_settings.as_dict().items()
        if k not in internal_keys
    }
    return TesseraSettings(**raw_config)


def resolve_config(settings: TesseraSettings) -> dict[str, Any]:
    """Convert validated settings to a plain dict (for diagnostics output)."""
    return settings.model_dump(mode="json")
