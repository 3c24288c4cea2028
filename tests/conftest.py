# tests/conftest.py
"""Shared test fixtures and recording doubles.

Probes:
- CountingSchemaService records every join() call, so tests can assert a
  batch of N widgets costs exactly one join
- RecordingReplayer records every replay() call made by virtual batches

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/widgets/
"""

import logging
import os
from collections.abc import Callable, Iterator, Sequence
from typing import Any

import pytest
import structlog
from hypothesis import Phase, Verbosity, settings

from tessera.contracts import Actor, Document, RequestContext, SchemaField, WidgetRecord
from tessera.core.permissions import CapabilityPermissions
from tessera.core.store import MemoryDocumentStore
from tessera.core.templates import WidgetTemplates
from tessera.schemas.service import BasicSchemaService
from tessera.widgets.base import BaseWidgetType
from tessera.widgets.context import WidgetServices
from tessera.widgets.manager import WidgetRegistry

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Probes
# =============================================================================


class CountingSchemaService(BasicSchemaService):
    """BasicSchemaService that records the batches passed to join()."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.join_calls: list[list[Any]] = []

    async def join(
        self,
        ctx: RequestContext,
        schema: Sequence[SchemaField],
        records: Sequence[Any],
    ) -> None:
        self.join_calls.append(list(records))
        await super().join(ctx, schema, records)


class RecordingReplayer:
    """ContentReplayer that records calls instead of loading anything."""

    def __init__(self) -> None:
        self.calls: list[tuple[list[Any], bool]] = []

    async def replay(
        self,
        ctx: RequestContext,
        records: Sequence[Document | WidgetRecord],
        *,
        joins: bool = True,
    ) -> None:
        self.calls.append((list(records), joins))


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo configure_logging() so handlers never outlive captured streams."""
    yield
    structlog.reset_defaults()
    for handler in logging.root.handlers[:]:
        if type(handler) is logging.StreamHandler:
            logging.root.removeHandler(handler)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def registry() -> WidgetRegistry:
    return WidgetRegistry()


@pytest.fixture
def schemas(store: MemoryDocumentStore, registry: WidgetRegistry) -> CountingSchemaService:
    return CountingSchemaService(store=store, registry=registry)


@pytest.fixture
def replayer() -> RecordingReplayer:
    return RecordingReplayer()


@pytest.fixture
def templates() -> WidgetTemplates:
    """Inline templates for the widget modules used across tests."""
    return WidgetTemplates(
        templates={
            "hero-widgets/widget.html": "<h1>{{ widget.title }}</h1>",
            "rich-text-widgets/widget.html": "{{ widget.content | safe }}",
            "images-widgets/widget.html": (
                "{% for image in widget['_images'] %}"
                '<img src="{{ image.url }}">'
                "{% endfor %}"
            ),
        }
    )


@pytest.fixture
def services(
    schemas: CountingSchemaService,
    store: MemoryDocumentStore,
    templates: WidgetTemplates,
    replayer: RecordingReplayer,
) -> WidgetServices:
    return WidgetServices(
        schemas=schemas,
        permissions=CapabilityPermissions(),
        store=store,
        templates=templates,
        replayer=replayer,
    )


@pytest.fixture
def make_widget_type(
    services: WidgetServices, registry: WidgetRegistry
) -> Callable[..., BaseWidgetType]:
    """Factory building (and registering) a configured widget type.

    Usage:
        hero = make_widget_type("hero-widgets", add_fields=[...])
        rich = make_widget_type("rich-text-widgets", cls=RichTextWidget)
    """

    def factory(
        module_name: str = "hero-widgets",
        cls: type[BaseWidgetType] = BaseWidgetType,
        *,
        register: bool = True,
        **options: Any,
    ) -> BaseWidgetType:
        options.setdefault("label", module_name.replace("-widgets", "").title())
        widget_type = cls(module_name, options, services)
        if register:
            registry.register(widget_type)
        return widget_type

    return factory


@pytest.fixture
def anonymous() -> RequestContext:
    return RequestContext()


@pytest.fixture
def editor() -> RequestContext:
    """Authenticated actor holding the `edit` capability only."""
    return RequestContext(actor=Actor(id="editor-1", permissions=frozenset({"edit"})))


@pytest.fixture
def admin() -> RequestContext:
    """Authenticated actor holding the superuser capability."""
    return RequestContext(actor=Actor(id="admin-1", permissions=frozenset({"admin"})))
