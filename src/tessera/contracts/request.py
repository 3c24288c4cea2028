"""Per-request state shared by every stage of the widget pipeline."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from tessera.contracts.data import WidgetRecord


@dataclass(frozen=True)
class Actor:
    """An authenticated user and the capabilities granted to them."""

    id: str
    permissions: frozenset[str] = frozenset()
    name: str | None = None


@dataclass
class RequestContext:
    """Context passed to sanitize, load, output and filter operations.

    Attributes:
        actor: Authenticated actor, or None for anonymous requests
        scene: Asset scene requested by loaded widgets (e.g. "user")
        deferred: Widgets whose load step waits until just before rendering,
            keyed by widget type name, in page order
    """

    actor: Actor | None = None
    scene: str | None = None
    deferred: dict[str, list[WidgetRecord]] = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return self.actor is not None

    def defer(self, type_name: str, widgets: Iterable[WidgetRecord]) -> None:
        """Queue widgets for a single late load of their type."""
        self.deferred.setdefault(type_name, []).extend(widgets)

    def take_deferred(self) -> dict[str, list[WidgetRecord]]:
        """Remove and return everything queued so far."""
        pending = self.deferred
        self.deferred = {}
        return pending
