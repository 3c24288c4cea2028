"""Permission evaluation for schema fields.

The widget pipeline only ever asks one question: may the actor of this
request exercise a named capability? Implementations answer it however the
hosting system models roles.
"""

from typing import Protocol, runtime_checkable

from tessera.contracts import RequestContext


@runtime_checkable
class PermissionService(Protocol):
    """Protocol for permission evaluation backends."""

    def can(self, ctx: RequestContext, capability: str) -> bool:
        """Return True if the request's actor holds capability.

        Args:
            ctx: Request context carrying the actor
            capability: Capability tag declared on a schema field

        Returns:
            True if allowed. Anonymous requests are never allowed.
        """
        ...


class CapabilityPermissions:
    """Grants exactly the capabilities listed on the actor.

    An actor holding the superuser capability is granted everything.
    """

    def __init__(self, superuser_capability: str | None = "admin") -> None:
        self._superuser = superuser_capability

    def can(self, ctx: RequestContext, capability: str) -> bool:
        if ctx.actor is None:
            return False
        granted = ctx.actor.permissions
        if self._superuser is not None and self._superuser in granted:
            return True
        return capability in granted
