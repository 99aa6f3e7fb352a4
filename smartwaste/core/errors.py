"""
Domain exceptions raised by the dispatch services.

Routers translate them into HTTP responses: validation problems become 400,
missing entities become 404. Expected "nothing to do" outcomes are not
exceptions; they are returned as structured results by the services.
"""

from typing import Iterable


class InvalidStatusError(ValueError):
    """A route status string is not one of the allowed values."""

    def __init__(self, value, allowed: Iterable[str]):
        self.value = value
        self.allowed = tuple(allowed)
        super().__init__(
            f"Invalid status: {value!r} | Allowed: {', '.join(self.allowed)}"
        )


class InvalidTransitionError(ValueError):
    """A status change would move a route backwards (strict mode only)."""

    def __init__(self, route_id: int, current: str, requested: str):
        self.route_id = route_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Route {route_id} cannot move from {current} back to {requested}"
        )


class NotFoundError(LookupError):
    """An operation referenced an id that does not exist."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")
