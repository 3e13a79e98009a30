"""Route descriptors for the scheduled event endpoints."""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class CompiledRoute:
    """Route with all path parameters substituted."""
    method: str
    path: str
    params: Tuple[str, ...]


@dataclass(frozen=True)
class Route:
    """HTTP method plus a path template with positional parameters."""
    method: str
    template: str

    def compile(self, *params) -> CompiledRoute:
        """
        Substitute path parameters in order.

        Args:
            *params: Values for each ``{}`` placeholder in the template

        Returns:
            CompiledRoute ready for the executor

        Raises:
            ValueError: If the parameter count does not match the template
        """
        expected = self.template.count('{}')
        if len(params) != expected:
            raise ValueError(
                f"Route {self.template} expects {expected} parameters, "
                f"got {len(params)}"
            )
        values = tuple(str(param) for param in params)
        return CompiledRoute(
            method=self.method,
            path=self.template.format(*values),
            params=values
        )


GET_SCHEDULED_EVENT = Route('GET', 'guilds/{}/scheduled-events/{}')
GET_SCHEDULED_EVENTS = Route('GET', 'guilds/{}/scheduled-events')
MODIFY_SCHEDULED_EVENT = Route('PATCH', 'guilds/{}/scheduled-events/{}')
DELETE_SCHEDULED_EVENT = Route('DELETE', 'guilds/{}/scheduled-events/{}')
GET_SCHEDULED_EVENT_USERS = Route('GET', 'guilds/{}/scheduled-events/{}/users')
