"""Declarative request templates for typed upstream clients.

A RequestTemplate describes one logical upstream operation: HTTP method,
a path relative to the client's base URL (may contain ``{name}``
placeholders), and query parameters bound to named arguments.

    CURRENT_WEATHER = RequestTemplate("GET", "current.json", query={"q": "city"})
    request = build_request(client, CURRENT_WEATHER, city="London")
    # GET {base_url}current.json?q=London
"""

import string
from dataclasses import dataclass, field
from urllib.parse import quote

import httpx


class TemplateBindingError(ValueError):
    """A template placeholder has no value bound to it."""


@dataclass(frozen=True)
class RequestTemplate:
    """Method, path pattern, and parameter bindings for one upstream call.

    Attributes:
        method: HTTP method (e.g., "GET")
        path: Path relative to the base URL; ``{name}`` placeholders are
            filled from bindings and URL-quoted
        query: Query parameter name -> binding name
    """

    method: str
    path: str
    query: dict[str, str] = field(default_factory=dict)

    @property
    def path_bindings(self) -> tuple[str, ...]:
        """Names of the placeholders used in the path."""
        return tuple(
            name for _, name, _, _ in string.Formatter().parse(self.path) if name is not None
        )

    def render(self, **bindings: object) -> tuple[str, dict[str, str]]:
        """Fill the template.

        Returns:
            (path, query params) ready to hand to httpx.

        Raises:
            TemplateBindingError: If a placeholder or query binding has no value.
        """
        missing = [
            name
            for name in (*self.path_bindings, *self.query.values())
            if bindings.get(name) is None
        ]
        if missing:
            raise TemplateBindingError(f"Missing template bindings: {sorted(set(missing))}")

        path = self.path.format(
            **{name: quote(str(bindings[name]), safe="") for name in self.path_bindings}
        )
        params = {param: str(bindings[name]) for param, name in self.query.items()}
        return path, params


def build_request(
    client: httpx.AsyncClient, template: RequestTemplate, **bindings: object
) -> httpx.Request:
    """Build an outbound request from a template against the client's base URL."""
    path, params = template.render(**bindings)
    return client.build_request(template.method, path, params=params)
