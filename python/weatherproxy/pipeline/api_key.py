"""API-key stage: attaches the upstream credential as a query parameter.

weatherapi.com authenticates with ``?key=<credential>``. The stage sets
exactly one ``key`` parameter and keeps every other parameter of the
existing query string. Without a configured credential it refuses to send.
"""

from collections.abc import Callable

import httpx

from weatherproxy.errors import ConfigurationError
from weatherproxy.logging import get_logger
from weatherproxy.pipeline.chain import Send, Stage

logger = get_logger(__name__)

API_KEY_PARAM = "key"

CredentialSource = Callable[[], str | None]


class ApiKeyStage(Stage):
    """Inject the credential returned by ``credential_source`` into each request.

    Args:
        credential_source: Zero-argument lookup returning the credential, or
            None when it is not configured. Called once per request.
        param_name: Query parameter carrying the credential.
    """

    def __init__(self, credential_source: CredentialSource, param_name: str = API_KEY_PARAM):
        self._credential_source = credential_source
        self._param_name = param_name

    async def handle(self, request: httpx.Request, call_next: Send) -> httpx.Response:
        credential = self._credential_source()
        if not credential:
            logger.error("upstream.request.blocked", reason="missing_api_key")
            raise ConfigurationError("Weather API key is not configured")

        request.url = with_query_param(request.url, self._param_name, credential)
        return await call_next(request)


def with_query_param(url: httpx.URL, name: str, value: str) -> httpx.URL:
    """Return ``url`` with ``name`` set to ``value``.

    Existing parameters are preserved in order; a previous value of ``name``
    is replaced so the result carries it exactly once.
    """
    return url.copy_set_param(name, value)
