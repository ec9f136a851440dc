"""Tests for the API-key stage.

Covers:
- Exactly one `key` parameter on every sent request
- Existing query parameters are preserved (q=London stays)
- Missing credential fails with ConfigurationError before any send
- The credential source is consulted per request
"""

import httpx
import pytest

from weatherproxy.errors import ApiErrorCode, ConfigurationError
from weatherproxy.pipeline import ApiKeyStage, build_chain, with_query_param

CURRENT_URL = "https://api.weatherapi.com/v1/current.json"


def recording_send(sent: list[httpx.Request]):
    async def send(request: httpx.Request) -> httpx.Response:
        sent.append(request)
        return httpx.Response(200, request=request)

    return send


async def run(stage: ApiKeyStage, url: str) -> list[httpx.Request]:
    sent: list[httpx.Request] = []
    chain = build_chain([stage], recording_send(sent))
    await chain(httpx.Request("GET", url))
    return sent


class TestKeyInjection:
    @pytest.mark.asyncio
    async def test_appends_key_to_existing_query(self):
        """?q=London is preserved and &key=... is added, not substituted."""
        sent = await run(ApiKeyStage(lambda: "secret"), f"{CURRENT_URL}?q=London")

        assert len(sent) == 1
        assert str(sent[0].url) == f"{CURRENT_URL}?q=London&key=secret"

    @pytest.mark.asyncio
    async def test_exactly_one_key_param(self):
        sent = await run(ApiKeyStage(lambda: "secret"), f"{CURRENT_URL}?q=London")

        assert sent[0].url.params.get_list("key") == ["secret"]

    @pytest.mark.asyncio
    async def test_existing_key_is_replaced_not_duplicated(self):
        sent = await run(ApiKeyStage(lambda: "secret"), f"{CURRENT_URL}?key=stale&q=Paris")

        assert sent[0].url.params.get_list("key") == ["secret"]
        assert sent[0].url.params["q"] == "Paris"

    @pytest.mark.asyncio
    async def test_url_without_query(self):
        sent = await run(ApiKeyStage(lambda: "secret"), CURRENT_URL)

        assert str(sent[0].url) == f"{CURRENT_URL}?key=secret"

    @pytest.mark.asyncio
    async def test_preserves_multiple_params_and_encoding(self):
        sent = await run(ApiKeyStage(lambda: "secret"), f"{CURRENT_URL}?q=New%20York&aqi=no")

        params = sent[0].url.params
        assert params["q"] == "New York"
        assert params["aqi"] == "no"
        assert params["key"] == "secret"

    @pytest.mark.asyncio
    async def test_custom_param_name(self):
        sent = await run(ApiKeyStage(lambda: "secret", param_name="appid"), f"{CURRENT_URL}?q=Oslo")

        assert sent[0].url.params["appid"] == "secret"
        assert "key" not in sent[0].url.params

    @pytest.mark.asyncio
    async def test_credential_read_per_request(self):
        keys = iter(["first", "second"])
        stage = ApiKeyStage(lambda: next(keys))
        sent: list[httpx.Request] = []
        chain = build_chain([stage], recording_send(sent))

        await chain(httpx.Request("GET", CURRENT_URL))
        await chain(httpx.Request("GET", CURRENT_URL))

        assert [r.url.params["key"] for r in sent] == ["first", "second"]


class TestMissingCredential:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("credential", [None, ""])
    async def test_missing_key_aborts_before_send(self, credential):
        sent: list[httpx.Request] = []
        chain = build_chain([ApiKeyStage(lambda: credential)], recording_send(sent))

        with pytest.raises(ConfigurationError) as exc_info:
            await chain(httpx.Request("GET", f"{CURRENT_URL}?q=London"))

        assert sent == []
        assert exc_info.value.code == ApiErrorCode.E_CONFIGURATION
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_configuration_error_is_not_a_network_error(self):
        chain = build_chain([ApiKeyStage(lambda: None)], recording_send([]))

        with pytest.raises(ConfigurationError) as exc_info:
            await chain(httpx.Request("GET", CURRENT_URL))

        assert not isinstance(exc_info.value, httpx.HTTPError)


class TestWithQueryParam:
    def test_adds_param(self):
        url = with_query_param(httpx.URL("https://example.test/a?x=1"), "key", "k")

        assert url.params.multi_items() == [("x", "1"), ("key", "k")]

    def test_replaces_param_in_place(self):
        url = with_query_param(httpx.URL("https://example.test/a?key=old&x=1"), "key", "new")

        assert url.params.multi_items() == [("key", "new"), ("x", "1")]
