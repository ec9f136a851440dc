"""Tests for declarative request templates."""

import httpx
import pytest

from weatherproxy.services.request_template import (
    RequestTemplate,
    TemplateBindingError,
    build_request,
)
from weatherproxy.services.weather_client import CURRENT_WEATHER


class TestRender:
    def test_query_binding(self):
        template = RequestTemplate("GET", "current.json", query={"q": "city"})

        path, params = template.render(city="London")

        assert path == "current.json"
        assert params == {"q": "London"}

    def test_path_placeholders_are_quoted(self):
        template = RequestTemplate("GET", "cities/{city}/current.json")

        path, params = template.render(city="São Paulo/Centro")

        assert path == "cities/S%C3%A3o%20Paulo%2FCentro/current.json"
        assert params == {}

    def test_non_string_bindings_are_stringified(self):
        template = RequestTemplate("GET", "forecast.json", query={"q": "city", "days": "days"})

        _, params = template.render(city="Oslo", days=3)

        assert params == {"q": "Oslo", "days": "3"}

    def test_missing_binding_raises(self):
        template = RequestTemplate("GET", "cities/{city}", query={"lang": "lang"})

        with pytest.raises(TemplateBindingError, match="city"):
            template.render(lang="en")

    def test_none_binding_counts_as_missing(self):
        with pytest.raises(TemplateBindingError):
            CURRENT_WEATHER.render(city=None)

    def test_extra_bindings_ignored(self):
        _, params = CURRENT_WEATHER.render(city="Rome", unused="x")

        assert params == {"q": "Rome"}

    def test_path_bindings(self):
        template = RequestTemplate("GET", "a/{first}/b/{second}")

        assert template.path_bindings == ("first", "second")


class TestBuildRequest:
    def test_resolves_against_base_url(self):
        client = httpx.AsyncClient(base_url="https://api.weatherapi.com/v1/")

        request = build_request(client, CURRENT_WEATHER, city="London")

        assert request.method == "GET"
        assert str(request.url) == "https://api.weatherapi.com/v1/current.json?q=London"

    def test_city_with_spaces_is_encoded(self):
        client = httpx.AsyncClient(base_url="https://api.weatherapi.com/v1/")

        request = build_request(client, CURRENT_WEATHER, city="New York")

        assert request.url.params["q"] == "New York"
        assert request.url.path == "/v1/current.json"

    def test_current_weather_template(self):
        assert CURRENT_WEATHER.method == "GET"
        assert CURRENT_WEATHER.path == "current.json"
        assert CURRENT_WEATHER.query == {"q": "city"}
