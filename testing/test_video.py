"""Tests for the oEmbed title lookup."""

import httpx

from knowledge_debugger.services.video import VideoInfoClient


def make_client(handler):
    return VideoInfoClient(client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_get_title_reads_oembed_payload():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url.params.get("url")
        seen["format"] = request.url.params.get("format")
        return httpx.Response(200, json={"title": "  Intro to Widgets ", "author_name": "Chan"})

    title = make_client(handler).get_title("https://youtu.be/abc")

    assert title == "Intro to Widgets"
    assert seen == {"url": "https://youtu.be/abc", "format": "json"}


def test_get_title_returns_none_on_http_error():
    client = make_client(lambda request: httpx.Response(404, text="Not Found"))

    assert client.get_title("https://youtu.be/missing") is None


def test_get_title_returns_none_on_bad_payload():
    client = make_client(lambda request: httpx.Response(200, text="<html>"))

    assert client.get_title("https://youtu.be/abc") is None
