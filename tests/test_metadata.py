"""Tests for the YouTube metadata lookup client."""

from dataclasses import replace
from unittest.mock import MagicMock, patch

import httpx
import pytest

from vidlogd.metadata import (
    MISSING_KEY_ERROR,
    MetadataClient,
    VideoMetadata,
    extract_video_id,
    is_valid_youtube_url,
)
from vidlogd.types import default_settings


class FakeResponse:
    """Minimal httpx.Response stand-in."""

    def __init__(self, status_code=200, json_data=None):
        self.status_code = status_code
        self._json = json_data

    def json(self):
        if self._json is None:
            raise ValueError("no json")
        return self._json


SNIPPET_RESPONSE = {
    "items": [{
        "snippet": {
            "title": "Never Gonna Give You Up",
            "channelTitle": "Rick Astley",
            "publishedAt": "2009-10-25T06:57:33Z",
        }
    }]
}


@pytest.fixture
def mock_client():
    """MetadataClient with a mocked httpx.Client."""
    with patch("vidlogd.metadata.httpx.Client") as MockClient:
        client_instance = MagicMock()
        MockClient.return_value = client_instance
        mc = MetadataClient("test-key")
        yield mc, client_instance


class TestUrlParsing:

    @pytest.mark.parametrize("url", [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtube.com/watch?v=dQw4w9WgXcQ&t=42",
        "https://m.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ",
        "https://www.youtube.com/embed/dQw4w9WgXcQ",
    ])
    def test_valid(self, url):
        assert is_valid_youtube_url(url)
        assert extract_video_id(url) == "dQw4w9WgXcQ"

    @pytest.mark.parametrize("url", [
        "",
        "https://vimeo.com/12345",
        "https://youtu.be/",
        "https://www.youtube.com/watch",
        "https://www.youtube.com/embed/",
        "https://www.youtube.com/channel/UC123",
        "not a url",
    ])
    def test_invalid(self, url):
        assert not is_valid_youtube_url(url)


class TestFetch:

    def test_success(self, mock_client):
        mc, http = mock_client
        http.get.return_value = FakeResponse(json_data=SNIPPET_RESPONSE)

        result = mc.fetch("https://youtu.be/dQw4w9WgXcQ")

        assert result.ok
        assert result.metadata.title == "Never Gonna Give You Up"
        assert result.metadata.creator == "Rick Astley"
        assert result.metadata.release_date == "2009-10-25"
        params = http.get.call_args[1]["params"]
        assert params == {"part": "snippet", "id": "dQw4w9WgXcQ", "key": "test-key"}

    def test_quota_exceeded(self, mock_client):
        mc, http = mock_client
        http.get.return_value = FakeResponse(status_code=403)
        result = mc.fetch("https://youtu.be/x")
        assert not result.ok
        assert result.error == "quota exceeded or invalid key"

    def test_other_http_error(self, mock_client):
        mc, http = mock_client
        http.get.return_value = FakeResponse(status_code=500)
        assert mc.fetch("https://youtu.be/x").error == "youtube error: 500"

    def test_not_found(self, mock_client):
        mc, http = mock_client
        http.get.return_value = FakeResponse(json_data={"items": []})
        assert mc.fetch("https://youtu.be/x").error == "video not found"

    def test_unparsable_body(self, mock_client):
        mc, http = mock_client
        http.get.return_value = FakeResponse(json_data=None)
        assert mc.fetch("https://youtu.be/x").error == "failed to parse response"

    def test_transport_error(self, mock_client):
        mc, http = mock_client
        http.get.side_effect = httpx.ConnectError("down")
        result = mc.fetch("https://youtu.be/x")
        assert result.error.startswith("failed to fetch video data")

    def test_invalid_url_skips_request(self, mock_client):
        mc, http = mock_client
        assert mc.fetch("https://example.com/v").error == "invalid YouTube URL"
        http.get.assert_not_called()

    @pytest.mark.parametrize("body", [
        [],
        "items",
        {"items": {"a": 1}},
        {"items": [None]},
        {"items": ["x"]},
        {"items": [{"snippet": "title"}]},
        {"items": [{"snippet": None}]},
    ])
    def test_malformed_body_is_parse_error(self, mock_client, body):
        mc, http = mock_client
        http.get.return_value = FakeResponse(json_data=body)
        assert mc.fetch("https://youtu.be/x").error == "failed to parse response"

    def test_non_string_snippet_fields_are_blank(self, mock_client):
        mc, http = mock_client
        http.get.return_value = FakeResponse(json_data={
            "items": [{"snippet": {"title": 5, "channelTitle": None, "publishedAt": 20200101}}]
        })
        result = mc.fetch("https://youtu.be/x")
        assert result.ok
        assert result.metadata == VideoMetadata("", "", "")

    def test_missing_published_at(self, mock_client):
        mc, http = mock_client
        http.get.return_value = FakeResponse(json_data={"items": [{"snippet": {"title": "t"}}]})
        result = mc.fetch("https://youtu.be/x")
        assert result.metadata.release_date == ""


class TestApiKeyResolution:

    def test_missing_key(self):
        with patch("vidlogd.metadata.httpx.Client"):
            mc = MetadataClient()
            assert mc.fetch("https://youtu.be/x").error == MISSING_KEY_ERROR

    def test_settings_key_used(self, settings_store):
        settings_store.save(replace(default_settings(), api_key="from-settings"))
        with patch("vidlogd.metadata.httpx.Client") as MockClient:
            http = MockClient.return_value
            http.get.return_value = FakeResponse(json_data=SNIPPET_RESPONSE)
            MetadataClient(settings_store=settings_store).fetch("https://youtu.be/x")
        assert http.get.call_args[1]["params"]["key"] == "from-settings"

    def test_env_fallback(self, settings_store, monkeypatch):
        monkeypatch.setenv("YOUTUBE_API_KEY", "from-env")
        with patch("vidlogd.metadata.httpx.Client") as MockClient:
            http = MockClient.return_value
            http.get.return_value = FakeResponse(json_data=SNIPPET_RESPONSE)
            MetadataClient(settings_store=settings_store).fetch("https://youtu.be/x")
        assert http.get.call_args[1]["params"]["key"] == "from-env"

    def test_close(self):
        with patch("vidlogd.metadata.httpx.Client") as MockClient:
            with MetadataClient("k"):
                pass
        MockClient.return_value.close.assert_called_once()
