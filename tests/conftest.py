# tests/conftest.py
import pytest

from photomirror import google_photos_api as gapi
from photomirror.config import LIBRARY_API_URL
from photomirror.models import RemoteMediaItem

LIST_URL = f"{LIBRARY_API_URL}/mediaItems"


class StubTokenProvider:
    """Hands out a fixed token and counts how often it was asked."""

    def __init__(self, token="test-token"):
        self.token = token
        self.calls = 0

    def current_token(self):
        self.calls += 1
        return self.token


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, content=b"", text=""):
        self.status_code = status_code
        self._json = json_data
        self.content = content
        self.text = text

    def json(self):
        if self._json is None:
            raise ValueError("No JSON object could be decoded")
        return self._json


class FakeHTTP:
    """
    Stands in for requests.get. Listing pages are keyed by pageToken
    (None for the first page), downloads by full URL.
    """

    def __init__(self):
        self.pages = {}
        self.media = {}
        self.calls = []

    def get(self, url, headers=None, params=None, timeout=None):
        params = dict(params or {})
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if url == LIST_URL:
            outcome = self.pages[params.get("pageToken")]
        else:
            outcome = self.media.get(url, FakeResponse(status_code=404, text="not found"))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def download_calls(self):
        return [c["url"] for c in self.calls if c["url"] != LIST_URL]


def api_item(media_id, filename, creation_time="2023-05-01T10:00:00Z"):
    return {
        "id": media_id,
        "filename": filename,
        "baseUrl": f"https://lh3.example.com/{media_id}",
        "mimeType": "image/jpeg",
        "mediaMetadata": {
            "creationTime": creation_time,
            "width": "4032",
            "height": "3024",
            "photo": {},
        },
    }


def remote_item(media_id, filename, **kwargs):
    return RemoteMediaItem.from_api(api_item(media_id, filename, **kwargs))


@pytest.fixture
def token_provider():
    return StubTokenProvider()


@pytest.fixture
def http(monkeypatch):
    fake = FakeHTTP()
    monkeypatch.setattr(gapi.requests, "get", fake.get)
    return fake
