import requests

from photomirror.fetcher import InventoryFetcher

from conftest import FakeResponse, api_item


def _page(prefix, count, next_token=None):
    body = {"mediaItems": [api_item(f"{prefix}-{i}", f"{prefix}-{i}.jpg") for i in range(count)]}
    if next_token is not None:
        body["nextPageToken"] = next_token
    return FakeResponse(json_data=body)


def test_pagination_collects_all_pages_in_order(http, token_provider):
    http.pages[None] = _page("p1", 50, "T2")
    http.pages["T2"] = _page("p2", 50, "T3")
    http.pages["T3"] = _page("p3", 10)

    fetcher = InventoryFetcher(token_provider)
    items = fetcher.fetch()

    assert len(items) == 110
    expected = (
        [f"p1-{i}" for i in range(50)]
        + [f"p2-{i}" for i in range(50)]
        + [f"p3-{i}" for i in range(10)]
    )
    assert [item.id for item in items] == expected
    assert fetcher.last_failure is None


def test_requests_carry_page_size_cursor_and_bearer_token(http, token_provider):
    http.pages[None] = _page("a", 2, "next")
    http.pages["next"] = _page("b", 1)

    InventoryFetcher(token_provider).fetch()

    assert [c["params"] for c in http.calls] == [
        {"pageSize": 50},
        {"pageSize": 50, "pageToken": "next"},
    ]
    for call in http.calls:
        assert call["headers"]["Authorization"] == "Bearer test-token"
    # token is requested before each page
    assert token_provider.calls == 2


def test_failed_page_returns_partial_inventory(http, token_provider):
    http.pages[None] = _page("p1", 50, "T2")
    http.pages["T2"] = FakeResponse(status_code=500, text="backend error")

    fetcher = InventoryFetcher(token_provider)
    items = fetcher.fetch()

    assert len(items) == 50
    assert fetcher.last_failure is not None
    assert fetcher.last_failure.page_number == 2
    assert fetcher.last_failure.status == 500
    # no retry
    assert len(http.calls) == 2


def test_first_page_failure_returns_empty(http, token_provider):
    http.pages[None] = requests.ConnectionError("connection refused")

    fetcher = InventoryFetcher(token_provider)

    assert fetcher.fetch() == []
    assert fetcher.last_failure.page_number == 1


def test_malformed_body_stops_pagination(http, token_provider):
    http.pages[None] = _page("p1", 3, "T2")
    http.pages["T2"] = FakeResponse(status_code=200, json_data=None, text="<html>")

    fetcher = InventoryFetcher(token_provider)
    items = fetcher.fetch()

    assert [item.id for item in items] == ["p1-0", "p1-1", "p1-2"]
    assert fetcher.last_failure is not None


def test_unparseable_item_drops_whole_page(http, token_provider):
    http.pages[None] = _page("p1", 2, "T2")
    broken = {"mediaItems": [api_item("ok", "ok.jpg"), {"id": "x", "filename": "x.jpg"}], "nextPageToken": "T3"}
    http.pages["T2"] = FakeResponse(json_data=broken)

    fetcher = InventoryFetcher(token_provider)
    items = fetcher.fetch()

    assert [item.id for item in items] == ["p1-0", "p1-1"]
    assert "baseUrl" in str(fetcher.last_failure)


def test_page_without_media_items_and_empty_token_ends_listing(http, token_provider):
    http.pages[None] = _page("p1", 1, "T2")
    http.pages["T2"] = FakeResponse(json_data={"nextPageToken": ""})

    items = InventoryFetcher(token_provider).fetch()

    assert len(items) == 1
    assert len(http.calls) == 2


def test_duplicate_ids_are_kept(http, token_provider):
    body = {"mediaItems": [api_item("same", "a.jpg"), api_item("same", "a.jpg")]}
    http.pages[None] = FakeResponse(json_data=body)

    items = InventoryFetcher(token_provider).fetch()

    assert len(items) == 2
