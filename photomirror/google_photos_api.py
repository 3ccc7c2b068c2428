import logging
from typing import Optional

import requests

from photomirror.config import DEFAULT_TIMEOUT, DOWNLOAD_SUFFIX, LIBRARY_API_URL, PAGE_SIZE

logger = logging.getLogger(__name__)


class RemoteRequestError(Exception):
    """
    A request to the Photos Library API failed (transport error, bad status or bad body).
    """

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


def get_headers(token: str):
    """
    Return headers for authorized requests to Google Photos.
    """
    return {
        "Authorization": f"Bearer {token}",
    }


def list_media_items(token: str, page_token: Optional[str] = None,
                     page_size: int = PAGE_SIZE, timeout: float = DEFAULT_TIMEOUT) -> dict:
    """
    Fetch one page of mediaItems.list.
    Returns the decoded JSON object; raises RemoteRequestError otherwise.
    """
    url = f"{LIBRARY_API_URL}/mediaItems"
    params = {"pageSize": page_size}
    if page_token:
        params["pageToken"] = page_token

    try:
        resp = requests.get(url, headers=get_headers(token), params=params, timeout=timeout)
    except requests.RequestException as e:
        raise RemoteRequestError(f"request failed: {e}") from e

    if resp.status_code != 200:
        raise RemoteRequestError(f"HTTP {resp.status_code}: {resp.text[:200]}", status=resp.status_code)

    try:
        data = resp.json()
    except ValueError as e:
        raise RemoteRequestError(f"response is not JSON: {e}", status=resp.status_code) from e

    if not isinstance(data, dict):
        raise RemoteRequestError("response body is not a JSON object", status=resp.status_code)
    return data


def download_url(base_url: str, suffix: str = DOWNLOAD_SUFFIX) -> str:
    """
    A baseUrl only yields bytes once a size/export directive is appended.
    """
    return base_url + suffix


def download_media(token: str, url: str, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """
    GET the media bytes at an already-suffixed download URL.
    """
    logger.debug("GET %s", url)
    try:
        resp = requests.get(url, headers=get_headers(token), timeout=timeout)
    except requests.RequestException as e:
        raise RemoteRequestError(f"request failed: {e}") from e

    if resp.status_code != 200:
        raise RemoteRequestError(f"HTTP {resp.status_code}", status=resp.status_code)
    return resp.content
