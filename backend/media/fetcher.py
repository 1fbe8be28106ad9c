import base64

import requests

from backend.verification.errors import MediaFetchError


class MediaFetcher:
    """Downloads media from storage. No retries: a failed download is fatal."""

    def __init__(self, timeout: int = 30):
        self.timeout = timeout

    def download(self, url: str) -> bytes:
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise MediaFetchError(f"Failed to fetch media from storage: {url} ({e})") from e
        return response.content

    def fetch_base64(self, url: str) -> str:
        data = self.download(url)
        print(f"[MediaFetcher] Fetched {len(data)} bytes from {url}")
        return base64.b64encode(data).decode("ascii")
