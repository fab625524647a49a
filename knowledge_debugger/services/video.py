"""YouTube oEmbed client (video title lookup)."""

import logging
from typing import Optional

import httpx

from knowledge_debugger.config import settings

log = logging.getLogger(__name__)


class VideoInfoClient:
    def __init__(self, client: Optional[httpx.Client] = None):
        self.base = settings.YOUTUBE_OEMBED_URL
        self.client = client or httpx.Client(timeout=settings.HTTP_TIMEOUT)

    def get_metadata(self, video_url: str) -> dict:
        """Fetch oEmbed metadata (title, author_name, ...) for a video."""
        r = self.client.get(self.base, params={"url": video_url, "format": "json"})
        r.raise_for_status()
        return r.json()

    def get_title(self, video_url: str) -> Optional[str]:
        """Video title, or None when the lookup fails."""
        try:
            data = self.get_metadata(video_url)
        except (httpx.HTTPError, ValueError) as e:
            log.warning(f"Video title lookup failed for {video_url}: {e}")
            return None
        title = data.get("title") if isinstance(data, dict) else None
        return title.strip() if isinstance(title, str) and title.strip() else None
