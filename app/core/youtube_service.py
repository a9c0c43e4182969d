"""Thin client for the YouTube Data API v3 (search + video details).

Only the two endpoints needed to resolve lesson videos are wrapped. A missing
API key or an exhausted quota (HTTP 403) yields an empty list; any other
transport or payload problem raises :class:`VideoLookupError`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from app.core.config import settings

logger = logging.getLogger(__name__)

YOUTUBE_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
YOUTUBE_VIDEOS_URL = "https://www.googleapis.com/youtube/v3/videos"


class VideoLookupError(RuntimeError):
    pass


@dataclass(frozen=True)
class VideoMetadata:
    video_id: str
    title: str
    description: str
    channel_title: str
    published_at: str
    thumbnail_url: Optional[str]
    view_count: int
    duration: str


class YouTubeClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.YOUTUBE_API_KEY
        self.timeout = timeout if timeout is not None else settings.YOUTUBE_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def search_videos(
        self,
        query: str,
        max_results: int = 3,
        *,
        embeddable_only: bool = False,
    ) -> List[VideoMetadata]:
        """Return up to ``max_results`` videos for ``query``, ranked by relevance."""
        if not self.is_configured:
            logger.debug("YouTube lookup skipped (no API key) for %r", query)
            return []

        search_params: Dict[str, Any] = {
            "part": "snippet",
            "q": query,
            "type": "video",
            "maxResults": str(max(1, int(max_results))),
            "order": "relevance",
            "videoDuration": "medium",
            "key": self.api_key,
        }
        if embeddable_only:
            search_params["videoEmbeddable"] = "true"

        search_data = self._get(YOUTUBE_SEARCH_URL, search_params)
        if search_data is None:
            return []

        video_ids = [
            item["id"].get("videoId")
            for item in _items(search_data)
            if isinstance(item.get("id"), dict)
        ]
        video_ids = [video_id for video_id in video_ids if isinstance(video_id, str) and video_id]
        if not video_ids:
            return []

        details = self._get(
            YOUTUBE_VIDEOS_URL,
            {
                "part": "contentDetails,statistics,snippet",
                "id": ",".join(video_ids),
                "key": self.api_key,
            },
        )
        if details is None:
            return []

        by_id = {item["id"]: item for item in _items(details) if isinstance(item.get("id"), str)}
        # The details endpoint does not guarantee search order.
        return [self._to_metadata(by_id[video_id]) for video_id in video_ids if video_id in by_id]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _get(self, url: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise VideoLookupError(f"YouTube request failed: {exc}") from exc

        if response.status_code == 403:
            logger.warning("YouTube API quota exceeded or key rejected.")
            return None
        if response.status_code >= 400:
            raise VideoLookupError(f"YouTube request failed with HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise VideoLookupError("YouTube answered with a non-JSON payload") from exc
        if not isinstance(payload, dict):
            raise VideoLookupError("YouTube answered with an unexpected payload")
        return payload

    @staticmethod
    def _to_metadata(item: Dict[str, Any]) -> VideoMetadata:
        snippet = _mapping(item.get("snippet"))
        statistics = _mapping(item.get("statistics"))
        content_details = _mapping(item.get("contentDetails"))
        thumbnails = _mapping(snippet.get("thumbnails"))
        thumbnail = _mapping(
            thumbnails.get("high") or thumbnails.get("medium") or thumbnails.get("default")
        )

        try:
            view_count = max(0, int(statistics.get("viewCount") or 0))
        except (TypeError, ValueError):
            view_count = 0

        thumbnail_url = thumbnail.get("url")
        return VideoMetadata(
            video_id=_text(item.get("id")),
            title=_text(snippet.get("title")),
            description=_text(snippet.get("description")),
            channel_title=_text(snippet.get("channelTitle")),
            published_at=_text(snippet.get("publishedAt")).split("T")[0],
            thumbnail_url=thumbnail_url if isinstance(thumbnail_url, str) else None,
            view_count=view_count,
            duration=_text(content_details.get("duration")),
        )


def _items(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    items = payload.get("items")
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""
