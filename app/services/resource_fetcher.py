"""Turns provider answers into :class:`Resource` objects.

Two providers are wrapped: the video lookup (YouTube) and the content
generation model. Neither is allowed to make a caller fail; when nothing
usable comes back a placeholder resource pointing at a YouTube search is
returned instead.
"""
from __future__ import annotations

import logging
import math
import re
from typing import Callable, Iterable, List, Optional, Sequence
from urllib.parse import quote_plus

from pydantic import ValidationError

from app.core import ai_service
from app.core.errors import ResourceUnavailableError
from app.core.youtube_service import VideoLookupError, VideoMetadata, YouTubeClient
from app.schemas.path.learning_path_schema import RESOURCE_KINDS, Resource
from app.utils.json_utils import loads_or_default

logger = logging.getLogger(__name__)

LESSON_QUERY_SUFFIX = " tutorial OR explained OR learn"
MAX_SUGGESTIONS = 5
PLACEHOLDER_DESCRIPTION = "Search YouTube for this topic"

_ISO_DURATION_RE = re.compile(
    r"^P(?:(?P<days>\d+)D)?(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$"
)


# ---------------------------------------------------------------------------
# Normalisation helpers
# ---------------------------------------------------------------------------

def parse_duration_minutes(duration: Optional[str]) -> int:
    """``PT1H2M3S`` -> 63. Seconds round the total up to the next minute."""
    if not duration:
        return 0
    match = _ISO_DURATION_RE.match(duration.strip().upper())
    if not match:
        return 0
    days = int(match.group("days") or 0)
    hours = int(match.group("hours") or 0)
    minutes = int(match.group("minutes") or 0)
    seconds = float(match.group("seconds") or 0)
    return days * 24 * 60 + hours * 60 + minutes + math.ceil(seconds / 60)


def format_view_count(count: int) -> str:
    if count >= 1_000_000:
        return f"{math.floor(count / 100_000) / 10:.1f}M views"
    if count >= 1_000:
        return f"{math.floor(count / 100) / 10:.1f}K views"
    return f"{count} views"


def build_placeholder_resource(query: str, title: Optional[str] = None) -> Resource:
    return Resource(
        title=f"Search: {title or query}",
        type="Video",
        description=PLACEHOLDER_DESCRIPTION,
        url=f"https://www.youtube.com/results?search_query={quote_plus(query)}",
        views="-",
        view_count=0,
        published_date="",
        duration_min=0,
        video_id=None,
    )


def video_to_resource(video: VideoMetadata) -> Resource:
    description = video.description or ""
    if len(description) > 200:
        description = description[:200] + "..."
    return Resource(
        title=video.title,
        type="Video",
        description=description,
        url=f"https://www.youtube.com/watch?v={video.video_id}",
        views=format_view_count(video.view_count),
        view_count=video.view_count,
        published_date=video.published_at,
        duration_min=parse_duration_minutes(video.duration),
        video_id=video.video_id,
        thumbnail_url=video.thumbnail_url,
    )


# ---------------------------------------------------------------------------
# Fetcher
# ---------------------------------------------------------------------------

class ResourceFetcher:
    def __init__(
        self,
        youtube: Optional[YouTubeClient] = None,
        complete: Optional[Callable[[str], str]] = None,
    ):
        self.youtube = youtube or YouTubeClient()
        self.complete = complete or ai_service.call_content_provider

    def fetch_resource_for_query(self, query: str, *, title: Optional[str] = None) -> Resource:
        """Best video for ``query``, or a placeholder. Never raises."""
        try:
            return self._lookup_video(query)
        except ResourceUnavailableError as exc:
            logger.warning("Resource unavailable for %r, using placeholder", exc.query)
            return build_placeholder_resource(query, title)

    def fetch_resource_list(
        self,
        topic: str,
        desired_count: int,
        allowed_kinds: Sequence[str] = RESOURCE_KINDS,
    ) -> List[Resource]:
        """Up to ``desired_count`` resources of ``allowed_kinds`` for ``topic``.

        Videos come from the lookup provider; the remaining slots are filled
        by the content provider. An empty outcome yields a single placeholder.
        """
        kinds = [kind for kind in RESOURCE_KINDS if kind in set(allowed_kinds)]
        resources: List[Resource] = []

        if "Video" in kinds:
            resources.extend(self._videos_for_topic(topic, desired_count))

        remaining = desired_count - len(resources)
        generated_kinds = [kind for kind in kinds if kind != "Video" or not resources]
        if remaining > 0 and generated_kinds:
            resources.extend(self._generated_resources(topic, remaining, generated_kinds))

        if not resources:
            logger.warning("No resources found for %r, using placeholder", topic)
            return [build_placeholder_resource(topic)]
        return resources[:desired_count]

    def suggest_queries(self, topic: str) -> List[str]:
        try:
            raw = self.complete(ai_service.build_suggestions_prompt(topic))
        except ai_service.ContentProviderError as exc:
            logger.warning("Suggestions unavailable for %r: %s", topic, exc)
            return []
        suggestions = loads_or_default(raw, [], list)
        return [s.strip() for s in suggestions if isinstance(s, str) and s.strip()][:MAX_SUGGESTIONS]

    def search_videos(self, query: str, max_results: int = 3) -> List[VideoMetadata]:
        try:
            return self.youtube.search_videos(query, max_results)
        except VideoLookupError as exc:
            logger.warning("Video search failed for %r: %s", query, exc)
            return []

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _lookup_video(self, query: str) -> Resource:
        try:
            videos = self.youtube.search_videos(query + LESSON_QUERY_SUFFIX, 1, embeddable_only=True)
        except VideoLookupError as exc:
            logger.error("Video lookup failed for %r: %s", query, exc)
            raise ResourceUnavailableError(query=query) from exc
        for resource in _video_resources(videos):
            return resource
        raise ResourceUnavailableError(query=query)

    def _videos_for_topic(self, topic: str, count: int) -> List[Resource]:
        return list(_video_resources(self.search_videos(topic, count)))

    def _generated_resources(self, topic: str, count: int, kinds: List[str]) -> List[Resource]:
        try:
            raw = self.complete(ai_service.build_resources_prompt(topic, count, kinds))
        except ai_service.ContentProviderError as exc:
            logger.warning("Resource list unavailable for %r: %s", topic, exc)
            return []
        return list(_valid_resources(loads_or_default(raw, [], list), kinds))[:count]


def _video_resources(videos: Iterable[VideoMetadata]) -> Iterable[Resource]:
    for video in videos:
        if not video.video_id or not video.title:
            logger.debug("Dropping incomplete video %r", video.video_id)
            continue
        try:
            yield video_to_resource(video)
        except ValidationError:
            logger.debug("Dropping malformed video %r", video.video_id)


def _valid_resources(items: Iterable[object], kinds: List[str]) -> Iterable[Resource]:
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            resource = Resource.model_validate(item)
        except ValidationError:
            logger.debug("Dropping malformed resource %r", item)
            continue
        if resource.type in kinds:
            yield resource
