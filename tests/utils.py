"""Utility helpers for test factories."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from app.core.youtube_service import VideoMetadata
from app.models.user.user_model import User


def create_user(db, **kwargs) -> User:
    defaults = {
        "username": "user",
        "email": "user@example.com",
        "is_active": True,
        "created_at": datetime.utcnow(),
    }
    defaults.update(kwargs)
    user = User(**defaults)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_resource(title: str = "Video", **overrides) -> Dict[str, Any]:
    resource = {
        "title": title,
        "type": "Video",
        "description": "",
        "url": "https://www.youtube.com/watch?v=abc",
        "views": "1.2K views",
        "viewCount": 1200,
        "publishedDate": "2024-01-15",
        "durationMin": 7,
        "videoId": "abc",
    }
    resource.update(overrides)
    return resource


def units_payload(
    topic: str = "Python",
    *,
    units: int = 2,
    levels: int = 2,
    lessons: int = 2,
    boss: bool = True,
    project: bool = True,
) -> Dict[str, Any]:
    """A units-format path as returned by the generator (camelCase keys)."""
    unit_list: List[Dict[str, Any]] = []
    for u in range(units):
        level_list = []
        for l in range(levels):
            level_list.append(
                {
                    "id": f"u{u + 1}-l{l + 1}",
                    "levelNumber": l + 1,
                    "title": f"Level {u + 1}.{l + 1}",
                    "description": "",
                    "icon": "📚",
                    "lessons": [
                        {
                            "id": f"u{u + 1}-l{l + 1}-s{s + 1}",
                            "title": f"Lesson {u + 1}.{l + 1}.{s + 1}",
                            "description": "",
                            "xpReward": 10,
                            "resource": make_resource(f"Video {u + 1}.{l + 1}.{s + 1}"),
                        }
                        for s in range(lessons)
                    ],
                    "challengeProject": "Build something" if project else None,
                    "totalXp": 10 * lessons,
                }
            )
        unit_list.append(
            {
                "id": f"u{u + 1}",
                "unitNumber": u + 1,
                "title": f"Unit {u + 1}",
                "description": "",
                "color": "#10b981",
                "levels": level_list,
                "bossChallenge": "Final project" if boss else None,
            }
        )
    return {
        "topic": topic,
        "totalUnits": units,
        "totalLevels": units * levels,
        "totalLessons": units * levels * lessons,
        "totalXp": units * levels * lessons * 10,
        "units": unit_list,
    }


def stages_payload(topic_counts: Optional[List[int]] = None) -> List[Dict[str, Any]]:
    """A legacy stages-format path."""
    counts = topic_counts or [3, 2]
    return [
        {
            "stageName": f"Stage {i + 1}",
            "description": "Stage description",
            "goal": "Stage goal",
            "keyTopics": [
                {"name": f"Topic {i + 1}.{t + 1}", "resource": make_resource(f"Topic video {i + 1}.{t + 1}")}
                for t in range(count)
            ],
            "suggestedProject": "A small project",
        }
        for i, count in enumerate(counts)
    ]


def make_video(video_id: str = "vid1", **overrides) -> VideoMetadata:
    values = {
        "video_id": video_id,
        "title": f"Video {video_id}",
        "description": "A video",
        "channel_title": "Channel",
        "published_at": "2024-03-01",
        "thumbnail_url": f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg",
        "view_count": 1_234_567,
        "duration": "PT12M30S",
    }
    values.update(overrides)
    return VideoMetadata(**values)


class FakeYouTube:
    """Stands in for ``YouTubeClient``; returns canned videos per query."""

    def __init__(self, videos: Optional[List[VideoMetadata]] = None, *, error: Optional[Exception] = None):
        self.videos = videos or []
        self.error = error
        self.queries: List[str] = []

    def search_videos(self, query, max_results=3, *, embeddable_only=False):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return self.videos[:max_results]


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200):
        self.payload = payload
        self.status_code = status_code

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    """Replays canned responses for ``requests.Session.get`` in call order."""

    def __init__(self, *responses: FakeResponse):
        self.responses = list(responses)
        self.calls: List[str] = []

    def get(self, url, params=None, timeout=None):
        self.calls.append(url)
        return self.responses.pop(0)


def search_payload(*video_ids: str) -> Dict[str, Any]:
    return {"items": [{"id": {"videoId": video_id}} for video_id in video_ids]}


def details_item(video_id: str, **snippet: Any) -> Dict[str, Any]:
    values = {"title": f"Video {video_id}", "description": "", "publishedAt": "2024-03-01T10:00:00Z"}
    values.update(snippet)
    return {
        "id": video_id,
        "snippet": values,
        "statistics": {"viewCount": "1500"},
        "contentDetails": {"duration": "PT8M"},
    }
