from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v2.dependencies import get_current_user, get_db, get_path_generator, get_resource_fetcher
from app.core.errors import LearningPathError, to_http_exception
from app.models.user.user_model import User
from app.schemas.path import path_schema
from app.schemas.path.learning_path_schema import LearningPath
from app.services import stats_service
from app.services.path_generator import PathGenerator
from app.services.resource_fetcher import ResourceFetcher

router = APIRouter()

QUICK_DIVE_COUNT = 6
QUICK_DIVE_COUNT_WITH_VIDEOS = 4


@router.post("/learning-path", response_model=LearningPath)
async def generate_learning_path(
    payload: path_schema.GeneratePathRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    generator: PathGenerator = Depends(get_path_generator),
):
    try:
        path = await generator.generate_path(payload.topic, payload.skill_level)
    except LearningPathError as exc:
        raise to_http_exception(exc) from exc
    stats_service.increment_stat(db, "paths_generated")
    return path


@router.post("/resources", response_model=path_schema.ResourceListResponse)
def quick_dive_resources(
    payload: path_schema.ResourceListRequest,
    db: Session = Depends(get_db),
    fetcher: ResourceFetcher = Depends(get_resource_fetcher),
):
    # When the caller already shows videos for the topic, only ask for reading material.
    if payload.has_youtube_videos:
        resources = fetcher.fetch_resource_list(payload.topic, QUICK_DIVE_COUNT_WITH_VIDEOS, ["Article", "Course"])
    else:
        resources = fetcher.fetch_resource_list(payload.topic, QUICK_DIVE_COUNT, ["Video", "Article", "Course"])
    stats_service.increment_stat(db, "quick_dive_searches")
    return path_schema.ResourceListResponse(resources=resources)


@router.post("/suggestions", response_model=path_schema.SuggestionsResponse)
def query_suggestions(
    payload: path_schema.SuggestionsRequest,
    fetcher: ResourceFetcher = Depends(get_resource_fetcher),
):
    return path_schema.SuggestionsResponse(suggestions=fetcher.suggest_queries(payload.topic))


@router.post("/youtube-search", response_model=path_schema.YouTubeSearchResponse)
def youtube_search(
    payload: path_schema.YouTubeSearchRequest,
    fetcher: ResourceFetcher = Depends(get_resource_fetcher),
):
    videos = fetcher.search_videos(payload.query, payload.max_results)
    return path_schema.YouTubeSearchResponse(
        videos=[path_schema.VideoOut(**asdict(video)) for video in videos]
    )
