"""Two-phase learning path generation.

1. Ask the content provider for an outline (units, levels, lessons with
   search hints) and parse it. Any failure here aborts the generation.
2. Resolve every lesson to a resource concurrently, then assemble the path in
   outline order, drawing XP rewards and computing the rollups.
"""
from __future__ import annotations

import asyncio
import functools
import logging
import random
from typing import Callable, List, Optional

import anyio
from pydantic import ValidationError

from app.core import ai_service
from app.core.config import settings
from app.core.errors import PathGenerationError
from app.core.skill_levels import SkillLevelConfig, resolve_skill_level
from app.schemas.path.learning_path_schema import (
    DEFAULT_LEVEL_ICON,
    DEFAULT_UNIT_COLOR,
    LearningPath,
    Lesson,
    LessonOutline,
    Level,
    PathOutline,
    Resource,
    Unit,
)
from app.services.resource_fetcher import ResourceFetcher, build_placeholder_resource
from app.utils.json_utils import safe_json_loads

logger = logging.getLogger(__name__)

XP_REWARD_RANGE = (10, 15)


class PathGenerator:
    def __init__(
        self,
        fetcher: Optional[ResourceFetcher] = None,
        complete: Optional[Callable[[str], str]] = None,
        rng: Optional[random.Random] = None,
        concurrency: Optional[int] = None,
    ):
        self.fetcher = fetcher or ResourceFetcher()
        self.complete = complete or ai_service.call_content_provider
        self.rng = rng or random.Random()
        self.concurrency = concurrency or settings.VIDEO_LOOKUP_CONCURRENCY

    async def generate_path(self, topic: str, skill_level: Optional[str] = None) -> LearningPath:
        structure = resolve_skill_level(skill_level)
        logger.info("Generating path for %r (skill level: %s)", topic, structure.id)

        outline = await self._request_outline(topic, structure)

        limiter = anyio.CapacityLimiter(self.concurrency)
        lesson_outlines = [
            lesson for unit in outline.units for level in unit.levels for lesson in level.lessons
        ]
        resources = await asyncio.gather(
            *(self._resolve_lesson(topic, lesson, limiter) for lesson in lesson_outlines)
        )

        path = self._assemble(topic, structure, outline, list(resources))
        logger.info(
            "Generated path for %r: %s units, %s levels, %s lessons, %s XP",
            topic,
            path.total_units,
            path.total_levels,
            path.total_lessons,
            path.total_xp,
        )
        return path

    # ------------------------------------------------------------------
    # Phase 1: outline
    # ------------------------------------------------------------------
    async def _request_outline(self, topic: str, structure: SkillLevelConfig) -> PathOutline:
        prompt = ai_service.build_outline_prompt(topic, structure)
        try:
            raw = await anyio.to_thread.run_sync(self.complete, prompt)
        except ai_service.ContentProviderError as exc:
            logger.error("Outline request failed for %r: %s", topic, exc)
            raise PathGenerationError() from exc

        if not raw or not raw.strip():
            logger.error("Empty outline returned for %r", topic)
            raise PathGenerationError()

        try:
            return PathOutline.model_validate(safe_json_loads(raw))
        except (ValueError, ValidationError) as exc:
            logger.error("Unparsable outline for %r: %s", topic, exc)
            raise PathGenerationError() from exc

    # ------------------------------------------------------------------
    # Phase 2: resources
    # ------------------------------------------------------------------
    async def _resolve_lesson(
        self, topic: str, lesson: LessonOutline, limiter: anyio.CapacityLimiter
    ) -> Resource:
        query = lesson.search_query or f"{topic} {lesson.title}"
        lookup = functools.partial(self.fetcher.fetch_resource_for_query, query, title=lesson.title)
        try:
            return await anyio.to_thread.run_sync(lookup, limiter=limiter)
        except Exception:
            logger.exception("Lesson resolution crashed for %r", query)
            return build_placeholder_resource(query, lesson.title)

    def _assemble(
        self,
        topic: str,
        structure: SkillLevelConfig,
        outline: PathOutline,
        resources: List[Resource],
    ) -> LearningPath:
        remaining = iter(resources)
        units: List[Unit] = []
        for unit_index, unit_outline in enumerate(outline.units):
            levels: List[Level] = []
            for level_index, level_outline in enumerate(unit_outline.levels):
                lessons = [
                    Lesson(
                        id=f"u{unit_index + 1}-l{level_index + 1}-s{lesson_index + 1}",
                        title=lesson_outline.title,
                        description=lesson_outline.description or "",
                        xp_reward=self.rng.randint(*XP_REWARD_RANGE),
                        resource=next(remaining),
                    )
                    for lesson_index, lesson_outline in enumerate(level_outline.lessons)
                ]
                levels.append(
                    Level(
                        id=f"u{unit_index + 1}-l{level_index + 1}",
                        level_number=level_outline.level_number or level_index + 1,
                        title=level_outline.title,
                        description=level_outline.description or "",
                        icon=level_outline.icon or DEFAULT_LEVEL_ICON,
                        lessons=lessons,
                        challenge_project=level_outline.challenge_project,
                        total_xp=sum(lesson.xp_reward for lesson in lessons),
                    )
                )
            units.append(
                Unit(
                    id=f"u{unit_index + 1}",
                    unit_number=unit_outline.unit_number or unit_index + 1,
                    title=unit_outline.title,
                    description=unit_outline.description or "",
                    color=unit_outline.color or DEFAULT_UNIT_COLOR,
                    levels=levels,
                    boss_challenge=unit_outline.boss_challenge,
                )
            )

        all_levels = [level for unit in units for level in unit.levels]
        all_lessons = [lesson for level in all_levels for lesson in level.lessons]
        total_minutes = sum(lesson.resource.duration_min for lesson in all_lessons)
        estimated_hours = (
            round(total_minutes / 60, 1) if total_minutes else float(structure.estimated_hours[0])
        )

        return LearningPath(
            topic=topic,
            skill_level=None if structure.id == "default" else structure.id,
            total_units=len(units),
            total_levels=len(all_levels),
            total_lessons=len(all_lessons),
            total_xp=sum(level.total_xp for level in all_levels),
            estimated_hours=estimated_hours,
            units=units,
        )
