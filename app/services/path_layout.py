"""Shape of a stored path payload.

A saved path keeps its payload verbatim, so anything that needs to reason
about items (totals at save time, item existence and sequential unlocking at
toggle time) goes through :class:`PathLayout`, built once per request from
the payload and its format discriminant.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AbstractSet, Any, List, Tuple

from pydantic import TypeAdapter, ValidationError

from app.core.errors import PathValidationError
from app.models.path.position_key import (
    ITEM_BOSS,
    ITEM_LESSON,
    ITEM_PROJECT,
    ITEM_STAGE,
    ITEM_TOPIC,
    NO_LEVEL,
    PositionKey,
)
from app.models.path.saved_path_model import PathFormat
from app.schemas.path.learning_path_schema import LearningPath, PathStage

logger = logging.getLogger(__name__)

_STAGES_ADAPTER = TypeAdapter(List[PathStage])


@dataclass(frozen=True)
class StageShape:
    topic_count: int
    has_project: bool


@dataclass(frozen=True)
class LevelShape:
    lesson_count: int
    has_project: bool


@dataclass(frozen=True)
class UnitShape:
    levels: Tuple[LevelShape, ...]
    has_boss: bool


@dataclass(frozen=True)
class PathLayout:
    path_format: PathFormat
    stages: Tuple[StageShape, ...] = ()
    units: Tuple[UnitShape, ...] = ()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @staticmethod
    def detect_format(path_data: Any) -> PathFormat:
        if isinstance(path_data, list):
            return PathFormat.STAGES
        if isinstance(path_data, dict) and isinstance(path_data.get("units"), list):
            return PathFormat.UNITS
        raise PathValidationError(reason="unknown_path_format")

    @classmethod
    def parse(cls, path_data: Any) -> "PathLayout":
        """Validate a payload received for saving and return its layout.

        Raises :class:`PathValidationError` when structural fields are missing.
        """
        path_format = cls.detect_format(path_data)
        try:
            if path_format == PathFormat.UNITS:
                path = LearningPath.model_validate(path_data)
                return cls._from_units(path)
            stages = _STAGES_ADAPTER.validate_python(path_data)
        except ValidationError as exc:
            logger.info("Rejected %s payload: %s error(s)", path_format.value, exc.error_count())
            raise PathValidationError(reason=f"invalid_{path_format.value}_payload") from exc

        if not stages or not any(stage.key_topics for stage in stages):
            raise PathValidationError(reason="no_key_topics")
        return cls(
            path_format=PathFormat.STAGES,
            stages=tuple(
                StageShape(topic_count=len(stage.key_topics), has_project=bool(stage.suggested_project))
                for stage in stages
            ),
        )

    @classmethod
    def from_saved(cls, path_format: PathFormat, path_data: Any) -> "PathLayout":
        """Layout of an already stored payload (validated when it was saved)."""
        if path_format == PathFormat.UNITS:
            return cls._from_units(LearningPath.model_validate(path_data))
        return cls(
            path_format=PathFormat.STAGES,
            stages=tuple(
                StageShape(
                    topic_count=len(stage.get("keyTopics") or stage.get("key_topics") or []),
                    has_project=bool(stage.get("suggestedProject") or stage.get("suggested_project")),
                )
                for stage in path_data
            ),
        )

    @classmethod
    def _from_units(cls, path: LearningPath) -> "PathLayout":
        return cls(
            path_format=PathFormat.UNITS,
            units=tuple(
                UnitShape(
                    levels=tuple(
                        LevelShape(lesson_count=len(level.lessons), has_project=bool(level.challenge_project))
                        for level in unit.levels
                    ),
                    has_boss=bool(unit.boss_challenge),
                )
                for unit in path.units
            ),
        )

    # ------------------------------------------------------------------
    # Totals (frozen on the saved path)
    # ------------------------------------------------------------------
    @property
    def leaf_item_type(self) -> str:
        return ITEM_LESSON if self.path_format == PathFormat.UNITS else ITEM_TOPIC

    @property
    def total_stages(self) -> int:
        if self.path_format == PathFormat.UNITS:
            return sum(len(unit.levels) for unit in self.units)
        return len(self.stages)

    @property
    def total_topics(self) -> int:
        if self.path_format == PathFormat.UNITS:
            return sum(level.lesson_count for unit in self.units for level in unit.levels)
        return sum(stage.topic_count for stage in self.stages)

    # ------------------------------------------------------------------
    # Item lookup
    # ------------------------------------------------------------------
    def contains(self, key: PositionKey) -> bool:
        if self.path_format == PathFormat.STAGES:
            if key.level_index != NO_LEVEL or not 0 <= key.stage_index < len(self.stages):
                return False
            stage = self.stages[key.stage_index]
            if key.item_type == ITEM_TOPIC:
                return 0 <= key.item_index < stage.topic_count
            if key.item_type == ITEM_PROJECT:
                return stage.has_project and key.item_index == 0
            return key.item_type == ITEM_STAGE and key.item_index == 0

        if not 0 <= key.stage_index < len(self.units):
            return False
        unit = self.units[key.stage_index]
        if key.item_type == ITEM_BOSS:
            return unit.has_boss
        if not 0 <= key.level_index < len(unit.levels):
            return False
        level = unit.levels[key.level_index]
        if key.item_type == ITEM_LESSON:
            return 0 <= key.item_index < level.lesson_count
        return key.item_type == ITEM_PROJECT and level.has_project

    # ------------------------------------------------------------------
    # Sequential unlocking (units format only)
    # ------------------------------------------------------------------
    def is_unlocked(self, key: PositionKey, done: AbstractSet[PositionKey]) -> bool:
        """Whether ``key`` may be marked complete given the completed items ``done``.

        A lesson needs the previous lesson of its level, the first lesson needs
        its level unlocked. A level needs the previous level complete, the
        first level needs its unit unlocked. A unit needs the previous unit
        fully complete (levels and boss). Level projects and boss challenges
        need every lesson of their scope complete.
        """
        if self.path_format == PathFormat.STAGES:
            return True

        unit_index = key.stage_index
        if key.item_type == ITEM_BOSS:
            return self._unit_unlocked(unit_index, done) and self._levels_complete(unit_index, done)
        if key.item_type == ITEM_PROJECT:
            return self._level_unlocked(unit_index, key.level_index, done) and self._level_complete(
                unit_index, key.level_index, done
            )
        if key.item_index == 0:
            return self._level_unlocked(unit_index, key.level_index, done)
        previous = PositionKey(unit_index, key.level_index, ITEM_LESSON, key.item_index - 1)
        return previous in done and self._level_unlocked(unit_index, key.level_index, done)

    def completed_levels(self, done: AbstractSet[PositionKey]) -> int:
        return sum(
            1
            for unit_index, unit in enumerate(self.units)
            for level_index in range(len(unit.levels))
            if self._level_complete(unit_index, level_index, done)
        )

    def _level_complete(self, unit_index: int, level_index: int, done: AbstractSet[PositionKey]) -> bool:
        level = self.units[unit_index].levels[level_index]
        return all(
            PositionKey(unit_index, level_index, ITEM_LESSON, lesson_index) in done
            for lesson_index in range(level.lesson_count)
        )

    def _levels_complete(self, unit_index: int, done: AbstractSet[PositionKey]) -> bool:
        return all(
            self._level_complete(unit_index, level_index, done)
            for level_index in range(len(self.units[unit_index].levels))
        )

    def _unit_complete(self, unit_index: int, done: AbstractSet[PositionKey]) -> bool:
        if not self._levels_complete(unit_index, done):
            return False
        if self.units[unit_index].has_boss:
            return PositionKey(unit_index, NO_LEVEL, ITEM_BOSS, 0) in done
        return True

    def _unit_unlocked(self, unit_index: int, done: AbstractSet[PositionKey]) -> bool:
        return unit_index == 0 or self._unit_complete(unit_index - 1, done)

    def _level_unlocked(self, unit_index: int, level_index: int, done: AbstractSet[PositionKey]) -> bool:
        if not self._unit_unlocked(unit_index, done):
            return False
        return level_index == 0 or self._level_complete(unit_index, level_index - 1, done)
