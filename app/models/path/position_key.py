"""Composite address of a trackable item inside a saved path.

Stages-format rows use ``level_index = -1`` and item types ``topic``,
``project`` and ``stage``. Units-format rows use the unit index as
``stage_index`` and item types ``lesson``, ``project`` (one per level) and
``boss`` (one per unit, ``level_index = -1``).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from app.core.errors import PathValidationError
from app.models.path.saved_path_model import PathFormat

NO_LEVEL = -1

ITEM_TOPIC = "topic"
ITEM_PROJECT = "project"
ITEM_STAGE = "stage"
ITEM_LESSON = "lesson"
ITEM_BOSS = "boss"

STAGES_ITEM_TYPES = frozenset({ITEM_TOPIC, ITEM_PROJECT, ITEM_STAGE})
UNITS_ITEM_TYPES = frozenset({ITEM_LESSON, ITEM_PROJECT, ITEM_BOSS})

# Historical single-integer encoding still sent by older clients.
ENCODED_UNIT_FACTOR = 100
ENCODED_BOSS_LEVEL = 99


@dataclass(frozen=True)
class PositionKey:
    stage_index: int
    level_index: int
    item_type: str
    item_index: int

    @classmethod
    def from_request(
        cls,
        path_format: PathFormat,
        *,
        stage_index: int,
        level_index: Optional[int],
        item_type: str,
        item_index: int,
    ) -> "PositionKey":
        if path_format == PathFormat.STAGES:
            if item_type not in STAGES_ITEM_TYPES:
                raise PathValidationError(reason="item_type_not_allowed")
            return cls(stage_index, NO_LEVEL, item_type, item_index)

        if level_index is None:
            unit_index, level_index = divmod(stage_index, ENCODED_UNIT_FACTOR)
            if level_index == ENCODED_BOSS_LEVEL:
                item_type = ITEM_BOSS
            elif item_type == ITEM_BOSS:
                # A boss has no level, so a plain index already names the unit.
                unit_index = stage_index
        else:
            unit_index = stage_index

        if item_type == ITEM_TOPIC:
            item_type = ITEM_LESSON
        if item_type not in UNITS_ITEM_TYPES:
            raise PathValidationError(reason="item_type_not_allowed")

        if item_type == ITEM_BOSS:
            return cls(unit_index, NO_LEVEL, ITEM_BOSS, 0)
        if level_index < 0:
            raise PathValidationError(reason="level_index_required")
        if item_type == ITEM_PROJECT:
            item_index = 0
        return cls(unit_index, level_index, item_type, item_index)

    @property
    def is_units_format(self) -> bool:
        return self.item_type in (ITEM_LESSON, ITEM_BOSS) or self.level_index != NO_LEVEL

    def map_key(self) -> str:
        """Key used in the ``progressMap`` returned with a saved path."""
        if self.is_units_format:
            return f"{self.stage_index}-{self.level_index}-{self.item_type}-{self.item_index}"
        return f"{self.stage_index}-{self.item_type}-{self.item_index}"

    @classmethod
    def of(cls, record) -> "PositionKey":
        return cls(record.stage_index, record.level_index, record.item_type, record.item_index)
