"""
Catalogue of skill levels offered when generating a learning path.

Each level bounds the outline the content provider is asked for (units per
path, levels per unit, lessons per level) and gives a rough time estimate.
Requests without a skill level use ``DEFAULT_STRUCTURE``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class SkillLevelConfig:
    id: str
    label: str
    description: str
    icon: str
    units: Tuple[int, int]
    levels_per_unit: Tuple[int, int]
    lessons_per_level: Tuple[int, int]
    estimated_hours: Tuple[int, int]


DEFAULT_STRUCTURE = SkillLevelConfig(
    id="default",
    label="Standard",
    description="Balanced path",
    icon="🎯",
    units=(2, 4),
    levels_per_unit=(3, 5),
    lessons_per_level=(3, 5),
    estimated_hours=(5, 25),
)

SKILL_LEVELS: Dict[str, SkillLevelConfig] = {
    "curious": SkillLevelConfig(
        id="curious",
        label="Just Curious",
        description="Quick overview to understand the basics",
        icon="🌱",
        units=(1, 2),
        levels_per_unit=(2, 3),
        lessons_per_level=(2, 3),
        estimated_hours=(1, 3),
    ),
    "beginner": SkillLevelConfig(
        id="beginner",
        label="Beginner",
        description="Learn fundamentals and core concepts",
        icon="📚",
        units=(2, 3),
        levels_per_unit=(3, 4),
        lessons_per_level=(3, 4),
        estimated_hours=(5, 10),
    ),
    "intermediate": SkillLevelConfig(
        id="intermediate",
        label="Intermediate",
        description="Build solid knowledge and practical skills",
        icon="🚀",
        units=(3, 4),
        levels_per_unit=(4, 5),
        lessons_per_level=(4, 5),
        estimated_hours=(15, 25),
    ),
    "advanced": SkillLevelConfig(
        id="advanced",
        label="Advanced",
        description="Master complex topics and techniques",
        icon="⚡",
        units=(4, 5),
        levels_per_unit=(5, 6),
        lessons_per_level=(4, 5),
        estimated_hours=(30, 50),
    ),
    "expert": SkillLevelConfig(
        id="expert",
        label="Expert",
        description="Comprehensive mastery of the subject",
        icon="👑",
        units=(5, 7),
        levels_per_unit=(5, 7),
        lessons_per_level=(5, 6),
        estimated_hours=(50, 100),
    ),
}


def resolve_skill_level(skill_level: Optional[str]) -> SkillLevelConfig:
    """Return the config for ``skill_level``, falling back to the default ranges."""
    if not skill_level:
        return DEFAULT_STRUCTURE
    return SKILL_LEVELS.get(skill_level.strip().lower(), DEFAULT_STRUCTURE)
