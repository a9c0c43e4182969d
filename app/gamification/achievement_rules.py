"""
Achievement catalogue.

The path completion award is templated from the path; the other awards are
fixed and at most one of each is granted per user. Milestones are keyed by
the number of completed paths that unlocks them.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class AchievementRule:
    type: str
    title: str
    description: str
    icon: str = "trophy"
    topic: Optional[str] = None


PATH_COMPLETION = "path_completion"
FIRST_PATH_TYPE = "first_path"
MILESTONE_PREFIX = "milestone_"

FIRST_PATH = AchievementRule(
    type=FIRST_PATH_TYPE,
    title="First Steps",
    description="Completed your first learning path",
    icon="rocket",
)

MILESTONES: Dict[int, AchievementRule] = {
    5: AchievementRule(type="milestone_5", title="Dedicated Learner", description="Completed 5 learning paths", icon="star"),
    10: AchievementRule(type="milestone_10", title="Knowledge Seeker", description="Completed 10 learning paths", icon="zap"),
    25: AchievementRule(type="milestone_25", title="Path Master", description="Completed 25 learning paths", icon="crown"),
    50: AchievementRule(type="milestone_50", title="Enlightened One", description="Completed 50 learning paths", icon="sun"),
}


def path_completion_rule(topic: str, total_topics: int) -> AchievementRule:
    return AchievementRule(
        type=PATH_COMPLETION,
        title=f"{topic} Master",
        description=f"Completed the {topic} learning path with {total_topics} topics",
        icon="trophy",
        topic=topic,
    )
