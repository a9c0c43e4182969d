from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class PublicStats(BaseModel):
    """Site-wide counters shown on the public stats page."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    users: int = 0
    quick_dive_searches: int = 0
    paths_generated: int = 0
    paths_started: int = 0
    paths_completed: int = 0
    achievements: int = 0
