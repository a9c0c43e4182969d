import pytest

from app.services import stats_service
from app.services.path_store import PathStore
from app.services.progress_tracker import ProgressTracker
from tests.utils import create_user, stages_payload


def test_public_stats_on_empty_database(db_session):
    stats = stats_service.get_public_stats(db_session)
    assert stats.quick_dive_searches == 0
    assert stats.paths_generated == 0
    assert stats.users == 0


def test_counters_increment(db_session):
    stats_service.increment_stat(db_session, "quick_dive_searches")
    stats_service.increment_stat(db_session, "quick_dive_searches")
    stats_service.increment_stat(db_session, "paths_generated")

    stats = stats_service.get_public_stats(db_session)
    assert stats.quick_dive_searches == 2
    assert stats.paths_generated == 1


def test_unknown_counter_is_rejected(db_session):
    with pytest.raises(ValueError):
        stats_service.increment_stat(db_session, "users")


def test_public_stats_aggregate_paths_and_achievements(db_session):
    user = create_user(db_session)
    create_user(db_session, username="second", email="second@example.com")
    store = PathStore(db_session, user)
    done = store.save("History", stages_payload([1]))
    store.save("Art", stages_payload([2]))
    ProgressTracker(db_session, user).toggle_item(
        done.id, stage_index=0, item_type="topic", item_index=0, is_completed=True
    )

    stats = stats_service.get_public_stats(db_session).model_dump(by_alias=True)

    assert stats["users"] == 2
    assert stats["pathsStarted"] == 2
    assert stats["pathsCompleted"] == 1
    assert stats["achievements"] == 2
