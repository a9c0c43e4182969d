import random

import pytest

from app.core.errors import ItemLockedError, PathArchivedError, PathNotFoundError, PathValidationError
from app.models.path.path_progress_model import PathProgress
from app.models.path.saved_path_model import PathStatus
from app.models.user.achievement_model import Achievement
from app.services.path_store import PathStore
from app.services.progress_tracker import ProgressTracker
from tests.utils import create_user, stages_payload, units_payload


def _toggle(tracker, path_id, u, l, i, done=True, item_type="lesson", **kwargs):
    return tracker.toggle_item(
        path_id, stage_index=u, level_index=l, item_type=item_type, item_index=i, is_completed=done, **kwargs
    )


def _complete_all_lessons(tracker, path_id, units, levels, lessons):
    result = None
    for u in range(units):
        for l in range(levels):
            for i in range(lessons):
                result = _toggle(tracker, path_id, u, l, i)
    return result


def test_completed_topics_always_matches_a_recount(db_session, user):
    path = PathStore(db_session, user).save("History", stages_payload([4, 4]))
    tracker = ProgressTracker(db_session, user)
    rng = random.Random(42)

    for _ in range(40):
        stage, index, done = rng.randrange(2), rng.randrange(4), rng.random() < 0.6
        result = tracker.toggle_item(path.id, stage_index=stage, item_type="topic", item_index=index, is_completed=done)
        recount = (
            db_session.query(PathProgress)
            .filter_by(path_id=path.id, item_type="topic", is_completed=True)
            .count()
        )
        assert result.completed_topics == recount
        db_session.refresh(path)
        assert path.completed_topics == recount


def test_stage_items_drive_completed_stages_for_legacy_paths(db_session, user):
    path = PathStore(db_session, user).save("History", stages_payload([2, 2]))
    tracker = ProgressTracker(db_session, user)

    result = tracker.toggle_item(path.id, stage_index=0, item_type="stage", item_index=0, is_completed=True)
    assert result.completed_stages == 1
    assert result.completed_topics == 0


def test_completed_levels_drive_completed_stages_for_units_paths(db_session, user):
    path = PathStore(db_session, user).save("Python", units_payload(units=1, levels=2, lessons=2))
    tracker = ProgressTracker(db_session, user)

    _toggle(tracker, path.id, 0, 0, 0)
    result = _toggle(tracker, path.id, 0, 0, 1)

    assert result.completed_topics == 2
    assert result.completed_stages == 1
    assert not result.is_fully_completed


def test_completion_transition_awards_once_and_is_monotonic(db_session, user):
    path = PathStore(db_session, user).save("Python", units_payload(units=1, levels=1, lessons=2, boss=False))
    tracker = ProgressTracker(db_session, user)

    _toggle(tracker, path.id, 0, 0, 0)
    result = _toggle(tracker, path.id, 0, 0, 1)

    assert result.is_fully_completed
    assert {a.type for a in result.new_achievements} == {"path_completion", "first_path"}
    db_session.refresh(path)
    assert path.status == PathStatus.COMPLETED
    completed_at = path.completed_at
    assert completed_at is not None

    # Un-completing keeps the status; completing again awards nothing.
    result = _toggle(tracker, path.id, 0, 0, 1, done=False)
    assert not result.is_fully_completed
    db_session.refresh(path)
    assert path.status == PathStatus.COMPLETED

    result = _toggle(tracker, path.id, 0, 0, 1)
    assert result.new_achievements == []
    db_session.refresh(path)
    assert path.completed_at == completed_at
    assert db_session.query(Achievement).filter_by(user_id=user.id, type="path_completion").count() == 1


def test_uncompleting_clears_timestamp_but_keeps_notes(db_session, user):
    path = PathStore(db_session, user).save("History", stages_payload([2]))
    tracker = ProgressTracker(db_session, user)

    tracker.toggle_item(path.id, stage_index=0, item_type="topic", item_index=0, is_completed=True, notes="great video")
    tracker.toggle_item(path.id, stage_index=0, item_type="topic", item_index=0, is_completed=False)

    record = db_session.query(PathProgress).filter_by(path_id=path.id).one()
    assert record.is_completed is False
    assert record.completed_at is None
    assert record.notes == "great video"

    tracker.toggle_item(path.id, stage_index=0, item_type="topic", item_index=0, is_completed=True, notes="rewatched")
    db_session.refresh(record)
    assert record.notes == "rewatched"
    assert record.completed_at is not None


def test_locked_items_cannot_be_completed(db_session, user):
    path = PathStore(db_session, user).save("Python", units_payload(units=2, levels=2, lessons=2))
    tracker = ProgressTracker(db_session, user)

    with pytest.raises(ItemLockedError):
        _toggle(tracker, path.id, 0, 0, 1)
    with pytest.raises(ItemLockedError):
        _toggle(tracker, path.id, 1, 0, 0)
    with pytest.raises(ItemLockedError):
        _toggle(tracker, path.id, 0, -1, 0, item_type="boss")

    assert db_session.query(PathProgress).filter_by(path_id=path.id).count() == 0


def test_unlock_order_through_levels_boss_and_units(db_session, user):
    path = PathStore(db_session, user).save("Python", units_payload(units=2, levels=2, lessons=2))
    tracker = ProgressTracker(db_session, user)

    _complete_all_lessons(tracker, path.id, 1, 2, 2)
    _toggle(tracker, path.id, 0, 0, 0, item_type="project")
    with pytest.raises(ItemLockedError):
        _toggle(tracker, path.id, 1, 0, 0)

    _toggle(tracker, path.id, 0, -1, 0, item_type="boss")
    result = _toggle(tracker, path.id, 1, 0, 0)
    assert result.completed_topics == 5


def test_uncompleting_is_never_gated(db_session, user):
    path = PathStore(db_session, user).save("Python", units_payload(units=1, levels=1, lessons=3))
    tracker = ProgressTracker(db_session, user)
    _complete_all_lessons(tracker, path.id, 1, 1, 3)

    result = _toggle(tracker, path.id, 0, 0, 0, done=False)
    assert result.completed_topics == 2


def test_reopening_a_unit_relocks_the_next_one(db_session, user):
    path = PathStore(db_session, user).save("Python", units_payload(units=2, levels=2, lessons=1))
    tracker = ProgressTracker(db_session, user)
    _toggle(tracker, path.id, 0, 0, 0)
    _toggle(tracker, path.id, 0, 1, 0)
    _toggle(tracker, path.id, 0, -1, 0, item_type="boss")
    _toggle(tracker, path.id, 1, 0, 0)

    _toggle(tracker, path.id, 0, 1, 0, done=False)

    with pytest.raises(ItemLockedError):
        _toggle(tracker, path.id, 1, 1, 0)


def test_gating_can_be_disabled(db_session, user):
    path = PathStore(db_session, user).save("Python", units_payload(units=2, levels=2, lessons=2))
    tracker = ProgressTracker(db_session, user, enforce_unlock=False)

    result = _toggle(tracker, path.id, 1, 1, 1)
    assert result.completed_topics == 1


def test_encoded_position_from_older_clients(db_session, user):
    path = PathStore(db_session, user).save("Python", units_payload(units=2, levels=2, lessons=2))
    tracker = ProgressTracker(db_session, user, enforce_unlock=False)

    tracker.toggle_item(path.id, stage_index=101, item_type="topic", item_index=1, is_completed=True)
    tracker.toggle_item(path.id, stage_index=199, item_type="topic", item_index=0, is_completed=True)

    keys = {
        (r.stage_index, r.level_index, r.item_type, r.item_index)
        for r in db_session.query(PathProgress).filter_by(path_id=path.id)
    }
    assert keys == {(1, 1, "lesson", 1), (1, -1, "boss", 0)}


def test_boss_without_level_index_targets_its_own_unit(db_session, user):
    path = PathStore(db_session, user).save("Python", units_payload(units=2, levels=1, lessons=1))
    tracker = ProgressTracker(db_session, user, enforce_unlock=False)

    tracker.toggle_item(path.id, stage_index=1, item_type="boss", item_index=0, is_completed=True)

    keys = {
        (r.stage_index, r.level_index, r.item_type)
        for r in db_session.query(PathProgress).filter_by(path_id=path.id)
    }
    assert keys == {(1, -1, "boss")}


def test_unknown_items_and_paths(db_session, user):
    path = PathStore(db_session, user).save("Python", units_payload(units=1, levels=1, lessons=2))
    tracker = ProgressTracker(db_session, user)

    with pytest.raises(PathNotFoundError) as excinfo:
        _toggle(tracker, path.id, 0, 0, 5)
    assert excinfo.value.code == "item_not_found"

    with pytest.raises(PathNotFoundError):
        _toggle(tracker, path.id + 100, 0, 0, 0)

    intruder = create_user(db_session, username="intruder", email="intruder@example.com")
    with pytest.raises(PathNotFoundError) as excinfo:
        _toggle(ProgressTracker(db_session, intruder), path.id, 0, 0, 0)
    assert excinfo.value.code == "path_not_found"


def test_wrong_item_type_for_format(db_session, user):
    path = PathStore(db_session, user).save("History", stages_payload([2]))
    with pytest.raises(PathValidationError):
        _toggle(ProgressTracker(db_session, user), path.id, 0, None, 0)


def test_archived_paths_reject_toggles(db_session, user):
    store = PathStore(db_session, user)
    path = store.save("Python", units_payload())
    store.archive(path.id)

    with pytest.raises(PathArchivedError):
        _toggle(ProgressTracker(db_session, user), path.id, 0, 0, 0)
