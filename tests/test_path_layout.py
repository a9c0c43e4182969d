import pytest

from app.core.errors import PathValidationError
from app.models.path.position_key import PositionKey
from app.models.path.saved_path_model import PathFormat
from app.services.path_layout import PathLayout
from tests.utils import stages_payload, units_payload


def lesson(u, l, i):
    return PositionKey(u, l, "lesson", i)


def test_units_totals_count_levels_and_lessons():
    layout = PathLayout.parse(units_payload(units=2, levels=3, lessons=4))
    assert layout.path_format == PathFormat.UNITS
    assert layout.total_stages == 6
    assert layout.total_topics == 24


def test_stages_totals_count_stages_and_key_topics():
    layout = PathLayout.parse(stages_payload([3, 2, 1]))
    assert layout.path_format == PathFormat.STAGES
    assert layout.total_stages == 3
    assert layout.total_topics == 6


@pytest.mark.parametrize(
    "payload",
    [
        {"topic": "x"},
        "just text",
        [],
        [{"stageName": "Empty", "keyTopics": []}],
        [{"description": "no name", "keyTopics": []}],
        {"topic": "x", "units": []},
        {"topic": "x", "units": [{"title": "Unit", "levels": [{"title": "Level", "lessons": [{"title": "No resource"}]}]}]},
    ],
)
def test_malformed_payloads_are_rejected(payload):
    with pytest.raises(PathValidationError):
        PathLayout.parse(payload)


def test_encoded_stage_index_is_decoded_for_units_paths():
    key = PositionKey.from_request(PathFormat.UNITS, stage_index=102, level_index=None, item_type="topic", item_index=3)
    assert key == PositionKey(1, 2, "lesson", 3)

    boss = PositionKey.from_request(PathFormat.UNITS, stage_index=199, level_index=None, item_type="topic", item_index=0)
    assert boss == PositionKey(1, -1, "boss", 0)


@pytest.mark.parametrize("stage_index, unit_index", [(1, 1), (3, 3), (299, 2)])
def test_boss_key_without_level_uses_the_unit_index(stage_index, unit_index):
    key = PositionKey.from_request(
        PathFormat.UNITS, stage_index=stage_index, level_index=None, item_type="boss", item_index=0
    )
    assert key == PositionKey(unit_index, -1, "boss", 0)


def test_explicit_key_has_no_level_limit():
    key = PositionKey.from_request(PathFormat.UNITS, stage_index=250, level_index=120, item_type="lesson", item_index=1)
    assert key == PositionKey(250, 120, "lesson", 1)


def test_stage_keys_and_map_keys_are_distinct_between_formats():
    legacy = PositionKey.from_request(PathFormat.STAGES, stage_index=1, level_index=None, item_type="topic", item_index=2)
    assert legacy.map_key() == "1-topic-2"
    assert lesson(1, 0, 2).map_key() == "1-0-lesson-2"
    assert PositionKey(0, -1, "boss", 0).map_key() == "0--1-boss-0"


@pytest.mark.parametrize("item_type", ["lesson", "boss"])
def test_units_item_types_are_rejected_on_stages_paths(item_type):
    with pytest.raises(PathValidationError):
        PositionKey.from_request(PathFormat.STAGES, stage_index=0, level_index=None, item_type=item_type, item_index=0)


def test_contains_checks_bounds_and_optional_items():
    layout = PathLayout.parse(units_payload(units=1, levels=2, lessons=2, boss=False, project=False))
    assert layout.contains(lesson(0, 1, 1))
    assert not layout.contains(lesson(0, 2, 0))
    assert not layout.contains(lesson(0, 0, 2))
    assert not layout.contains(PositionKey(0, -1, "boss", 0))
    assert not layout.contains(PositionKey(0, 0, "project", 0))


def test_sequential_unlocking():
    layout = PathLayout.parse(units_payload(units=2, levels=2, lessons=2))
    done = set()

    assert layout.is_unlocked(lesson(0, 0, 0), done)
    assert not layout.is_unlocked(lesson(0, 0, 1), done)
    assert not layout.is_unlocked(lesson(0, 1, 0), done)

    done |= {lesson(0, 0, 0), lesson(0, 0, 1)}
    assert layout.is_unlocked(lesson(0, 1, 0), done)
    assert layout.is_unlocked(PositionKey(0, 0, "project", 0), done)
    assert not layout.is_unlocked(PositionKey(0, -1, "boss", 0), done)

    done |= {lesson(0, 1, 0), lesson(0, 1, 1)}
    assert layout.is_unlocked(PositionKey(0, -1, "boss", 0), done)
    # The next unit also waits for the boss.
    assert not layout.is_unlocked(lesson(1, 0, 0), done)

    done.add(PositionKey(0, -1, "boss", 0))
    assert layout.is_unlocked(lesson(1, 0, 0), done)
    assert layout.completed_levels(done) == 2


def test_later_levels_relock_when_the_previous_unit_is_reopened():
    layout = PathLayout.parse(units_payload(units=2, levels=2, lessons=1))
    done = {
        lesson(0, 0, 0),
        lesson(0, 1, 0),
        PositionKey(0, -1, "boss", 0),
        lesson(1, 0, 0),
    }
    assert layout.is_unlocked(lesson(1, 1, 0), done)

    done.discard(lesson(0, 1, 0))

    assert not layout.is_unlocked(lesson(1, 1, 0), done)
    assert not layout.is_unlocked(PositionKey(1, 1, "project", 0), done)


def test_stages_paths_are_never_gated():
    layout = PathLayout.parse(stages_payload([3]))
    assert layout.is_unlocked(PositionKey(0, -1, "topic", 2), set())
