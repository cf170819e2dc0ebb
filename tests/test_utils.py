import pytest

from quiz_engine.utils import (
    format_time_taken,
    new_id,
    round_half_up,
    sanitize_text,
    strict_equals,
)


@pytest.mark.parametrize(
    "seconds,expected",
    [(0, "0s"), (42, "42s"), (60, "1m 0s"), (125, "2m 5s"), (3600, "1h 0m"), (3725, "1h 2m")],
)
def test_format_time_taken(seconds, expected):
    assert format_time_taken(seconds) == expected


def test_format_time_taken_clamps_negative():
    assert format_time_taken(-5) == "0s"


@pytest.mark.parametrize("value,expected", [(62.5, 63), (62.4, 62), (0.5, 1), (50.0, 50), (33.333, 33)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


@pytest.mark.parametrize(
    "left,right,expected",
    [
        (1, 1, True),
        (1, 1.0, True),
        (True, True, True),
        ("a", "a", True),
        ("true", True, False),
        (1, True, False),
        (0, False, False),
        (None, None, True),
        ([1], [1], True),
        ("1", 1, False),
    ],
)
def test_strict_equals(left, right, expected):
    assert strict_equals(left, right) is expected


def test_new_ids_are_unique_and_increasing():
    ids = [new_id() for _ in range(200)]
    assert len(set(ids)) == 200
    assert [int(i) for i in ids] == sorted(int(i) for i in ids)


def test_sanitize_text_strips_markup():
    assert sanitize_text("<b>Bold</b> <i>text</i> ") == "Bold text"
    assert sanitize_text(None) == ""
