import logging

import pytest

from illabuilder.util import RecordNotFoundError, delete_element, get_logger


def test_delete_element_removes_target():
    assert delete_element([1, 2, 3], 2) == [1, 3]


def test_delete_element_removes_first_occurrence_only():
    assert delete_element([1, 2, 2], 2) == [1, 2]


def test_delete_element_missing_removes_first_item():
    assert delete_element([4, 5, 6], 9) == [5, 6]


def test_delete_element_empty():
    assert delete_element([], 1) == []


def test_delete_element_does_not_mutate_input():
    items = [7, 8, 9]
    result = delete_element(items, 8)
    assert items == [7, 8, 9]
    assert len(result) == len(items) - 1
    assert 8 not in result


def test_logger_default_level_is_info(monkeypatch):
    monkeypatch.delenv("ILLA_LOG_LEVEL", raising=False)
    assert get_logger().level == logging.INFO


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("-1", logging.DEBUG),
        ("0", logging.INFO),
        ("1", logging.WARNING),
        ("2", logging.ERROR),
        ("5", logging.CRITICAL),
    ],
)
def test_logger_level_from_env(monkeypatch, raw, expected):
    monkeypatch.setenv("ILLA_LOG_LEVEL", raw)
    assert get_logger().level == expected


def test_logger_invalid_level(monkeypatch):
    monkeypatch.setenv("ILLA_LOG_LEVEL", "loud")
    with pytest.raises(ValueError, match="ILLA_LOG_LEVEL"):
        get_logger()


def test_logger_is_shared(monkeypatch):
    monkeypatch.setenv("ILLA_LOG_LEVEL", "0")
    first = get_logger()
    monkeypatch.setenv("ILLA_LOG_LEVEL", "2")
    second = get_logger()
    assert second.level == logging.ERROR
    assert first.level == logging.ERROR
    assert first.name == second.name


def test_record_not_found_is_lookup_error():
    err = RecordNotFoundError("missing")
    assert str(err) == "missing"
    assert isinstance(err, LookupError)