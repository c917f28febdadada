# File: tests/test_rules.py
import pytest

from greed.config import (
    EqualTo,
    LessThan,
    LessThanOrEqualTo,
    MoreThan,
    MoreThanOrEqualTo,
    OnChange,
    OnChangeFrom,
    OnChangeFromTo,
    OnChangeTo,
    OnDecrease,
    OnIncrease,
)
from greed.rules import check_rule, evaluate, parse_number


@pytest.mark.parametrize(
    "rule,previous,current,expected",
    [
        (OnChange(), None, "5", False),
        (OnChange(), "5", "5", False),
        (OnChange(), "5", "7", True),
        (OnChange(), "", "x", True),
        (OnChange(), "Abc", "abc", True),
        (OnChangeFrom(**{"from": "a"}), "a", "b", True),
        (OnChangeFrom(**{"from": "a"}), "a", "a", False),
        (OnChangeFrom(**{"from": "a"}), "c", "b", False),
        (OnChangeFrom(**{"from": "a"}), None, "b", False),
        (OnChangeTo(to="b"), "a", "b", True),
        (OnChangeTo(to="b"), "b", "b", False),
        (OnChangeTo(to="b"), None, "b", False),
        (OnChangeTo(to="b"), "a", "c", False),
        (OnChangeFromTo(**{"from": "a", "to": "b"}), "a", "b", True),
        (OnChangeFromTo(**{"from": "a", "to": "b"}), "x", "b", False),
        (OnChangeFromTo(**{"from": "a", "to": "b"}), "a", "c", False),
        (OnChangeFromTo(**{"from": "a", "to": "b"}), None, "b", False),
        (OnChangeFromTo(**{"from": "a", "to": "a"}), "a", "a", True),
        (LessThan(threshold=10), None, "9.5", True),
        (LessThan(threshold=10), None, "10", False),
        (LessThan(threshold=10), None, "abc", False),
        (LessThanOrEqualTo(threshold=10), None, "10", True),
        (LessThanOrEqualTo(threshold=10), None, "10.01", False),
        (EqualTo(threshold=10), None, "10.0", True),
        (EqualTo(threshold=10), None, "1e1", True),
        (EqualTo(threshold=10), None, "10.5", False),
        (EqualTo(threshold=0.3), None, str(0.1 + 0.2), False),
        (MoreThan(threshold=100), "1", "101", True),
        (MoreThan(threshold=100), None, "100", False),
        (MoreThan(threshold=100), None, "N/A", False),
        (MoreThanOrEqualTo(threshold=100), None, "100", True),
        (MoreThanOrEqualTo(threshold=100), None, "99.99", False),
        (OnIncrease(), "10", "12", True),
        (OnIncrease(), None, "12", False),
        (OnIncrease(), "abc", "12", False),
        (OnIncrease(), "12", "10", False),
        (OnIncrease(), "12", "12", False),
        (OnIncrease(), "10", "abc", False),
        (OnDecrease(), "12", "10", True),
        (OnDecrease(), "10", "12", False),
        (OnDecrease(), None, "10", False),
        (OnDecrease(), "12", "x", False),
        (OnDecrease(), "-1", "-2.5", True),
    ],
)
def test_check_rule_table(rule, previous, current, expected):
    assert check_rule(rule, previous, current) is expected


def test_threshold_rules_ignore_previous_value():
    assert check_rule(MoreThan(threshold=1), "garbage", "2")
    assert check_rule(MoreThan(threshold=1), None, "2")


def test_first_match_wins():
    rules = [MoreThan(threshold=100), OnChange(), OnIncrease()]
    assert evaluate(rules, "5", "7") == OnChange()
    assert evaluate(rules, "5", "700") == MoreThan(threshold=100)


def test_no_match_returns_none():
    assert evaluate([OnChange(), LessThan(threshold=0)], "5", "5") is None
    assert evaluate([], "5", "7") is None


def test_evaluate_is_repeatable():
    rules = [OnChangeTo(to="in stock"), OnChange()]
    results = {evaluate(rules, "sold out", "in stock") for _ in range(5)}
    assert results == {OnChangeTo(to="in stock")}


def test_parse_failures_are_logged_not_raised(caplog):
    caplog.set_level("WARNING", logger="greed")
    assert evaluate([MoreThan(threshold=100)], None, "N/A") is None
    assert "N/A" in caplog.text


@pytest.mark.parametrize("text", ["12", "-3.5", "+1", ".5", "1e3", "inf", "nan"])
def test_parse_number_accepts(text):
    parse_number(text)


@pytest.mark.parametrize("text", ["", " 12", "12 ", "1_000", "12,5", "€12", "0x1A", "１２", "١٢"])
def test_parse_number_rejects(text):
    with pytest.raises(ValueError):
        parse_number(text)


def test_non_ascii_digits_are_not_numbers():
    assert evaluate([MoreThan(threshold=1)], None, "１２") is None
    assert evaluate([OnIncrease()], "1", "１２") is None
