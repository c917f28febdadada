# File: greed/rules.py
"""greed.rules: deciding whether a value transition deserves an alert.

Every rule is a predicate over ``(previous, current)``, where ``previous``
is ``None`` on a site's very first observation. A list of rules is
evaluated in order and the first rule that matches wins.

Change rules compare strings exactly. Threshold and trend rules need the
value(s) to parse as floats; when they don't, the rule simply does not
match. Float equality is plain ``==`` with no tolerance.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

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
    RuleSpec,
)
from greed.logger import get_logger

__all__: Sequence[str] = ("evaluate", "check_rule", "parse_number")

log = get_logger(__name__)


def parse_number(value: str) -> float:
    """Parse *value* as a decimal float.

    Stricter than :func:`float`: surrounding whitespace, ``_`` digit
    separators and non-ASCII digits are rejected.
    """
    if not value.isascii() or value != value.strip() or "_" in value:
        raise ValueError(f"could not convert string to float: {value!r}")
    return float(value)


def _as_number(value: str, role: str) -> Optional[float]:
    try:
        return parse_number(value)
    except ValueError:
        log.warning("Failed to parse %s value as float: %r", role, value)
        return None


def _compare_current(current: str, predicate: Callable[[float], bool]) -> bool:
    number = _as_number(current, "new")
    return number is not None and predicate(number)


def _compare_trend(previous: Optional[str], current: str, predicate: Callable[[float, float], bool]) -> bool:
    new = _as_number(current, "new")
    if new is None or previous is None:
        return False
    old = _as_number(previous, "last")
    return old is not None and predicate(old, new)


def check_rule(rule: RuleSpec, previous: Optional[str], current: str) -> bool:
    """Return True when *rule* matches the transition ``previous -> current``."""
    log.debug("Checking rule: %r", rule)

    if isinstance(rule, OnChange):
        return previous is not None and previous != current
    if isinstance(rule, OnChangeFrom):
        return previous is not None and previous != current and previous == rule.from_
    if isinstance(rule, OnChangeTo):
        return previous is not None and previous != current and current == rule.to
    if isinstance(rule, OnChangeFromTo):
        return previous is not None and previous == rule.from_ and current == rule.to

    if isinstance(rule, LessThan):
        return _compare_current(current, lambda new: new < rule.threshold)
    if isinstance(rule, LessThanOrEqualTo):
        return _compare_current(current, lambda new: new <= rule.threshold)
    if isinstance(rule, EqualTo):
        return _compare_current(current, lambda new: new == rule.threshold)
    if isinstance(rule, MoreThan):
        return _compare_current(current, lambda new: new > rule.threshold)
    if isinstance(rule, MoreThanOrEqualTo):
        return _compare_current(current, lambda new: new >= rule.threshold)

    if isinstance(rule, OnDecrease):
        return _compare_trend(previous, current, lambda old, new: old > new)
    if isinstance(rule, OnIncrease):
        return _compare_trend(previous, current, lambda old, new: old < new)

    raise TypeError(f"Unknown rule: {rule!r}")


def evaluate(rules: Sequence[RuleSpec], previous: Optional[str], current: str) -> Optional[RuleSpec]:
    """Return the first rule in *rules* matching ``previous -> current``, or None."""
    log.debug("Checking %d rules. Change from: %r to: %r", len(rules), previous, current)

    for rule in rules:
        if check_rule(rule, previous, current):
            log.info("Matched rule: %r", rule)
            return rule
    return None
