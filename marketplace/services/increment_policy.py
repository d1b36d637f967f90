"""
Bid increment policy evaluation.

Validates and normalizes the increment strategy submitted with a new
auction before it is persisted. Pure logic: no database access.

Strategies:
- fixed: one rule, positive absolute step
- percentage: one rule, step is a percentage of the current bid in [0.1, 100]
- range-based: one or more rules over half-open bid ranges
  [minBidAmount, maxBidAmount), the last of which may be unbounded

Yankee auctions are quantity driven, so their increment settings are
replaced with fixed/0/no rules whatever the caller sent.
"""

from typing import Any, Dict, List, Optional

from marketplace.constants import (
    MAX_PERCENT_INCREMENT,
    MIN_PERCENT_INCREMENT,
    YANKEE_SUBTYPE,
)
from marketplace.dataclasses import BidIncrementRule, IncrementPolicy
from marketplace.enums import BidIncrementType
from marketplace.services.base import ValidationError
from marketplace.utils import to_number

FIXED_ERROR = "Minimum increment must be a positive number for fixed type"
PERCENTAGE_ERROR = (
    f"Percentage increment must be between {MIN_PERCENT_INCREMENT:g} "
    f"and {MAX_PERCENT_INCREMENT:g}"
)
RANGE_REQUIRED_ERROR = "At least one bid increment rule is required for range-based auctions"


def evaluate_increment_policy(
    auction_sub_type: Optional[str],
    increment_type: Optional[str],
    rules: Any,
    minimum_increment: Any = None,
    allow_range_gaps: bool = True
) -> IncrementPolicy:
    """Validate a submitted increment strategy and normalize it.

    Args:
        auction_sub_type: Auction subtype; 'yankee' overrides everything else.
        increment_type: 'fixed', 'percentage' or 'range-based' (defaults to fixed).
        rules: List of rule dicts as submitted by the wizard.
        minimum_increment: Top-level minimumIncrement, used for a fixed
            policy submitted without rules.
        allow_range_gaps: Accept range-based rules that leave uncovered gaps.

    Returns:
        The normalized IncrementPolicy.

    Raises:
        ValidationError: If the strategy or its rules are invalid.
    """
    if (auction_sub_type or '').strip().lower() == YANKEE_SUBTYPE:
        return IncrementPolicy(increment_type=BidIncrementType.FIXED)

    policy_type = BidIncrementType.parse(increment_type or BidIncrementType.FIXED.value)
    if policy_type is None:
        raise ValidationError(
            "Invalid bid increment type. Must be one of: "
            + ", ".join(BidIncrementType.values())
        )

    if rules is None:
        rules = []
    if not isinstance(rules, list):
        raise ValidationError("Bid increment rules must be a list")

    if policy_type is BidIncrementType.FIXED:
        return _evaluate_fixed(rules, minimum_increment)
    if policy_type is BidIncrementType.PERCENTAGE:
        return _evaluate_percentage(rules)
    return _evaluate_range_based(rules, allow_range_gaps)


def _single_rule(rules: List[Any], policy_type: BidIncrementType, empty_error: str) -> Dict[str, Any]:
    if not rules:
        raise ValidationError(empty_error)
    if len(rules) > 1:
        raise ValidationError(
            f"Exactly one bid increment rule is expected for {policy_type.value} type"
        )
    rule = rules[0]
    if not isinstance(rule, dict):
        raise ValidationError("Bid increment rules must be objects")
    return rule


def _evaluate_fixed(rules: List[Any], minimum_increment: Any) -> IncrementPolicy:
    if not rules and minimum_increment is not None:
        rules = [{"incrementValue": minimum_increment}]

    raw = _single_rule(rules, BidIncrementType.FIXED, FIXED_ERROR)
    value = to_number(raw.get("incrementValue"))
    if value is None or value <= 0:
        raise ValidationError(FIXED_ERROR)

    rule = BidIncrementRule(
        min_bid_amount=_min_amount(raw),
        increment_value=value,
        increment_type=BidIncrementType.FIXED,
        id=raw.get("id") or "rule-1",
    )
    return IncrementPolicy(
        increment_type=BidIncrementType.FIXED,
        rules=[rule],
        minimum_increment=value,
    )


def _evaluate_percentage(rules: List[Any]) -> IncrementPolicy:
    raw = _single_rule(rules, BidIncrementType.PERCENTAGE, PERCENTAGE_ERROR)
    value = to_number(raw.get("incrementValue"))
    if value is None or not MIN_PERCENT_INCREMENT <= value <= MAX_PERCENT_INCREMENT:
        raise ValidationError(PERCENTAGE_ERROR)

    rule = BidIncrementRule(
        min_bid_amount=_min_amount(raw),
        increment_value=value,
        increment_type=BidIncrementType.PERCENTAGE,
        id=raw.get("id") or "rule-1",
    )
    return IncrementPolicy(
        increment_type=BidIncrementType.PERCENTAGE,
        rules=[rule],
        percent=value,
    )


def _evaluate_range_based(rules: List[Any], allow_range_gaps: bool) -> IncrementPolicy:
    if not rules:
        raise ValidationError(RANGE_REQUIRED_ERROR)

    parsed = [_parse_range_rule(raw) for raw in rules]
    parsed.sort(key=lambda rule: rule.min_bid_amount)

    for previous, current in zip(parsed, parsed[1:]):
        if previous.is_unbounded:
            raise ValidationError("Only the last range rule may omit maxBidAmount")
        if current.min_bid_amount < previous.max_bid_amount:
            raise ValidationError("Bid increment ranges must not overlap")
        if not allow_range_gaps and current.min_bid_amount != previous.max_bid_amount:
            raise ValidationError("Bid increment ranges must be contiguous")

    for index, rule in enumerate(parsed, start=1):
        rule.id = rule.id or f"rule-{index}"

    return IncrementPolicy(increment_type=BidIncrementType.RANGE_BASED, rules=parsed)


def _parse_range_rule(raw: Any) -> BidIncrementRule:
    if not isinstance(raw, dict):
        raise ValidationError("Bid increment rules must be objects")

    min_amount = _min_amount(raw)

    max_amount = None
    if raw.get("maxBidAmount") not in (None, ''):
        max_amount = to_number(raw.get("maxBidAmount"))
        if max_amount is None or max_amount <= min_amount:
            raise ValidationError("maxBidAmount must be greater than minBidAmount")

    rule_type = BidIncrementType.parse(raw.get("incrementType")) or BidIncrementType.RANGE_BASED
    value = to_number(raw.get("incrementValue"))
    if value is None or value <= 0:
        raise ValidationError("Every range rule needs a positive incrementValue")
    in_bounds = MIN_PERCENT_INCREMENT <= value <= MAX_PERCENT_INCREMENT
    if rule_type is BidIncrementType.PERCENTAGE and not in_bounds:
        raise ValidationError(PERCENTAGE_ERROR)

    return BidIncrementRule(
        min_bid_amount=min_amount,
        max_bid_amount=max_amount,
        increment_value=value,
        increment_type=rule_type,
        id=raw.get("id"),
    )


def _min_amount(raw: Dict[str, Any]) -> float:
    if raw.get("minBidAmount") in (None, ''):
        return 0.0
    value = to_number(raw.get("minBidAmount"))
    if value is None or value < 0:
        raise ValidationError("minBidAmount must be a non-negative number")
    return value
