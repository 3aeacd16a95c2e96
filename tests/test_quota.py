"""Tests for per-plan import quotas."""

import pytest

from src.archive.quota import PLAN_LIMITS, PlanTier, check_quota, prompt_limit
from src.dsl.errors import QuotaExceededError


def test_free_plan_limit():
    assert prompt_limit("free") == 20


@pytest.mark.parametrize("plan", ["pro", "team", "enterprise"])
def test_paid_plans_are_unlimited(plan):
    assert prompt_limit(plan) is None
    check_quota(plan, 10_000)


def test_every_tier_has_a_limit_entry():
    assert set(PLAN_LIMITS) == set(PlanTier)


def test_at_limit_is_allowed():
    check_quota("free", 20)


def test_over_limit_raises():
    with pytest.raises(QuotaExceededError) as exc_info:
        check_quota("free", 21)
    err = exc_info.value
    assert (err.plan, err.count, err.limit) == ("free", 21, 20)


def test_unknown_plan_raises_value_error():
    with pytest.raises(ValueError):
        check_quota("platinum", 1)
