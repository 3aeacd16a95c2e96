"""Per-plan limits on how many prompts one import may bring in."""

import logging
from enum import Enum
from typing import Optional

from src.dsl.errors import QuotaExceededError

logger = logging.getLogger(__name__)


class PlanTier(str, Enum):
    FREE = "free"
    PRO = "pro"
    TEAM = "team"
    ENTERPRISE = "enterprise"


# None means unlimited
PLAN_LIMITS: dict[PlanTier, Optional[int]] = {
    PlanTier.FREE: 20,
    PlanTier.PRO: None,
    PlanTier.TEAM: None,
    PlanTier.ENTERPRISE: None,
}


def prompt_limit(plan: str) -> Optional[int]:
    """Prompt documents allowed per import for plan (None = unlimited).

    Raises:
        ValueError: plan is not a known tier
    """
    return PLAN_LIMITS[PlanTier(plan)]


def check_quota(plan: str, candidate_count: int) -> None:
    """Raise QuotaExceededError when candidate_count is over the plan's limit."""
    limit = prompt_limit(plan)
    if limit is not None and candidate_count > limit:
        logger.warning(
            f"Import rejected: {candidate_count} prompts exceeds {plan} limit of {limit}"
        )
        raise QuotaExceededError(plan, candidate_count, limit)
