"""Plan tiers and the limits they put on categories, budgets and transactions.

Limits are configuration, read from ``settings/plans.json``.  A limit of
``None`` means unlimited.  The ``check_*`` helpers are pure: they return a
:class:`~clearcents.errors.LimitReached` value when a request must be
rejected and ``None`` when it may proceed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from .errors import (
    LIMIT_BUDGETS,
    LIMIT_CATEGORIES,
    LIMIT_TRANSACTIONS,
    LimitReached,
    ValidationError,
)
from .settings import get_plan_tiers

logger = logging.getLogger(__name__)

FREE = 'free'
PRO = 'pro'
ENTERPRISE = 'enterprise'
PLAN_TIERS = (FREE, PRO, ENTERPRISE)


@dataclass(frozen=True)
class PlanLimits:
    tier: str
    max_categories: Optional[int]
    max_budgets: Optional[int]
    max_transactions: Optional[int]

    @property
    def is_free(self) -> bool:
        return self.tier == FREE


def _optional_int(value) -> Optional[int]:
    if value is None:
        return None
    number = int(value)
    # -1 is accepted as "unlimited" alongside null
    return None if number < 0 else number


@lru_cache(maxsize=None)
def get_plan_limits(tier: str = FREE) -> PlanLimits:
    """Return the limits configured for ``tier``.

    Raises:
        ValidationError: If the tier is not configured.
    """
    key = (tier or '').strip().lower()
    tiers = get_plan_tiers()
    if key not in tiers:
        raise ValidationError(f"Unknown plan tier: {tier!r}")
    entry = tiers[key] or {}
    return PlanLimits(
        tier=key,
        max_categories=_optional_int(entry.get('max_categories')),
        max_budgets=_optional_int(entry.get('max_budgets')),
        max_transactions=_optional_int(entry.get('max_transactions')),
    )


def _check(kind: str, current: int, maximum: Optional[int]) -> Optional[LimitReached]:
    if maximum is None or current < maximum:
        return None
    logger.warning("Plan limit reached for %s: %d/%d", kind, current, maximum)
    return LimitReached(kind=kind, current=current, max=maximum)


def check_category_limit(limits: PlanLimits, category_count: int) -> Optional[LimitReached]:
    """Check whether one more category may be created."""
    if not limits.is_free:
        return None
    return _check(LIMIT_CATEGORIES, category_count, limits.max_categories)


def check_budget_limit(
    limits: PlanLimits,
    budget_count: int,
    has_budget: bool,
) -> Optional[LimitReached]:
    """Check whether a budget may be set on a category.

    Editing a category that already has a budget never changes the count,
    so it is always permitted.
    """
    if not limits.is_free or has_budget:
        return None
    return _check(LIMIT_BUDGETS, budget_count, limits.max_budgets)


def check_transaction_limit(limits: PlanLimits, transaction_count: int) -> Optional[LimitReached]:
    if not limits.is_free:
        return None
    return _check(LIMIT_TRANSACTIONS, transaction_count, limits.max_transactions)
