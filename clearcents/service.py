"""Budget service: store access combined with plan-limit enforcement.

The service is the seam a host application calls into.  It fetches what it
needs from :class:`~clearcents.db.FinanceStore`, applies the checks in
:mod:`clearcents.limits` and the calculations in
:mod:`clearcents.calculations`, and returns plain values.  It holds no state
besides the store and the plan limits.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional, Tuple, Union

import pandas as pd

from . import config
from .calculations import BudgetTotals, budget_progress, budget_totals, converted_budget_total
from .db import FinanceStore
from .errors import LimitReachedError, NotFoundError
from .limits import (
    PlanLimits,
    check_budget_limit,
    check_category_limit,
    check_transaction_limit,
    get_plan_limits,
)
from .models import Budget, Category, Period, Transaction
from .periods import Window, period_window


@dataclass(frozen=True)
class BudgetOverview:
    period: Optional[Period]
    window: Optional[Window]
    totals: BudgetTotals
    progress: pd.DataFrame
    budgeted_in_period: Decimal

    @property
    def total_budgeted(self):
        return self.totals.total_budgeted

    @property
    def total_spent(self):
        return self.totals.total_spent

    @property
    def remaining(self):
        return self.totals.remaining

    @property
    def overall_percentage(self):
        return self.totals.overall_percentage


class BudgetService:
    """Category, budget and transaction operations for one plan tier."""

    def __init__(self, store: Optional[FinanceStore] = None, tier: Optional[str] = None):
        self.store = store or FinanceStore()
        self.limits: PlanLimits = get_plan_limits(tier or config.DEFAULT_PLAN)

    def add_category(
        self,
        user_id: str,
        name: str,
        icon: str = '',
        color: str = '#4ECDC4',
    ) -> Category:
        """Create a custom category unless the plan's category limit is reached.

        Raises:
            LimitReachedError: If the free plan's category limit is reached
            ValidationError: If the name is empty or a duplicate
        """
        limit = check_category_limit(self.limits, self.store.count_categories(user_id))
        if limit is not None:
            raise LimitReachedError(limit)
        return self.store.add_category(user_id, name, icon=icon, color=color, is_custom=True)

    def seed_default_categories(self, user_id: str) -> List[Category]:
        """Add the predefined categories, up to what the plan still allows.

        Raises:
            LimitReachedError: If defaults are missing but no category slot is left
        """
        missing = self.store.missing_default_categories(user_id)
        if not missing:
            return []
        count = self.store.count_categories(user_id)
        limit = check_category_limit(self.limits, count)
        if limit is not None:
            raise LimitReachedError(limit)
        allowance = None
        if self.limits.is_free and self.limits.max_categories is not None:
            allowance = self.limits.max_categories - count
        return self.store.seed_default_categories(user_id, limit=allowance)

    def set_budget(self, user_id: str, category_id: int, amount: Any, period: Union[Period, str]) -> Budget:
        """Create or edit the budget of a category.

        Only creating a new budget counts toward the plan limit; editing an
        existing one always goes through.

        Raises:
            NotFoundError: If the category does not exist or belongs to someone else
            LimitReachedError: If a new budget would exceed the free plan's limit
            ValidationError: If the amount is not positive or the period unknown
        """
        category = self.store.get_category(category_id)
        if category.user_id != user_id:
            raise NotFoundError('Category', category_id)
        existing = self.store.get_budget(category_id)
        has_budget = existing is not None
        limit = check_budget_limit(self.limits, self.store.count_budgets(user_id), has_budget)
        if limit is not None:
            raise LimitReachedError(limit)
        return self.store.upsert_budget(category_id, amount, period)

    def add_transaction(
        self,
        user_id: str,
        amount: Any,
        transaction_date: Any,
        category_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> Transaction:
        limit = check_transaction_limit(self.limits, self.store.count_transactions(user_id))
        if limit is not None:
            raise LimitReachedError(limit)
        return self.store.add_transaction(
            user_id, amount, transaction_date, category_id=category_id, description=description
        )

    def remove_category(self, category_id: int) -> None:
        self.store.delete_category(category_id)

    def overview(
        self,
        user_id: str,
        period: Union[Period, str, None] = Period.MONTHLY,
        now: Union[date, datetime, None] = None,
    ) -> BudgetOverview:
        """Budget totals and per-category progress for ``period``.

        With ``period=None`` each category is measured over its own
        budget's period.  ``budgeted_in_period`` expresses every budget
        in the selected period (monthly when none is selected).
        """
        selected = Period.parse(period) if period is not None else None
        pairs: List[Tuple[Category, Optional[Budget]]] = self.store.list_categories_with_budgets(user_id)
        window = period_window(selected, now) if selected is not None else None
        if window is not None:
            transactions = self.store.list_transactions(user_id, date_from=window.start, date_to=window.end)
        else:
            transactions = self.store.list_transactions(user_id)
        return BudgetOverview(
            period=selected,
            window=window,
            totals=budget_totals(pairs, transactions, selected, now),
            progress=budget_progress(pairs, transactions, selected, now),
            budgeted_in_period=converted_budget_total(pairs, selected or Period.MONTHLY),
        )
