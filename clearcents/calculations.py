"""Budget aggregation and status calculations.

Every function here is pure: it reads the records it is given and returns
a new value.  Spend is measured from expenses only (negative amounts);
income never counts against a budget.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from .models import Budget, Category, Period, Transaction
from .periods import Window, convert_budget_amount, period_window

STATUS_NO_BUDGET = 'no-budget'
STATUS_OVERSPENT = 'overspent'
STATUS_WARNING = 'warning'
STATUS_ON_TRACK = 'on-track'

OVERSPENT_THRESHOLD = Decimal(90)
WARNING_THRESHOLD = Decimal(75)

ZERO = Decimal(0)
HUNDRED = Decimal(100)

CategoryBudget = Tuple[Category, Optional[Budget]]

PROGRESS_COLUMNS = [
    'Category ID',
    'Category',
    'Icon',
    'Color',
    'Budget',
    'Period',
    'Spent',
    'Remaining',
    'Percent Used',
    'Status',
]


def category_spent(
    category_id: int,
    transactions: Iterable[Transaction],
    window: Window,
) -> Decimal:
    """Total expense for one category inside ``window``.

    Example:
        >>> category_spent(1, [], period_window('monthly'))
        Decimal('0')
    """
    spent = ZERO
    for txn in transactions:
        if txn.category_id != category_id:
            continue
        if txn.amount >= 0:
            continue
        if txn.transaction_date not in window:
            continue
        spent += -txn.amount
    return spent


def budget_percentage(spent: Decimal, amount: Optional[Decimal]) -> Decimal:
    """``spent`` as a percentage of ``amount``; 0 when there is no budget."""
    if not amount:
        return ZERO
    return spent / amount * HUNDRED


def budget_status(spent: Decimal, amount: Optional[Decimal]) -> str:
    """Classify spend against a budget amount.

    Example:
        >>> budget_status(Decimal('40'), Decimal('50'))
        'warning'
    """
    if not amount:
        return STATUS_NO_BUDGET
    percentage = budget_percentage(spent, amount)
    if percentage >= OVERSPENT_THRESHOLD:
        return STATUS_OVERSPENT
    if percentage >= WARNING_THRESHOLD:
        return STATUS_WARNING
    return STATUS_ON_TRACK


@dataclass(frozen=True)
class BudgetTotals:
    total_budgeted: Decimal
    total_spent: Decimal

    @property
    def remaining(self) -> Decimal:
        return self.total_budgeted - self.total_spent

    @property
    def overall_percentage(self) -> Decimal:
        if self.total_budgeted <= 0:
            return ZERO
        return self.total_spent / self.total_budgeted * HUNDRED


def _category_window(
    budget: Optional[Budget],
    period: Optional[Period],
    now: Union[date, datetime, None],
) -> Window:
    if period is not None:
        return period_window(period, now)
    own = budget.period if budget is not None else Period.MONTHLY
    return period_window(own, now)


def budget_totals(
    pairs: Sequence[CategoryBudget],
    transactions: Sequence[Transaction],
    period: Union[Period, str, None] = Period.MONTHLY,
    now: Union[date, datetime, None] = None,
) -> BudgetTotals:
    """Sum budgets and spend across categories.

    When ``period`` is ``None`` each category is measured over its own
    budget's period (monthly for categories without a budget).
    """
    selected = Period.parse(period) if period is not None else None
    total_budgeted = ZERO
    total_spent = ZERO
    for category, budget in pairs:
        if budget is not None:
            total_budgeted += budget.amount
        window = _category_window(budget, selected, now)
        total_spent += category_spent(category.id, transactions, window)
    return BudgetTotals(total_budgeted=total_budgeted, total_spent=total_spent)


def converted_budget_total(
    pairs: Sequence[CategoryBudget],
    period: Union[Period, str] = Period.MONTHLY,
) -> Decimal:
    """Sum of every budget after converting it to ``period``.

    Example:
        >>> converted_budget_total([(groceries, Budget(1, 1, Decimal('100'), Period.WEEKLY))])
        Decimal('400')
    """
    target = Period.parse(period)
    total = ZERO
    for _, budget in pairs:
        if budget is not None:
            total += convert_budget_amount(budget.amount, budget.period, target)
    return total


def budget_progress(
    pairs: Sequence[CategoryBudget],
    transactions: Sequence[Transaction],
    period: Union[Period, str, None] = Period.MONTHLY,
    now: Union[date, datetime, None] = None,
) -> pd.DataFrame:
    """One row per category with its budget, spend and status.

    Returns:
        DataFrame with columns: Category ID, Category, Icon, Color, Budget,
        Period, Spent, Remaining, Percent Used, Status
    """
    selected = Period.parse(period) if period is not None else None
    rows: List[dict] = []
    for category, budget in pairs:
        window = _category_window(budget, selected, now)
        spent = category_spent(category.id, transactions, window)
        amount = budget.amount if budget is not None else ZERO
        rows.append({
            'Category ID': category.id,
            'Category': category.name,
            'Icon': category.icon,
            'Color': category.color,
            'Budget': float(amount),
            'Period': budget.period.value if budget is not None else None,
            'Spent': float(spent),
            'Remaining': float(amount - spent),
            'Percent Used': float(budget_percentage(spent, amount)),
            'Status': budget_status(spent, amount),
        })
    return pd.DataFrame(rows, columns=PROGRESS_COLUMNS)
