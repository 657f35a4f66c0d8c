"""Period windows and budget period conversion."""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import NamedTuple, Optional, Union

from .models import Period

DateLike = Union[date, datetime]

WEEKS_PER_MONTH = Decimal(4)
MONTHS_PER_YEAR = Decimal(12)


class Window(NamedTuple):
    """Inclusive ``[start, end]`` date range."""
    start: date
    end: date

    def __contains__(self, value: object) -> bool:  # type: ignore[override]
        if isinstance(value, datetime):
            value = value.date()
        if not isinstance(value, date):
            return False
        return self.start <= value <= self.end


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def period_window(period: Union[Period, str], now: Optional[DateLike] = None) -> Window:
    """Return the inclusive date window for ``period`` around ``now``.

    ``weekly`` is a rolling window covering the 7 days that end on ``now``;
    ``monthly`` and ``yearly`` are aligned to the calendar.

    Example:
        >>> period_window('monthly', date(2024, 2, 10))
        Window(start=datetime.date(2024, 2, 1), end=datetime.date(2024, 2, 29))
    """
    period = Period.parse(period)
    today = _as_date(now) if now is not None else date.today()

    if period is Period.WEEKLY:
        # (now - 7 days, now]
        return Window(today - timedelta(days=6), today)
    if period is Period.MONTHLY:
        last_day = calendar.monthrange(today.year, today.month)[1]
        return Window(today.replace(day=1), today.replace(day=last_day))
    return Window(date(today.year, 1, 1), date(today.year, 12, 31))


def convert_budget_amount(
    amount: Decimal,
    from_period: Union[Period, str],
    to_period: Union[Period, str],
) -> Decimal:
    """Express a budget amount in another period.

    Monthly is the base unit; a month counts as 4 weeks and a year as
    12 months.

    Example:
        >>> convert_budget_amount(Decimal('100'), 'weekly', 'monthly')
        Decimal('400')
    """
    from_period = Period.parse(from_period)
    to_period = Period.parse(to_period)
    if from_period is to_period:
        return amount

    monthly = amount
    if from_period is Period.WEEKLY:
        monthly = amount * WEEKS_PER_MONTH
    elif from_period is Period.YEARLY:
        monthly = amount / MONTHS_PER_YEAR

    if to_period is Period.WEEKLY:
        return monthly / WEEKS_PER_MONTH
    if to_period is Period.YEARLY:
        return monthly * MONTHS_PER_YEAR
    return monthly
