"""Typed records for categories, budgets and transactions.

Rows coming out of the store are converted here so the rest of the
package never handles loosely-typed dictionaries.  All validation of
amounts, periods, colours and names happens in the ``parse_*`` helpers
and the ``from_row`` constructors.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Optional

from .errors import ValidationError

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


class Period(str, Enum):
    WEEKLY = 'weekly'
    MONTHLY = 'monthly'
    YEARLY = 'yearly'

    @classmethod
    def parse(cls, value: Any) -> 'Period':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ', '.join(p.value for p in cls)
            raise ValidationError(f"Unknown period {value!r}; expected one of {choices}") from None


def parse_amount(value: Any) -> Decimal:
    """Convert textual or numeric amounts into a ``Decimal``.

    Accepts accounting negatives such as ``(12.50)`` and strips currency
    markers and thousands separators.

    Example:
        >>> parse_amount('(1,234.50)')
        Decimal('-1234.50')
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"Invalid amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        cleaned = str(value).strip()
        if cleaned.startswith("(") and cleaned.endswith(")"):
            cleaned = f"-{cleaned[1:-1]}"
        cleaned = cleaned.replace("$", "").replace(",", "").strip()
        try:
            result = Decimal(cleaned)
        except InvalidOperation:
            raise ValidationError(f"Invalid amount: {value!r}") from None
    if not result.is_finite():
        raise ValidationError(f"Invalid amount: {value!r}")
    return result


def parse_budget_amount(value: Any) -> Decimal:
    amount = parse_amount(value)
    if amount <= 0:
        raise ValidationError("Budget amount must be greater than zero")
    return amount


def parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if hasattr(value, 'to_pydatetime'):
        return value.to_pydatetime().date()
    text = str(value).strip()
    try:
        if len(text) > 10:
            return datetime.fromisoformat(text).date()
        return date.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r}") from None


def parse_name(value: Any) -> str:
    name = str(value or '').strip()
    if not name:
        raise ValidationError("Category name cannot be empty")
    return name


def name_key(name: str) -> str:
    """Key under which category names must be unique for a user."""
    return name.strip().casefold()


def parse_color(value: Any) -> str:
    color = str(value or '').strip()
    if not _HEX_COLOR.match(color):
        raise ValidationError(f"Invalid colour {value!r}; expected #RRGGBB")
    return color.upper()


@dataclass(frozen=True)
class Category:
    id: int
    user_id: str
    name: str
    icon: str
    color: str
    is_custom: bool = True

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'Category':
        return cls(
            id=int(row['id']),
            user_id=str(row['user_id']),
            name=parse_name(row['name']),
            icon=str(row['icon'] or ''),
            color=parse_color(row['color']),
            is_custom=bool(row['is_custom']),
        )


@dataclass(frozen=True)
class Budget:
    id: int
    category_id: int
    amount: Decimal
    period: Period = Period.MONTHLY

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'Budget':
        return cls(
            id=int(row['id']),
            category_id=int(row['category_id']),
            amount=parse_budget_amount(row['amount']),
            period=Period.parse(row['period']),
        )


@dataclass(frozen=True)
class Transaction:
    id: int
    user_id: str
    category_id: Optional[int]
    amount: Decimal
    transaction_date: date
    description: Optional[str] = None

    @property
    def is_expense(self) -> bool:
        return self.amount < 0

    @property
    def is_income(self) -> bool:
        return self.amount > 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> 'Transaction':
        category_id = row['category_id']
        return cls(
            id=int(row['id']),
            user_id=str(row['user_id']),
            category_id=int(category_id) if category_id is not None else None,
            amount=parse_amount(row['amount']),
            transaction_date=parse_date(row['transaction_date']),
            description=row['description'] or None,
        )
