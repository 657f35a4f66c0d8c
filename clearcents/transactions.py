"""In-memory filtering, sorting and summaries over transaction lists."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from .models import Transaction

KIND_ALL = 'all'
KIND_INCOME = 'income'
KIND_EXPENSE = 'expense'

SORT_KEYS = {
    'date': lambda t: (t.transaction_date, t.id),
    'amount': lambda t: (t.amount, t.id),
}


def filter_transactions(
    transactions: Iterable[Transaction],
    search: str = '',
    kind: str = KIND_ALL,
    category_id: Optional[int] = None,
    amount_range: Optional[Tuple[Decimal, Decimal]] = None,
    date_range: Optional[Tuple[date, date]] = None,
) -> List[Transaction]:
    """Return the transactions matching every given filter.

    Args:
        search: Case-insensitive substring of the description
        kind: 'all', 'income' (positive amounts) or 'expense' (negative amounts)
        category_id: Keep only this category
        amount_range: Inclusive (low, high) bounds on the signed amount
        date_range: Inclusive (start, end) bounds on the transaction date
    """
    if kind not in (KIND_ALL, KIND_INCOME, KIND_EXPENSE):
        raise ValueError(f"Unknown transaction kind: {kind!r}")
    needle = (search or '').strip().lower()

    result = []
    for txn in transactions:
        if needle and needle not in (txn.description or '').lower():
            continue
        if kind == KIND_INCOME and not txn.is_income:
            continue
        if kind == KIND_EXPENSE and not txn.is_expense:
            continue
        if category_id is not None and txn.category_id != category_id:
            continue
        if amount_range and not (amount_range[0] <= txn.amount <= amount_range[1]):
            continue
        if date_range and not (date_range[0] <= txn.transaction_date <= date_range[1]):
            continue
        result.append(txn)
    return result


def sort_transactions(
    transactions: Iterable[Transaction],
    key: str = 'date',
    descending: bool = True,
) -> List[Transaction]:
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {key!r}")
    return sorted(transactions, key=SORT_KEYS[key], reverse=descending)


def transaction_summary(transactions: Iterable[Transaction]) -> Dict[str, Decimal]:
    """Income, expenses (as a positive magnitude) and net balance."""
    income = Decimal(0)
    expenses = Decimal(0)
    for txn in transactions:
        if txn.amount > 0:
            income += txn.amount
        else:
            expenses += -txn.amount
    return {
        'income': income,
        'expenses': expenses,
        'net': income - expenses,
    }
