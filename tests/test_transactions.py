from datetime import date
from decimal import Decimal

import pytest

from clearcents.models import Transaction
from clearcents.transactions import filter_transactions, sort_transactions, transaction_summary


def _sample():
    rows = [
        (1, '-45.20', date(2024, 1, 3), 1, 'Whole Foods Market'),
        (2, '3200', date(2024, 1, 1), None, 'Payroll'),
        (3, '-12.00', date(2024, 1, 15), 2, 'Uber trip'),
        (4, '-120.00', date(2024, 2, 1), 1, 'Costco'),
        (5, '25.00', date(2024, 2, 3), 2, 'Uber refund'),
    ]
    return [
        Transaction(id=i, user_id='u1', category_id=c, amount=Decimal(a), transaction_date=d, description=desc)
        for i, a, d, c, desc in rows
    ]


def _ids(transactions):
    return [t.id for t in transactions]


def test_search_is_case_insensitive():
    assert _ids(filter_transactions(_sample(), search='UBER')) == [3, 5]


def test_filter_by_kind():
    assert _ids(filter_transactions(_sample(), kind='income')) == [2, 5]
    assert _ids(filter_transactions(_sample(), kind='expense')) == [1, 3, 4]


def test_filter_by_category_amount_and_date():
    txns = _sample()
    assert _ids(filter_transactions(txns, category_id=1)) == [1, 4]
    assert _ids(filter_transactions(txns, amount_range=(Decimal('-50'), Decimal('0')))) == [1, 3]
    assert _ids(filter_transactions(txns, date_range=(date(2024, 1, 3), date(2024, 2, 1)))) == [1, 3, 4]


def test_filters_combine():
    result = filter_transactions(_sample(), search='uber', kind='expense', category_id=2)
    assert _ids(result) == [3]


def test_unknown_kind_rejected():
    with pytest.raises(ValueError):
        filter_transactions(_sample(), kind='transfers')


def test_sort_transactions():
    assert _ids(sort_transactions(_sample())) == [5, 4, 3, 1, 2]
    assert _ids(sort_transactions(_sample(), key='amount', descending=False)) == [4, 1, 3, 5, 2]
    with pytest.raises(ValueError):
        sort_transactions(_sample(), key='payee')


def test_summary():
    summary = transaction_summary(_sample())
    assert summary['income'] == Decimal('3225')
    assert summary['expenses'] == Decimal('177.20')
    assert summary['net'] == Decimal('3047.80')
