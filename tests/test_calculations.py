from datetime import date
from decimal import Decimal

import pandas as pd
import pytest

from clearcents.calculations import (
    PROGRESS_COLUMNS,
    STATUS_NO_BUDGET,
    STATUS_ON_TRACK,
    STATUS_OVERSPENT,
    STATUS_WARNING,
    budget_percentage,
    budget_progress,
    budget_status,
    budget_totals,
    category_spent,
    converted_budget_total,
)
from clearcents.models import Budget, Category, Period, Transaction
from clearcents.periods import period_window

NOW = date(2024, 5, 20)


def _txn(txn_id, amount, day, category_id=1, description=None):
    return Transaction(
        id=txn_id,
        user_id='u1',
        category_id=category_id,
        amount=Decimal(str(amount)),
        transaction_date=day,
        description=description,
    )


def _category(category_id, name, is_custom=True):
    return Category(id=category_id, user_id='u1', name=name, icon='smile', color='#4ECDC4', is_custom=is_custom)


def _budget(category_id, amount, period=Period.MONTHLY):
    return Budget(id=category_id, category_id=category_id, amount=Decimal(str(amount)), period=period)


def dining_transactions():
    return [
        _txn(1, -20, date(2024, 5, 2)),
        _txn(2, -15, date(2024, 5, 10)),
        _txn(3, -5, date(2024, 5, 19)),
        _txn(4, 100, date(2024, 5, 5)),
    ]


def test_dining_example_is_warning():
    window = period_window('monthly', NOW)
    spent = category_spent(1, dining_transactions(), window)
    assert spent == Decimal('40')
    assert budget_percentage(spent, Decimal('50')) == Decimal('80')
    assert budget_status(spent, Decimal('50')) == STATUS_WARNING


def test_spent_ignores_income_other_categories_and_out_of_window():
    window = period_window('monthly', NOW)
    transactions = dining_transactions() + [
        _txn(5, -300, date(2024, 4, 30)),
        _txn(6, -70, date(2024, 5, 3), category_id=2),
        _txn(7, 500, date(2024, 5, 3)),
    ]
    assert category_spent(1, transactions, window) == Decimal('40')
    assert category_spent(2, transactions, window) == Decimal('70')


def test_spent_is_zero_without_matches():
    window = period_window('weekly', NOW)
    assert category_spent(1, [], window) == 0
    assert category_spent(99, dining_transactions(), window) == 0


def test_spent_is_idempotent():
    window = period_window('monthly', NOW)
    transactions = dining_transactions()
    first = category_spent(1, transactions, window)
    second = category_spent(1, transactions, window)
    assert first == second
    assert transactions == dining_transactions()


@pytest.mark.parametrize('spent, amount, expected', [
    ('0', '100', STATUS_ON_TRACK),
    ('74.99', '100', STATUS_ON_TRACK),
    ('75', '100', STATUS_WARNING),
    ('89.99', '100', STATUS_WARNING),
    ('90', '100', STATUS_OVERSPENT),
    ('150', '100', STATUS_OVERSPENT),
    ('10', '0', STATUS_NO_BUDGET),
])
def test_status_thresholds(spent, amount, expected):
    assert budget_status(Decimal(spent), Decimal(amount)) == expected


def test_status_without_budget():
    assert budget_status(Decimal('10'), None) == STATUS_NO_BUDGET
    assert budget_percentage(Decimal('10'), None) == 0


def test_totals_with_overspend():
    pairs = [
        (_category(1, 'Rent'), _budget(1, 200)),
        (_category(2, 'Food'), _budget(2, 200)),
        (_category(3, 'Fun'), _budget(3, 100)),
    ]
    transactions = [
        _txn(1, -250, date(2024, 5, 1), category_id=1),
        _txn(2, -200, date(2024, 5, 2), category_id=2),
        _txn(3, -100, date(2024, 5, 3), category_id=3),
    ]
    totals = budget_totals(pairs, transactions, 'monthly', NOW)
    assert totals.total_budgeted == Decimal('500')
    assert totals.total_spent == Decimal('550')
    assert totals.remaining == Decimal('-50')
    assert totals.overall_percentage == Decimal('110')


def test_totals_count_unbudgeted_spend_but_not_budget():
    pairs = [
        (_category(1, 'Dining'), _budget(1, 50)),
        (_category(2, 'Misc'), None),
    ]
    transactions = dining_transactions() + [_txn(8, -10, date(2024, 5, 4), category_id=2)]
    totals = budget_totals(pairs, transactions, 'monthly', NOW)
    assert totals.total_budgeted == Decimal('50')
    assert totals.total_spent == Decimal('50')


def test_overall_percentage_zero_without_budgets():
    totals = budget_totals([(_category(1, 'Dining'), None)], dining_transactions(), 'monthly', NOW)
    assert totals.overall_percentage == 0
    assert totals.remaining == Decimal('-40')


def test_totals_can_use_each_budget_period():
    pairs = [
        (_category(1, 'Dining'), _budget(1, 50, Period.WEEKLY)),
        (_category(2, 'Travel'), _budget(2, 1000, Period.YEARLY)),
    ]
    transactions = dining_transactions() + [_txn(9, -400, date(2024, 1, 15), category_id=2)]
    totals = budget_totals(pairs, transactions, None, NOW)
    # weekly window for Dining is May 14-20: only the -5 on May 19 counts
    assert totals.total_spent == Decimal('405')


def test_budget_progress_frame():
    pairs = [
        (_category(1, 'Dining'), _budget(1, 50)),
        (_category(2, 'Misc'), None),
    ]
    progress = budget_progress(pairs, dining_transactions(), 'monthly', NOW)
    assert list(progress.columns) == PROGRESS_COLUMNS
    dining = progress[progress['Category'] == 'Dining'].iloc[0]
    assert dining['Spent'] == pytest.approx(40.0)
    assert dining['Remaining'] == pytest.approx(10.0)
    assert dining['Percent Used'] == pytest.approx(80.0)
    assert dining['Status'] == STATUS_WARNING
    misc = progress[progress['Category'] == 'Misc'].iloc[0]
    assert misc['Status'] == STATUS_NO_BUDGET
    assert pd.isna(misc['Period'])


def test_budget_progress_empty():
    progress = budget_progress([], [], 'monthly', NOW)
    assert progress.empty
    assert list(progress.columns) == PROGRESS_COLUMNS


def test_converted_budget_total_expresses_budgets_in_one_period():
    pairs = [
        (_category(1, 'Dining'), _budget(1, 100, Period.WEEKLY)),
        (_category(2, 'Travel'), _budget(2, 1200, Period.YEARLY)),
        (_category(3, 'Rent'), _budget(3, 500)),
        (_category(4, 'Misc'), None),
    ]
    assert converted_budget_total(pairs, 'monthly') == Decimal('1000')
    assert converted_budget_total(pairs, 'yearly') == Decimal('12000')
    assert converted_budget_total([], 'weekly') == Decimal('0')
