from datetime import date
from decimal import Decimal

import pytest

from clearcents.calculations import STATUS_NO_BUDGET, STATUS_WARNING
from clearcents.db import FinanceStore
from clearcents.errors import (
    LimitReached,
    LimitReachedError,
    NotFoundError,
    ProtectedCategoryError,
)
from clearcents.models import Period
from clearcents.service import BudgetService

NOW = date(2024, 5, 20)


@pytest.fixture
def store(tmp_path):
    store = FinanceStore(tmp_path / 'finance.db')
    store.init_db()
    return store


@pytest.fixture
def free_service(store):
    return BudgetService(store, tier='free')


def _fill_categories(store, count, user_id='u1'):
    return [store.add_category(user_id, f'Category {i}', color='#4ECDC4') for i in range(count)]


def test_eleventh_category_is_rejected_on_free_plan(free_service, store):
    _fill_categories(store, 10)

    with pytest.raises(LimitReachedError) as excinfo:
        free_service.add_category('u1', 'One too many', color='#FF6B6B')

    assert excinfo.value.limit == LimitReached('categories', 10, 10)
    assert store.count_categories('u1') == 10
    assert 'One too many' not in [c.name for c in store.list_categories('u1')]


def test_limits_are_per_user(free_service, store):
    _fill_categories(store, 10, user_id='u1')
    created = free_service.add_category('u2', 'Dining', color='#FF6B6B')
    assert created.is_custom


def test_paid_plan_has_no_category_limit(store):
    service = BudgetService(store, tier='pro')
    _fill_categories(store, 10)
    service.add_category('u1', 'Eleventh', color='#FF6B6B')
    assert store.count_categories('u1') == 11


def test_new_budget_rejected_at_limit_but_edit_allowed(free_service, store):
    categories = _fill_categories(store, 11)
    for category in categories[:10]:
        free_service.set_budget('u1', category.id, 100, 'monthly')

    with pytest.raises(LimitReachedError) as excinfo:
        free_service.set_budget('u1', categories[10].id, 100, 'monthly')
    assert excinfo.value.limit == LimitReached('budgets', 10, 10)
    assert store.get_budget(categories[10].id) is None

    edited = free_service.set_budget('u1', categories[0].id, 250, Period.YEARLY)
    assert edited.amount == Decimal('250')
    assert edited.period is Period.YEARLY
    assert store.count_budgets('u1') == 10


def test_set_budget_for_someone_elses_category(free_service, store):
    theirs = store.add_category('u2', 'Dining', color='#FF6B6B')
    with pytest.raises(NotFoundError):
        free_service.set_budget('u1', theirs.id, 50, 'monthly')
    with pytest.raises(NotFoundError):
        free_service.set_budget('u1', 4242, 50, 'monthly')


def test_transaction_limit_on_free_plan(free_service, store):
    for day in range(1, 11):
        free_service.add_transaction('u1', -1, date(2024, 5, day))
    with pytest.raises(LimitReachedError) as excinfo:
        free_service.add_transaction('u1', -1, date(2024, 5, 11))
    assert excinfo.value.kind == 'transactions'
    assert store.count_transactions('u1') == 10


def test_remove_category(free_service, store):
    groceries = store.add_category('u1', 'Groceries', color='#4ECDC4', is_custom=False)
    hobby = free_service.add_category('u1', 'Hobby', color='#FF9F43')
    with pytest.raises(ProtectedCategoryError):
        free_service.remove_category(groceries.id)
    free_service.remove_category(hobby.id)
    assert [c.name for c in store.list_categories('u1')] == ['Groceries']


def test_overview_dining_example(free_service, store):
    dining = free_service.add_category('u1', 'Dining', color='#FF6B6B')
    misc = free_service.add_category('u1', 'Misc', color='#4ECDC4')
    free_service.set_budget('u1', dining.id, 50, 'monthly')
    for amount, day in [(-20, 2), (-15, 10), (-5, 19), (100, 5)]:
        store.add_transaction('u1', amount, date(2024, 5, day), category_id=dining.id)
    store.add_transaction('u1', -60, date(2024, 4, 28), category_id=dining.id)
    store.add_transaction('u1', -8, date(2024, 5, 1), category_id=misc.id)

    overview = free_service.overview('u1', 'monthly', NOW)

    assert overview.window.start == date(2024, 5, 1)
    assert overview.total_budgeted == Decimal('50')
    assert overview.total_spent == Decimal('48')
    assert overview.remaining == Decimal('2')
    assert overview.overall_percentage == Decimal('96')

    rows = overview.progress.set_index('Category')
    assert rows.loc['Dining', 'Spent'] == pytest.approx(40.0)
    assert rows.loc['Dining', 'Status'] == STATUS_WARNING
    assert rows.loc['Misc', 'Status'] == STATUS_NO_BUDGET


def test_overview_with_each_budget_period(free_service, store):
    dining = free_service.add_category('u1', 'Dining', color='#FF6B6B')
    free_service.set_budget('u1', dining.id, 20, 'weekly')
    store.add_transaction('u1', -5, date(2024, 5, 19), category_id=dining.id)
    store.add_transaction('u1', -30, date(2024, 5, 2), category_id=dining.id)

    overview = free_service.overview('u1', None, NOW)

    assert overview.period is None
    assert overview.window is None
    assert overview.total_spent == Decimal('5')
    assert overview.budgeted_in_period == Decimal('80')

    weekly = free_service.overview('u1', 'weekly', NOW)
    assert weekly.budgeted_in_period == Decimal('20')


def test_seeding_defaults_respects_category_limit(free_service, store):
    _fill_categories(store, 10)

    with pytest.raises(LimitReachedError) as excinfo:
        free_service.seed_default_categories('u1')

    assert excinfo.value.limit == LimitReached('categories', 10, 10)
    assert store.count_categories('u1') == 10


def test_seeding_defaults_fills_remaining_allowance(free_service, store):
    _fill_categories(store, 7)

    created = free_service.seed_default_categories('u1')

    assert len(created) == 3
    assert all(not c.is_custom for c in created)
    assert store.count_categories('u1') == 10


def test_seeding_defaults_on_paid_plan(store):
    service = BudgetService(store, tier='pro')
    _fill_categories(store, 10)

    assert len(service.seed_default_categories('u1')) == 8
    assert service.seed_default_categories('u1') == []
    assert store.count_categories('u1') == 18
