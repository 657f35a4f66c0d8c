import pytest

from clearcents.errors import LimitReached, LimitReachedError, ValidationError
from clearcents.limits import (
    check_budget_limit,
    check_category_limit,
    check_transaction_limit,
    get_plan_limits,
)
from clearcents.settings import get_default_categories, get_plan_tiers, load_config


def test_free_plan_limits_from_config():
    limits = get_plan_limits('free')
    assert limits.is_free
    assert (limits.max_categories, limits.max_budgets, limits.max_transactions) == (10, 10, 10)


def test_paid_plans_are_unlimited():
    for tier in ('pro', 'enterprise'):
        limits = get_plan_limits(tier)
        assert not limits.is_free
        assert limits.max_categories is None
        assert limits.max_budgets is None


def test_unknown_tier_rejected():
    with pytest.raises(ValidationError):
        get_plan_limits('platinum')


def test_category_limit_reached_at_max():
    limits = get_plan_limits('free')
    assert check_category_limit(limits, 9) is None
    assert check_category_limit(limits, 10) == LimitReached(kind='categories', current=10, max=10)


def test_budget_limit_only_applies_to_new_budgets():
    limits = get_plan_limits('free')
    assert check_budget_limit(limits, 10, has_budget=False) == LimitReached('budgets', 10, 10)
    assert check_budget_limit(limits, 10, has_budget=True) is None
    assert check_budget_limit(limits, 3, has_budget=False) is None


def test_transaction_limit():
    limits = get_plan_limits('free')
    assert check_transaction_limit(limits, 10).kind == 'transactions'
    assert check_transaction_limit(limits, 0) is None


def test_paid_plan_bypasses_checks():
    limits = get_plan_limits('pro')
    assert check_category_limit(limits, 10_000) is None
    assert check_budget_limit(limits, 10_000, has_budget=False) is None
    assert check_transaction_limit(limits, 10_000) is None


def test_limit_error_carries_result():
    limit = LimitReached('categories', 10, 10)
    error = LimitReachedError(limit)
    assert error.kind == 'categories'
    assert error.limit is limit
    assert '10/10' in str(error)


def test_config_loader():
    assert get_plan_tiers()['free']['max_budgets'] == 10
    assert get_plan_tiers()['pro']['max_categories'] is None
    names = [entry['name'] for entry in get_default_categories()]
    assert 'Groceries' in names
    assert len(names) == len(set(names))
    with pytest.raises(FileNotFoundError):
        load_config('nope')
