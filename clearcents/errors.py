"""Error taxonomy for budget, category and transaction operations.

None of these are fatal: each one is scoped to the single operation that
raised it and carries enough context for the caller to build a message.
"""

from __future__ import annotations

from dataclasses import dataclass

LIMIT_CATEGORIES = 'categories'
LIMIT_BUDGETS = 'budgets'
LIMIT_TRANSACTIONS = 'transactions'


@dataclass(frozen=True)
class LimitReached:
    """A plan limit blocked a create request."""
    kind: str
    current: int
    max: int

    @property
    def message(self) -> str:
        return (
            f"You've reached your limit of {self.max} {self.kind} "
            f"on your current plan ({self.current}/{self.max}). Upgrade to add more."
        )


class ClearCentsError(Exception):
    """Base class for all domain errors."""


class LimitReachedError(ClearCentsError):
    def __init__(self, limit: LimitReached):
        super().__init__(limit.message)
        self.limit = limit

    @property
    def kind(self) -> str:
        return self.limit.kind


class ProtectedCategoryError(ClearCentsError):
    def __init__(self, category_id: int, name: str = ''):
        label = f"'{name}'" if name else f"#{category_id}"
        super().__init__(f"Category {label} is predefined and cannot be deleted")
        self.category_id = category_id


class NotFoundError(ClearCentsError, LookupError):
    def __init__(self, entity: str, key: object):
        super().__init__(f"{entity} {key!r} not found")
        self.entity = entity
        self.key = key


class ValidationError(ClearCentsError, ValueError):
    """Raised for malformed input such as a non-positive budget amount."""
