"""Top-level package for ClearCents.

ClearCents tracks spending against per-category budgets.  The primary
modules are:

* ``calculations`` – spend aggregation, budget status and totals
* ``periods`` – weekly / monthly / yearly windows and period conversion
* ``limits`` – plan tiers and category / budget / transaction limits
* ``db`` – the SQLite store for categories, budgets and transactions
* ``service`` – store access combined with plan-limit enforcement
* ``dashboard`` – a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run clearcents/dashboard.py
```
"""

from . import calculations  # noqa: F401  # re-exported for convenience
from . import periods  # noqa: F401  # re-exported for convenience
from .calculations import budget_status, category_spent  # noqa: F401
from .db import FinanceStore  # noqa: F401
from .errors import (  # noqa: F401
    ClearCentsError,
    LimitReached,
    LimitReachedError,
    NotFoundError,
    ProtectedCategoryError,
    ValidationError,
)
from .models import Budget, Category, Period, Transaction  # noqa: F401
from .service import BudgetService  # noqa: F401

# Streamlit may not be installed in all environments (e.g. during unit
# testing).  If the import fails, expose ``None`` instead.
try:
    from . import dashboard  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    dashboard = None  # type: ignore


__all__ = [
    "calculations",
    "periods",
    "dashboard",
    "budget_status",
    "category_spent",
    "FinanceStore",
    "BudgetService",
    "Budget",
    "Category",
    "Period",
    "Transaction",
    "ClearCentsError",
    "LimitReached",
    "LimitReachedError",
    "NotFoundError",
    "ProtectedCategoryError",
    "ValidationError",
]
