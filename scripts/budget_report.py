#!/usr/bin/env python3
"""Print a user's budget overview for a period."""

from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from clearcents.db import FinanceStore
from clearcents.formatting import format_currency, format_percentage
from clearcents.service import BudgetService


def main(user_id: str, period: str = 'monthly', on: Optional[str] = None, db_path: Optional[str] = None) -> None:
    store = FinanceStore(db_path)
    store.init_db()
    service = BudgetService(store)
    now = date.fromisoformat(on) if on else None
    overview = service.overview(user_id, period, now)

    if overview.progress.empty:
        print(f"No categories for user '{user_id}'.")
        return

    print(f"{period.capitalize()} budget for {user_id}: {overview.window.start} to {overview.window.end}")
    print(f"  Budgeted:  {format_currency(overview.total_budgeted)}")
    print(f"  Spent:     {format_currency(overview.total_spent)}")
    print(f"  Remaining: {format_currency(overview.remaining)}")
    print(f"  Used:      {format_percentage(overview.overall_percentage)}")

    table = overview.progress[['Category', 'Budget', 'Spent', 'Remaining', 'Percent Used', 'Status']]
    print()
    print(table.to_string(index=False, float_format=lambda v: f"{v:,.2f}"))


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Show budget progress per category.')
    parser.add_argument('user_id', help='User whose budgets to report')
    parser.add_argument('--period', choices=['weekly', 'monthly', 'yearly'], default='monthly')
    parser.add_argument('--on', help='Reference date (YYYY-MM-DD), defaults to today')
    parser.add_argument('--db', dest='db_path', help='SQLite file, defaults to CLEARCENTS_DB_PATH')
    args = parser.parse_args()
    main(args.user_id, period=args.period, on=args.on, db_path=args.db_path)
