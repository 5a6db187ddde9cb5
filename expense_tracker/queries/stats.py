"""
Expense Aggregation

DESIGN DECISION: Aggregation is a set of pure functions over a snapshot.
They never touch storage, so the numbers shown always match the list
rendered next to them.
"""

from decimal import Decimal
from typing import Iterable

from expense_tracker.models.expense import CategoryTotal, Expense, ExpenseStats


def compute_stats(
    expenses: Iterable[Expense],
    month: int,
    year: int,
) -> ExpenseStats:
    """
    Lifetime totals plus totals for one month.

    A record counts toward the month when its creation timestamp
    falls in it; the user-entered date is not consulted.
    """
    total = Decimal("0")
    monthly_total = Decimal("0")
    count = 0
    monthly_count = 0

    for expense in expenses:
        total += expense.amount
        count += 1
        if expense.in_month(month, year):
            monthly_total += expense.amount
            monthly_count += 1

    return ExpenseStats(
        month=month,
        year=year,
        total=total,
        monthly_total=monthly_total,
        count=count,
        monthly_count=monthly_count,
    )


def totals_by_category(expenses: Iterable[Expense]) -> list[CategoryTotal]:
    """Totals per category, largest first (ties by category name)."""
    groups: dict[str, list[Decimal]] = {}

    for expense in expenses:
        groups.setdefault(expense.category, []).append(expense.amount)

    totals = [
        CategoryTotal(category=key, total=sum(amounts, Decimal("0")), count=len(amounts))
        for key, amounts in groups.items()
    ]
    totals.sort(key=lambda t: (-t.total, t.category))
    return totals


def totals_by_month(expenses: Iterable[Expense]) -> dict[str, Decimal]:
    """Totals keyed by creation month ("YYYY-MM"), oldest month first."""
    groups: dict[str, Decimal] = {}

    for expense in expenses:
        key = expense.timestamp.strftime("%Y-%m")
        groups[key] = groups.get(key, Decimal("0")) + expense.amount

    return dict(sorted(groups.items()))
