"""
Expense Tracker - Source Package

A personal expense tracker: a list of expenses kept in on-device
key-value storage, with totals for all time and for the current month.

DESIGN PRINCIPLES:
1. Validate before touching anything
2. Storage always mirrors memory after a mutation completes
3. No silent corrections
4. Every change is audited
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
