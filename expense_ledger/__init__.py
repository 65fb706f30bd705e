"""
Expense Ledger - Source Package

A local personal-finance ledger: record expenses, then view them through
a time window (all / this week / this month) and a category filter, with
totals and per-category shares.

DESIGN PRINCIPLES:
1. The ledger engine is pure: snapshot in, view out
2. Only two hard validation failures; everything else degrades gracefully
3. Nothing is written without passing validation
4. Every write is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Ledger Team"
