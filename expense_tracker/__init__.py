"""
Expense Tracker - Source Package

A personal expense tracker: record expenses, browse and filter them,
and view spending analytics. Persistence lives behind a remote HTTP API.

DESIGN PRINCIPLES:
1. Analytics are pure functions of the fetched data
2. Fail early, fail visibly
3. No silent corrections
4. Every user action is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
