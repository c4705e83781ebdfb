"""
MoneyMind - Source Package

A single-user personal finance tracker: accounts, categorized
transactions, budgets and savings goals.

DESIGN PRINCIPLES:
1. Account balances always equal opening balance + transaction effects
2. Every mutation is all-or-nothing and saved immediately
3. No process-wide state; callers hold an explicit session
4. Every change is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "MoneyMind Team"
