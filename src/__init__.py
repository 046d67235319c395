"""
Finance Insights - Source Package

The analytical core of a personal-finance tracker: ledger rollups,
AI-generated advice, finance Q&A and budget-bounded product
recommendations.

DESIGN PRINCIPLES:
1. Numbers are computed here, never by the model
2. Reject bad input before calling the model
3. A bad model reply degrades, it never crashes
4. Every step must be auditable
5. Storage and model gateway are swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Insights Team"
