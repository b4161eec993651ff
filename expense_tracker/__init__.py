"""
Expense Tracker - Source Package

A personal expense tracker: users register, sign in with a bearer token,
and keep a private list of expenses they can filter, page through and
summarize by category.

DESIGN PRINCIPLES:
1. Every expense belongs to exactly one user, and every read or write is
   scoped to the caller
2. Fail early, fail visibly: invalid input is rejected with readable messages
3. Tokens are stateless; the signing secret is the only server-side state
4. Every significant action is audited
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
