"""HTTP route blueprints."""

from expense_tracker.api.routes import expenses, system, users

__all__ = ["expenses", "system", "users"]
