"""
Two-Stage Validation Pipeline

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence
- Type coercion (amount to number, date string to calendar date)
- Category membership
- This catches malformed request bodies

STAGE 2 - SEMANTIC VALIDATION:
- Future date detection
- Length limits on title and description
- Negative amounts
- This catches well-formed but impossible data

Stage 2 only sees fields that survived stage 1, so a missing date is
reported once as missing and never again as "in the future".

IMPORTANT: Validation NEVER silently fixes issues other than trimming
whitespace. Everything else is reported back to the caller as a list of
human-readable messages.
"""

import datetime as dt
import math
from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError

from expense_tracker.models.expense import (
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    DateRange,
    ExpenseCategory,
    ExpenseCreate,
    ExpenseFilter,
    ExpenseUpdate,
    ValidationIssue,
    ValidationResult,
)
from expense_tracker.models.user import (
    PASSWORD_MIN_LENGTH,
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
    LoginRequest,
    RegisterRequest,
)


# Fields create requires and update ignores when blank
REQUIRED_EXPENSE_FIELDS = ("title", "amount", "category", "date")


class ExpenseValidationError(Exception):
    """Request data failed validation. Carries every issue found."""

    def __init__(self, issues: list[ValidationIssue]):
        self.result = ValidationResult(issues=issues)
        super().__init__("; ".join(self.messages) or "Validation failed")

    @property
    def issues(self) -> list[ValidationIssue]:
        return self.result.issues

    @property
    def messages(self) -> list[str]:
        return self.result.messages


def is_blank(value: Any) -> bool:
    """None, empty string and whitespace-only strings count as not supplied."""
    return value is None or (isinstance(value, str) and not value.strip())


def is_falsy(value: Any) -> bool:
    """
    Blank, false or numeric zero.

    An update leaves title, amount, category and date unchanged when the
    caller sends one of these. A numeric string such as "0" is not falsy.
    """
    if is_blank(value) or value is False:
        return True
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0


def parse_date(value: Any) -> Optional[dt.date]:
    """
    Parse a calendar date from a request value.

    Accepts YYYY-MM-DD or a full ISO 8601 timestamp (only the date part is
    kept). Returns None when the value cannot be read as a date.
    """
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    try:
        return dt.date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return dt.datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def parse_amount(value: Any) -> Optional[float]:
    """Read an amount from a number or numeric string; None if unreadable."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        amount = float(value)
    elif isinstance(value, str):
        try:
            amount = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return amount if math.isfinite(amount) else None


def _issue(field: str, issue_type: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, issue_type=issue_type, message=message)


def _issues_from_pydantic(error: ValidationError) -> list[ValidationIssue]:
    issues = []
    for detail in error.errors():
        field = ".".join(str(part) for part in detail["loc"]) or "body"
        issues.append(_issue(field, detail["type"], f"{field}: {detail['msg']}"))
    return issues


class ExpenseValidator:
    """
    Validates raw request bodies and turns them into typed input models.

    Dates are checked against `today`, which tests replace to pin the
    calendar.
    """

    def __init__(self, today: Callable[[], dt.date] = dt.date.today):
        self._today = today

    # =========================================================================
    # STAGE 1: SCHEMA
    # =========================================================================

    def _check_body(self, payload: Any) -> list[ValidationIssue]:
        if not isinstance(payload, Mapping):
            return [_issue("body", "invalid_type", "Request body must be a JSON object")]
        return []

    def _parse_field(
        self,
        name: str,
        value: Any,
        clean: dict[str, Any],
        issues: list[ValidationIssue],
    ) -> None:
        """Coerce one non-blank expense field into clean, or record an issue."""
        if name == "title":
            if not isinstance(value, str):
                issues.append(_issue("title", "invalid_type", "Title must be text"))
            else:
                clean["title"] = value.strip()

        elif name == "amount":
            amount = parse_amount(value)
            if amount is None:
                issues.append(_issue("amount", "invalid_type", "Amount must be a number"))
            else:
                clean["amount"] = amount

        elif name == "category":
            if value not in ExpenseCategory.values():
                issues.append(_issue(
                    "category",
                    "invalid_choice",
                    f"Category must be one of: {', '.join(ExpenseCategory.values())}",
                ))
            else:
                clean["category"] = ExpenseCategory(value)

        elif name == "date":
            parsed = parse_date(value)
            if parsed is None:
                issues.append(_issue("date", "invalid_format", "Date must be a valid date (YYYY-MM-DD)"))
            else:
                clean["date"] = parsed

        elif name == "description":
            if value is None:
                clean["description"] = ""
            elif not isinstance(value, str):
                issues.append(_issue("description", "invalid_type", "Description must be text"))
            else:
                clean["description"] = value.strip()

    # =========================================================================
    # STAGE 2: SEMANTIC
    # =========================================================================

    def _check_semantics(self, clean: dict[str, Any]) -> list[ValidationIssue]:
        issues = []

        amount = clean.get("amount")
        if amount is not None and amount < 0:
            issues.append(_issue("amount", "invalid_value", "Amount cannot be negative"))

        title = clean.get("title")
        if title is not None and len(title) > TITLE_MAX_LENGTH:
            issues.append(_issue(
                "title",
                "too_long",
                f"Title cannot exceed {TITLE_MAX_LENGTH} characters",
            ))

        description = clean.get("description")
        if description is not None and len(description) > DESCRIPTION_MAX_LENGTH:
            issues.append(_issue(
                "description",
                "too_long",
                f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters",
            ))

        expense_date = clean.get("date")
        if expense_date is not None and expense_date > self._today():
            issues.append(_issue("date", "future_date", "Date cannot be in the future"))

        return issues

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def validate_create(self, payload: Any) -> ExpenseCreate:
        """
        Validate a create request.

        Raises:
            ExpenseValidationError: With every issue found across both stages
        """
        issues = self._check_body(payload)
        if issues:
            raise ExpenseValidationError(issues)

        clean: dict[str, Any] = {}
        for name in REQUIRED_EXPENSE_FIELDS:
            value = payload.get(name)
            if is_blank(value):
                issues.append(_issue(name, "missing", f"{name.capitalize()} is required"))
            else:
                self._parse_field(name, value, clean, issues)

        if "description" in payload:
            self._parse_field("description", payload["description"], clean, issues)

        issues.extend(self._check_semantics(clean))
        if issues:
            raise ExpenseValidationError(issues)

        try:
            return ExpenseCreate(**clean)
        except ValidationError as e:
            raise ExpenseValidationError(_issues_from_pydantic(e)) from e

    def validate_update(self, payload: Any) -> ExpenseUpdate:
        """
        Validate a partial update.

        title, amount, category and date are only applied when supplied
        with a value that is not falsy (see is_falsy), so 0 and false leave
        them unchanged. description is applied whenever the key is
        present, so an empty string clears it.

        Raises:
            ExpenseValidationError: If any supplied field is invalid
        """
        issues = self._check_body(payload)
        if issues:
            raise ExpenseValidationError(issues)

        clean: dict[str, Any] = {}
        for name in REQUIRED_EXPENSE_FIELDS:
            value = payload.get(name)
            if not is_falsy(value):
                self._parse_field(name, value, clean, issues)

        if "description" in payload:
            self._parse_field("description", payload["description"], clean, issues)

        issues.extend(self._check_semantics(clean))
        if issues:
            raise ExpenseValidationError(issues)

        try:
            return ExpenseUpdate(**clean)
        except ValidationError as e:
            raise ExpenseValidationError(_issues_from_pydantic(e)) from e

    def validate_registration(self, payload: Any) -> RegisterRequest:
        """
        Validate a registration request.

        Raises:
            ExpenseValidationError: On missing fields, bad lengths or a
                malformed email
        """
        issues = self._check_body(payload)
        if issues:
            raise ExpenseValidationError(issues)

        missing = [
            name for name in ("username", "email", "password")
            if is_blank(payload.get(name))
        ]
        if missing:
            raise ExpenseValidationError([
                _issue(name, "missing", f"{name.capitalize()} is required")
                for name in missing
            ])

        try:
            return RegisterRequest(
                username=payload["username"],
                email=payload["email"],
                password=payload["password"],
            )
        except ValidationError as e:
            raise ExpenseValidationError(self._registration_issues(e)) from e

    @staticmethod
    def _registration_issues(error: ValidationError) -> list[ValidationIssue]:
        messages = {
            "username": (
                f"Username must be between {USERNAME_MIN_LENGTH} and "
                f"{USERNAME_MAX_LENGTH} characters"
            ),
            "email": "Please provide a valid email",
            "password": f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
        }
        issues = []
        for detail in error.errors():
            field = str(detail["loc"][0]) if detail["loc"] else "body"
            message = messages.get(field, f"{field}: {detail['msg']}")
            issues.append(_issue(field, detail["type"], message))
        return issues

    def validate_login(self, payload: Any) -> LoginRequest:
        """Require email and password; their correctness is the authenticator's job."""
        issues = self._check_body(payload)
        if issues:
            raise ExpenseValidationError(issues)

        email = payload.get("email")
        password = payload.get("password")
        if is_blank(email) or is_blank(password) or not isinstance(email, str) \
                or not isinstance(password, str):
            raise ExpenseValidationError([
                _issue("credentials", "missing", "Please provide email and password")
            ])
        return LoginRequest(email=email, password=password)


# =============================================================================
# QUERY PARAMETERS
# =============================================================================

def _parse_date_param(args: Mapping[str, Any], key: str, issues: list[ValidationIssue]) -> Optional[dt.date]:
    value = args.get(key)
    if is_blank(value):
        return None
    parsed = parse_date(value)
    if parsed is None:
        issues.append(_issue(key, "invalid_format", f"{key} must be a valid date (YYYY-MM-DD)"))
    return parsed


def parse_date_range(args: Mapping[str, Any]) -> DateRange:
    """
    Read startDate/endDate query parameters.

    Raises:
        ExpenseValidationError: If either is present but not a date
    """
    issues: list[ValidationIssue] = []
    start = _parse_date_param(args, "startDate", issues)
    end = _parse_date_param(args, "endDate", issues)
    if issues:
        raise ExpenseValidationError(issues)
    return DateRange(start_date=start, end_date=end)


def parse_expense_filter(args: Mapping[str, Any]) -> ExpenseFilter:
    """Read category, date range and search query parameters."""
    date_range = parse_date_range(args)
    category = args.get("category")
    search = args.get("search")
    return ExpenseFilter(
        start_date=date_range.start_date,
        end_date=date_range.end_date,
        category=category.strip() if isinstance(category, str) and category.strip() else None,
        search=search if isinstance(search, str) else None,
    )


def _parse_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_page_params(
    args: Mapping[str, Any],
    default_size: int,
    max_size: int,
) -> tuple[int, int]:
    """
    Read page and limit query parameters.

    Unparsable values fall back to defaults, page is at least 1 and limit
    is clamped to [1, max_size].
    """
    page = max(1, _parse_int(args.get("page"), 1))
    limit = _parse_int(args.get("limit"), default_size)
    limit = min(max(1, limit), max_size)
    return page, limit
