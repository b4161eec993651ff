"""
Audit Models for Expense Tracker

Each register, login, expense write, query and unexpected failure
produces one AuditEvent, written through the structlog pipeline. The
trail answers who did what to which record, and when.

DESIGN DECISION: Audit events never carry passwords, password hashes or
tokens. Builders below are the only place events are assembled, so that
rule is enforced in one file.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Identity
    USER_REGISTERED = "user_registered"
    REGISTRATION_CONFLICT = "registration_conflict"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    TOKEN_REJECTED = "token_rejected"

    # Expense records
    EXPENSE_CREATED = "expense_created"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    VALIDATION_FAILED = "validation_failed"

    # Query operations
    QUERY_EXECUTED = "query_executed"
    SUMMARY_COMPUTED = "summary_computed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    One entry in the audit trail.

    `resource` names what the event is about ("user", "expense", "query")
    and `resource_id` which one; `actor_id` is the user acting. Events from
    one HTTP request share a correlation_id.
    """

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=_utcnow)
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    resource: Optional[str] = None
    resource_id: Optional[UUID] = None
    actor_id: Optional[UUID] = None
    correlation_id: Optional[UUID] = None

    summary: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict[str, Any]:
        """JSON-safe key/value pairs for structlog; unset optional fields are left out."""
        return self.model_dump(mode="json", exclude_none=True)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.user_registered(user_id, username)
        event = AuditEventBuilder.expense_deleted(expense_id, actor_id, correlation_id)
    """

    @staticmethod
    def user_registered(
        user_id: UUID,
        username: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            resource="user",
            resource_id=user_id,
            actor_id=user_id,
            correlation_id=correlation_id,
            summary=f"User registered: {username}",
            details={"username": username},
        )

    @staticmethod
    def registration_conflict(
        username: str,
        email: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REGISTRATION_CONFLICT,
            severity=AuditSeverity.WARNING,
            resource="user",
            correlation_id=correlation_id,
            summary="Registration rejected: username or email already taken",
            details={"username": username, "email": email},
        )

    @staticmethod
    def login_succeeded(
        user_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            resource="user",
            resource_id=user_id,
            actor_id=user_id,
            correlation_id=correlation_id,
            summary="Login succeeded",
        )

    @staticmethod
    def login_failed(
        email: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        # Same event for unknown email and wrong password.
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            resource="user",
            correlation_id=correlation_id,
            summary="Login failed",
            details={"email": email},
        )

    @staticmethod
    def token_rejected(
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TOKEN_REJECTED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            summary=f"Bearer token rejected: {reason}",
            details={"reason": reason},
        )

    @staticmethod
    def expense_created(
        expense_id: UUID,
        actor_id: UUID,
        category: str,
        amount: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_CREATED,
            resource="expense",
            resource_id=expense_id,
            actor_id=actor_id,
            correlation_id=correlation_id,
            summary=f"Expense created: {category} {amount:.2f}",
            details={"category": category, "amount": amount},
        )

    @staticmethod
    def expense_updated(
        expense_id: UUID,
        actor_id: UUID,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            resource="expense",
            resource_id=expense_id,
            actor_id=actor_id,
            correlation_id=correlation_id,
            summary=f"Expense updated ({len(changed_fields)} fields)",
            details={"changed_fields": changed_fields},
        )

    @staticmethod
    def expense_deleted(
        expense_id: UUID,
        actor_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            resource="expense",
            resource_id=expense_id,
            actor_id=actor_id,
            correlation_id=correlation_id,
            summary="Expense deleted",
        )

    @staticmethod
    def validation_failed(
        resource: str,
        messages: list[str],
        actor_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            resource=resource,
            actor_id=actor_id,
            correlation_id=correlation_id,
            summary=f"Validation failed with {len(messages)} issues",
            details={"messages": messages},
        )

    @staticmethod
    def query_executed(
        actor_id: UUID,
        page: int,
        result_count: int,
        total: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.QUERY_EXECUTED,
            resource="query",
            actor_id=actor_id,
            correlation_id=correlation_id,
            summary=f"Expense list page {page} returned {result_count} of {total}",
            details={"page": page, "result_count": result_count, "total": total},
        )

    @staticmethod
    def summary_computed(
        actor_id: UUID,
        total_count: int,
        category_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUMMARY_COMPUTED,
            resource="query",
            actor_id=actor_id,
            correlation_id=correlation_id,
            summary=f"Summary over {total_count} expenses in {category_count} categories",
            details={"total_count": total_count, "category_count": category_count},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            summary=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
