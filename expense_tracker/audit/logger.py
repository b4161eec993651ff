"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Complete traceability of who did what to which record
2. Debugging capability when a request fails
3. A record of failed logins and rejected tokens

The audit logger:
- Writes structured JSON lines through structlog
- Gracefully handles failures (doesn't crash the request if logging fails)
- Supports correlation IDs to trace all events of one request
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from expense_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def configure_logging(level: str = "INFO") -> None:
    """
    Configure stdlib logging and structlog once per process.

    Both the audit trail and ordinary module loggers end up on stderr as
    JSON lines at the configured level.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Components receive one instance from the factory and call the typed
    log_* helpers; nothing else builds AuditEvents.
    """

    def __init__(self, logger_name: str = "expense_tracker.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written. Never raises.
        """
        try:
            log_dict = event.to_log_dict()
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
            return True
        except Exception:
            return False

    # Identity

    def log_user_registered(
        self,
        user_id: UUID,
        username: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.user_registered(user_id, username, correlation_id))

    def log_registration_conflict(
        self,
        username: str,
        email: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.registration_conflict(username, email, correlation_id))

    def log_login_succeeded(
        self,
        user_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.login_succeeded(user_id, correlation_id))

    def log_login_failed(
        self,
        email: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.login_failed(email, correlation_id))

    def log_token_rejected(
        self,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.token_rejected(reason, correlation_id))

    # Expense records

    def log_expense_created(
        self,
        expense_id: UUID,
        actor_id: UUID,
        category: str,
        amount: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log expense creation."""
        self.log(AuditEventBuilder.expense_created(
            expense_id=expense_id,
            actor_id=actor_id,
            category=category,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_expense_updated(
        self,
        expense_id: UUID,
        actor_id: UUID,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log expense update. Only field names are logged, not values."""
        self.log(AuditEventBuilder.expense_updated(
            expense_id=expense_id,
            actor_id=actor_id,
            changed_fields=changed_fields,
            correlation_id=correlation_id,
        ))

    def log_expense_deleted(
        self,
        expense_id: UUID,
        actor_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log expense deletion."""
        self.log(AuditEventBuilder.expense_deleted(expense_id, actor_id, correlation_id))

    def log_validation_failed(
        self,
        resource: str,
        messages: list[str],
        actor_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log validation failure."""
        self.log(AuditEventBuilder.validation_failed(
            resource=resource,
            messages=messages,
            actor_id=actor_id,
            correlation_id=correlation_id,
        ))

    # Queries

    def log_query_executed(
        self,
        actor_id: UUID,
        page: int,
        result_count: int,
        total: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log query execution."""
        self.log(AuditEventBuilder.query_executed(
            actor_id=actor_id,
            page=page,
            result_count=result_count,
            total=total,
            correlation_id=correlation_id,
        ))

    def log_summary_computed(
        self,
        actor_id: UUID,
        total_count: int,
        category_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.summary_computed(
            actor_id=actor_id,
            total_count=total_count,
            category_count=category_count,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    The API creates one at the start of each request and passes it
    through all subsequent operations.
    """
    return uuid4()
