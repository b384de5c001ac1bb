"""
Audit Models for Expense Tracker

Every user action against the expense store is recorded as an event.
This provides:
1. Traceability of creates and deletes
2. Debugging information when the API misbehaves
3. A history that can be reconstructed from logs

DESIGN DECISION: Audit events are immutable once built.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Expense entry
    EXPENSE_CREATED = "expense_created"
    EXPENSE_CREATE_FAILED = "expense_create_failed"
    EXPENSE_VALIDATION_FAILED = "expense_validation_failed"

    # Expense list
    EXPENSES_LISTED = "expenses_listed"
    EXPENSES_LIST_FAILED = "expenses_list_failed"
    EXPENSE_DELETED = "expense_deleted"
    EXPENSE_DELETE_FAILED = "expense_delete_failed"

    # Analytics
    ANALYTICS_COMPUTED = "analytics_computed"
    ANALYTICS_FAILED = "analytics_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """
    model_config = ConfigDict(frozen=True)

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'analytics')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity, as assigned by storage"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None
    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_created(expense_id, "Groceries", "450.00")
    """

    @staticmethod
    def expense_created(
        expense_id: Optional[str],
        category: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_CREATED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense added: {category} - {amount}",
            details={
                "category": category,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_create_failed(
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_CREATE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="expense",
            correlation_id=correlation_id,
            description="Failed to add expense",
            error_message=error_message,
        )

    @staticmethod
    def expense_validation_failed(
        errors: dict[str, str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            correlation_id=correlation_id,
            description=f"Expense form rejected with {len(errors)} errors",
            details={"errors": errors},
            is_user_action=True,
        )

    @staticmethod
    def expenses_listed(
        result_count: int,
        filters: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_LISTED,
            severity=AuditSeverity.DEBUG,
            entity_type="expense",
            correlation_id=correlation_id,
            description=f"Listed {result_count} expenses",
            details={
                "result_count": result_count,
                "filters": filters,
            },
        )

    @staticmethod
    def expenses_list_failed(
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_LIST_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="expense",
            correlation_id=correlation_id,
            description="Failed to load expenses",
            error_message=error_message,
        )

    @staticmethod
    def expense_deleted(
        expense_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense deleted: {expense_id}",
            is_user_action=True,
        )

    @staticmethod
    def expense_delete_failed(
        expense_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Failed to delete expense: {expense_id}",
            error_message=error_message,
        )

    @staticmethod
    def analytics_computed(
        timeframe: str,
        bucket_count: int,
        grand_total: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ANALYTICS_COMPUTED,
            severity=AuditSeverity.DEBUG,
            entity_type="analytics",
            correlation_id=correlation_id,
            description=f"Analytics computed for {timeframe}: {bucket_count} months",
            details={
                "timeframe": timeframe,
                "bucket_count": bucket_count,
                "grand_total": grand_total,
            },
        )

    @staticmethod
    def analytics_failed(
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ANALYTICS_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="analytics",
            correlation_id=correlation_id,
            description="Failed to load analytics",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
