"""Core enums used across modules."""

from enum import StrEnum


class RoleEnum(StrEnum):
    """Caller roles issued by the identity provider."""

    STUDENT = "student"
    ADVISOR = "advisor"
    ADMIN = "admin"


STAFF_ROLES = frozenset({RoleEnum.ADVISOR, RoleEnum.ADMIN})


class SessionStatusEnum(StrEnum):
    """Advising session lifecycle status."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_SESSION_STATUSES = frozenset({SessionStatusEnum.COMPLETED, SessionStatusEnum.CANCELLED})


class PolicyScopeEnum(StrEnum):
    """Availability policy scope."""

    GLOBAL = "global"
    ADVISOR = "advisor"


class CacheBackendEnum(StrEnum):
    """Supported session view cache backends."""

    NONE = "none"
    MEMORY = "memory"
    REDIS = "redis"


class OutboxStatusEnum(StrEnum):
    """Outbox event status for integration publishing."""

    PENDING = "pending"
    PROCESSED = "processed"
    FAILED = "failed"
