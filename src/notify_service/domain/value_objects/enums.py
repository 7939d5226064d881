from __future__ import annotations

from enum import StrEnum


class MessageStatus(StrEnum):
    UNREAD = "unread"
    READ = "read"
    REPLIED = "replied"
    ARCHIVED = "archived"


class MessageType(StrEnum):
    GENERAL = "general"
    BOOKING = "booking"
    SYSTEM = "system"


class MessagePriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Role(StrEnum):
    CUSTOMER = "customer"
    VENDOR = "vendor"
    STAFF = "staff"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


STAFF_ROLES = frozenset({Role.STAFF, Role.ADMIN, Role.SUPER_ADMIN})

PUBLIC_CHANNEL = "public"
ALL_CHANNELS = "*"
