"""Import all models so Base.metadata sees every table."""
from notify_service.infrastructure.db.models.message import MessageModel

__all__ = [
    "MessageModel",
]
