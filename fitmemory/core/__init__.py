# Core memory service components
from .memory_service import MemoryService, reinforce_confidence
from .notifications import ChangeNotificationChannel, Subscription

__all__ = [
    "MemoryService",
    "ChangeNotificationChannel",
    "Subscription",
    "reinforce_confidence",
]
